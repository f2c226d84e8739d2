"""Chain registry: the authoritative catalog of chain descriptors."""

import logging
from typing import Optional

from bskt.contracts.chains import ChainCreate, ChainUpdate
from bskt.errors import ConflictError
from bskt.registry.base import Registry
from bskt.registry.models import Chain, ChainName, NetType, utcnow

logger = logging.getLogger(__name__)


class ChainRegistry(Registry):
    """Registers, reads and updates chains. Chains are never deleted."""

    model = Chain
    snapshot_name = "chains"
    kind = "Chain"

    async def register(self, data: ChainCreate) -> Chain:
        """Register a new chain.

        Raises:
            ConflictError: If the chain id is already registered
        """
        async with self._lock, self.db.session() as session:
            if await self._get(session, data.id) is not None:
                raise ConflictError(f"Chain {data.id} already exists")

            now = utcnow()
            chain = Chain(
                id=data.id,
                name=data.name.value,
                display_name=data.display_name,
                chain_id=data.chain_id,
                rpc_url=data.rpc_url,
                explorer_url=data.explorer_url,
                native_currency=data.native_currency.model_dump(),
                is_testnet=data.is_testnet,
                extra=data.metadata,
                created_at=now,
                updated_at=now,
            )
            session.add(chain)
            await self._commit_and_snapshot(session)

        logger.info(f"Registered chain: {chain.id} ({chain.name}, chainId: {chain.chain_id})")
        return chain

    async def get_by_name(self, name: ChainName) -> Optional[Chain]:
        """Get the first registered chain with a symbolic name."""
        async with self.db.session() as session:
            chains = await self._all(session, Chain.name == ChainName(name).value)
            return chains[0] if chains else None

    async def list_by_net_type(self, net_type: NetType) -> list[Chain]:
        """Mainnet or testnet chains only."""
        testnet = NetType(net_type) is NetType.TESTNET
        async with self.db.session() as session:
            return await self._all(session, Chain.is_testnet == testnet)

    async def update(self, chain_id: str, data: ChainUpdate) -> Chain:
        """Merge the provided fields into a chain and bump updated_at.

        Raises:
            NotFoundError: If the chain is not registered
        """
        changes = data.model_dump(exclude_unset=True)
        async with self._lock, self.db.session() as session:
            chain = await self._require(session, chain_id)

            for field, value in changes.items():
                if field == "metadata":
                    chain.extra = value
                elif field == "name" and value is not None:
                    chain.name = ChainName(value).value
                elif value is not None:
                    setattr(chain, field, value)
            chain.updated_at = utcnow()
            await self._commit_and_snapshot(session)

        logger.info(f"Updated chain: {chain_id} ({', '.join(changes) or 'no fields'})")
        return chain
