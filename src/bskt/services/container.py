"""Builds every service once and wires them together."""

import logging
from dataclasses import dataclass
from typing import Optional

from bskt.backup import SnapshotBackup
from bskt.config import Settings
from bskt.por.base import PORClient
from bskt.por.factory import create_por_client
from bskt.registry import (
    AssetRegistry,
    BasketRegistry,
    ChainRegistry,
    Database,
    MintStateService,
    MultiChainAssetRegistry,
    MultiChainBasketRegistry,
    MultiChainMintStateService,
)
from bskt.services.orchestrator import MintOrchestrator
from bskt.submission.base import SubmissionClient
from bskt.submission.factory import create_submission_client

logger = logging.getLogger(__name__)


@dataclass
class Services:
    """Process-wide service graph handed to the API through app.state."""

    settings: Settings
    db: Database
    backup: Optional[SnapshotBackup]
    chains: ChainRegistry
    assets: AssetRegistry
    baskets: BasketRegistry
    mints: MintStateService
    multichain_assets: MultiChainAssetRegistry
    multichain_baskets: MultiChainBasketRegistry
    multichain_mints: MultiChainMintStateService
    orchestrator: MintOrchestrator

    async def start(self) -> None:
        """Create tables and start the backup writer."""
        await self.db.init()
        if self.backup is not None:
            await self.backup.start()
        logger.info("Services started")

    async def stop(self) -> None:
        """Drain pending snapshots and close the database."""
        if self.backup is not None:
            await self.backup.stop()
        await self.db.close()
        logger.info("Services stopped")


def build_services(
    settings: Settings,
    por: Optional[PORClient] = None,
    submitter: Optional[SubmissionClient] = None,
) -> Services:
    """Build the service graph from settings.

    Args:
        settings: Application settings
        por: POR client override (factory choice when omitted)
        submitter: Submission client override (factory choice when omitted)
    """
    db = Database(settings.database_url, echo=settings.debug)
    backup = (
        SnapshotBackup(settings.backup_dir, max_pending=settings.backup_queue_size)
        if settings.backup_enabled
        else None
    )

    chains = ChainRegistry(db, backup)
    assets = AssetRegistry(db, backup)
    baskets = BasketRegistry(db, assets, backup)
    mints = MintStateService(db, backup)
    multichain_assets = MultiChainAssetRegistry(db, chains, backup)
    multichain_baskets = MultiChainBasketRegistry(db, multichain_assets, chains, backup)
    multichain_mints = MultiChainMintStateService(db, backup)

    por = por or create_por_client(settings)
    submitter = submitter or create_submission_client(settings)
    logger.info(f"POR client: {por.name}, submission client: {submitter.name}")

    orchestrator = MintOrchestrator(
        settings=settings,
        chains=chains,
        assets=assets,
        baskets=baskets,
        mints=mints,
        multichain_assets=multichain_assets,
        multichain_baskets=multichain_baskets,
        multichain_mints=multichain_mints,
        por=por,
        submitter=submitter,
    )

    return Services(
        settings=settings,
        db=db,
        backup=backup,
        chains=chains,
        assets=assets,
        baskets=baskets,
        mints=mints,
        multichain_assets=multichain_assets,
        multichain_baskets=multichain_baskets,
        multichain_mints=multichain_mints,
        orchestrator=orchestrator,
    )
