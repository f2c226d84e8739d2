"""Shared plumbing for the persistent registries."""

import asyncio
import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bskt.backup import SnapshotBackup
from bskt.errors import NotFoundError
from bskt.registry.database import Database

logger = logging.getLogger(__name__)


class Registry:
    """Base class owning one table, one mutation lock and the backup hook.

    Subclasses set `model` and `snapshot_name`. Mutations run under
    `self._lock`, commit, then hand the whole catalog to the backup writer.
    """

    model: type
    snapshot_name: str
    kind = "Entity"

    def __init__(self, db: Database, backup: Optional[SnapshotBackup] = None):
        self.db = db
        self.backup = backup
        self._lock = asyncio.Lock()

    async def _get(self, session: AsyncSession, entity_id: str):
        return await session.get(self.model, entity_id)

    async def _require(self, session: AsyncSession, entity_id: str):
        entity = await session.get(self.model, entity_id)
        if entity is None:
            raise NotFoundError(self.kind, entity_id)
        return entity

    async def _all(self, session: AsyncSession, *criteria) -> list:
        stmt = select(self.model).where(*criteria).order_by(self.model.created_at, self.model.id)
        result = await session.execute(stmt)
        return list(result.scalars().all())

    async def _commit_and_snapshot(self, session: AsyncSession) -> None:
        """Make the mutation durable, then schedule a catalog snapshot."""
        await session.commit()
        if self.backup is None:
            return
        rows = await self._all(session)
        self.backup.schedule(self.snapshot_name, {row.id: row.to_dict() for row in rows})

    async def get(self, entity_id: str):
        """Get an entity by id, or None."""
        async with self.db.session() as session:
            return await self._get(session, entity_id)

    async def require(self, entity_id: str):
        """Get an entity by id or raise NotFoundError."""
        async with self.db.session() as session:
            return await self._require(session, entity_id)

    async def list(self) -> list:
        """All entities in creation order."""
        async with self.db.session() as session:
            return await self._all(session)

    async def exists(self, entity_id: str) -> bool:
        return await self.get(entity_id) is not None
