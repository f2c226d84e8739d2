"""Timestamped JSON snapshots of the registries.

Every registry mutation schedules a full snapshot of that registry's catalog.
Snapshots are written by a background task draining a bounded queue, so a
slow or failing backup directory never blocks or fails the mutation itself.
Failures are logged and counted for /health/detailed.
"""

import asyncio
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


def snapshot_filename(name: str, when: Optional[datetime] = None) -> str:
    """Build `<name>-<iso timestamp>.json` with ':' and '.' made path-safe."""
    when = when or datetime.now(timezone.utc)
    stamp = when.strftime("%Y-%m-%dT%H-%M-%S-%fZ")
    return f"{name}-{stamp}.json"


def list_snapshots(backup_dir: Path, name: Optional[str] = None) -> list[Path]:
    """Snapshots in `backup_dir`, newest first."""
    if not backup_dir.exists():
        return []
    pattern = f"{name}-*.json" if name else "*.json"
    return sorted(backup_dir.glob(pattern), key=lambda p: p.name, reverse=True)


def rotate_snapshots(backup_dir: Path, name: str, keep: int) -> list[Path]:
    """Remove all but the `keep` newest snapshots of `name`.

    Returns:
        The removed paths
    """
    removed = []
    for old in list_snapshots(backup_dir, name)[keep:]:
        old.unlink()
        removed.append(old)
    return removed


class SnapshotBackup:
    """Bounded, best-effort snapshot writer."""

    def __init__(self, backup_dir: Path, max_pending: int = 100):
        self.backup_dir = Path(backup_dir).expanduser()
        self._queue: asyncio.Queue = asyncio.Queue(maxsize=max_pending)
        self._worker: Optional[asyncio.Task] = None
        self.failures = 0
        self.written = 0

    @property
    def running(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def start(self) -> None:
        """Start the background writer."""
        if self.running:
            return
        self._worker = asyncio.create_task(self._run(), name="snapshot-backup")
        logger.info(f"Snapshot backups enabled: {self.backup_dir}")

    async def stop(self) -> None:
        """Drain pending snapshots, then stop the writer."""
        if not self.running:
            return
        await self._queue.join()
        self._worker.cancel()
        try:
            await self._worker
        except asyncio.CancelledError:
            pass
        self._worker = None

    async def flush(self) -> None:
        """Wait until every scheduled snapshot has been handled."""
        if self.running:
            await self._queue.join()

    def schedule(self, name: str, data: dict[str, Any]) -> bool:
        """Queue a snapshot without blocking.

        Returns:
            False if the snapshot was dropped because the queue is full
        """
        try:
            self._queue.put_nowait((name, data, datetime.now(timezone.utc)))
            return True
        except asyncio.QueueFull:
            self.failures += 1
            logger.warning(f"Backup queue full, dropped {name} snapshot")
            return False

    async def _run(self) -> None:
        while True:
            name, data, when = await self._queue.get()
            try:
                path = await asyncio.to_thread(self._write, name, data, when)
                self.written += 1
                logger.debug(f"Backup: {path}")
            except (OSError, TypeError, ValueError) as e:
                self.failures += 1
                logger.warning(f"Failed to back up {name}: {e}")
            finally:
                self._queue.task_done()

    def _write(self, name: str, data: dict[str, Any], when: datetime) -> Path:
        self.backup_dir.mkdir(parents=True, exist_ok=True)
        path = self.backup_dir / snapshot_filename(name, when)
        path.write_text(json.dumps(data, indent=2) + "\n", encoding="utf-8")
        return path
