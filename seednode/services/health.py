"""Node health aggregation."""

import logging
import shutil
import time
from pathlib import Path

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from seednode.config import get_settings
from seednode.errors import StoreUnavailableError
from seednode.services.content_store import ContentStore, StoreStats
from seednode.services.track import TrackRepository

logger = logging.getLogger("seednode")

PROC_UPTIME = Path("/proc/uptime")


def get_storage_info(path: str) -> dict:
    """Disk usage in GB (one decimal place). Zeros when unavailable."""
    try:
        usage = shutil.disk_usage(path)
    except OSError as e:
        logger.warning("Disk stats unavailable for %s: %s", path, e)
        return {"total_gb": 0.0, "used_gb": 0.0, "free_gb": 0.0}
    return {
        "total_gb": round(usage.total / 1e9, 1),
        "used_gb": round(usage.used / 1e9, 1),
        "free_gb": round(usage.free / 1e9, 1),
    }


def get_system_uptime(proc_uptime: Path = PROC_UPTIME) -> int | None:
    """Seconds since boot from /proc/uptime, or None off Linux."""
    try:
        return int(float(proc_uptime.read_text().split()[0]))
    except (OSError, ValueError, IndexError):
        return None


class HealthService:
    """Collects track count, disk, daemon and uptime stats. Each probe fails independently."""

    def __init__(
        self,
        store: ContentStore,
        repository: TrackRepository,
        started_at: float,
        disk_path: str = "/",
    ) -> None:
        self.store = store
        self.repository = repository
        self.started_at = started_at
        self.disk_path = disk_path

    def _track_count(self, db: Session) -> int:
        try:
            return self.repository.count(db)
        except SQLAlchemyError as e:
            logger.warning("Track count unavailable: %s", e)
            return 0

    async def _peer_stats(self) -> StoreStats:
        try:
            return await self.store.stats()
        except StoreUnavailableError as e:
            logger.warning("Peer stats unavailable: %s", e)
            return StoreStats()

    async def health(self, db: Session) -> dict:
        stats = await self._peer_stats()
        return {
            "status": "online",
            "track_count": self._track_count(db),
            "storage": get_storage_info(self.disk_path),
            "peer": {
                "peer_id": stats.peer_id,
                "version": stats.version,
                "peer_count": stats.peer_count,
            },
            "uptime": {
                "system_seconds": get_system_uptime(),
                "api_seconds": int(time.monotonic() - self.started_at),
            },
        }


_started_at = time.monotonic()


def create_health_service(store: ContentStore, repository: TrackRepository) -> HealthService:
    """Build a health service configured from settings."""
    settings = get_settings()
    return HealthService(store=store, repository=repository, started_at=_started_at, disk_path=settings.DISK_STATS_PATH)
