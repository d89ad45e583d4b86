"""Upload pipeline: transient storage, content store submission, and track update."""

import asyncio
import logging
import os
import uuid
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

from fastapi import UploadFile
from sqlalchemy.orm import Session

from seednode.config import get_settings
from seednode.errors import PayloadTooLargeError, StoreUnavailableError, TrackNotFoundError, UnsupportedFormatError
from seednode.models.track import Track
from seednode.services.content_store import ContentStore
from seednode.services.probe import DurationProber
from seednode.services.track import TrackRepository

logger = logging.getLogger("seednode")

ALLOWED_MIME_TYPES = {
    "audio/mpeg",
    "audio/mp4",
    "audio/x-m4a",
    "audio/aac",
    "audio/wav",
    "audio/x-wav",
    "audio/aiff",
    "audio/x-aiff",
    "audio/flac",
    "audio/ogg",
}
CHUNK_SIZE = 64 * 1024

# Shared across pipeline instances so every request for a track sees the same lock
_track_locks: weakref.WeakValueDictionary[str, asyncio.Lock] = weakref.WeakValueDictionary()


def normalize_mime_type(content_type: str | None) -> str | None:
    """Strip parameters and case from a declared content type."""
    if not content_type:
        return None
    return content_type.split(";", 1)[0].strip().lower() or None


class UploadPipeline:
    """Takes an uploaded audio file through validation, the content store, and the repository.

    Uploads to the same track are serialized so the track's current content
    and its version numbering follow request order.
    """

    def __init__(
        self,
        store: ContentStore,
        prober: DurationProber,
        repository: TrackRepository,
        upload_dir: str | Path,
        max_upload_bytes: int,
        unpin_replaced: bool = False,
    ) -> None:
        self.store = store
        self.prober = prober
        self.repository = repository
        self.upload_dir = Path(upload_dir)
        self.max_upload_bytes = max_upload_bytes
        self.unpin_replaced = unpin_replaced

    def validate_upload_metadata(self, audio: UploadFile | None) -> str:
        """Check presence, MIME type and declared size. Returns the normalized MIME type."""
        if audio is None:
            raise UnsupportedFormatError()
        mime_type = normalize_mime_type(audio.content_type)
        if mime_type not in ALLOWED_MIME_TYPES:
            raise UnsupportedFormatError()
        if audio.size is not None and audio.size > self.max_upload_bytes:
            raise PayloadTooLargeError(self._too_large_message(audio.size))
        return mime_type

    def _too_large_message(self, size: int) -> str:
        return (
            f"File too large ({size // (1024 * 1024)}MB). "
            f"Maximum: {self.max_upload_bytes // (1024 * 1024)}MB"
        )

    def _lock_for(self, track_id: str) -> asyncio.Lock:
        lock = _track_locks.get(track_id)
        if lock is None:
            lock = asyncio.Lock()
            _track_locks[track_id] = lock
        return lock

    @contextmanager
    def transient_file(self, suffix: str = "") -> Iterator[Path]:
        """Reserve a transient path under the upload dir, removed on exit no matter what."""
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        file_path = self.upload_dir / f"{uuid.uuid4()}{suffix}"
        try:
            yield file_path
        finally:
            if file_path.exists():
                os.remove(file_path)

    async def write_transient(self, audio: UploadFile, file_path: Path) -> int:
        """Stream the upload to disk in chunks, enforcing the size limit. Returns bytes written."""
        file_size = 0
        with open(file_path, "wb") as f:
            while True:
                chunk = await audio.read(CHUNK_SIZE)
                if not chunk:
                    break
                file_size += len(chunk)
                if file_size > self.max_upload_bytes:
                    raise PayloadTooLargeError(self._too_large_message(file_size))
                f.write(chunk)
        return file_size

    async def _add_and_pin(self, file_path: Path) -> str:
        try:
            content_id = await self.store.add(file_path)
            await self.store.pin(content_id)
        except StoreUnavailableError as e:
            logger.error("Content store rejected upload %s: %s", file_path.name, getattr(e, "stderr", "") or e)
            raise StoreUnavailableError("Failed to add file to IPFS") from e
        return content_id

    async def upload(self, db: Session, track_id: str, audio: UploadFile | None) -> Track:
        """Run the full upload pipeline and return the updated track."""
        track = self.repository.get(db, track_id)
        if not track:
            raise TrackNotFoundError()

        mime_type = self.validate_upload_metadata(audio)
        suffix = Path(audio.filename or "").suffix.lower()

        async with self._lock_for(track_id):
            with self.transient_file(suffix) as file_path:
                file_size = await self.write_transient(audio, file_path)
                content_id = await self._add_and_pin(file_path)
                duration = await self.prober.probe(file_path)

                db.expire_all()
                current = self.repository.get(db, track_id)
                if current is None:
                    raise TrackNotFoundError()
                previous_content_id = current.content_id
                updated = self.repository.attach_upload(
                    db,
                    track_id,
                    content_id=content_id,
                    mime_type=mime_type,
                    file_size_bytes=file_size,
                    duration_seconds=duration,
                )
                if updated is None:
                    raise TrackNotFoundError()

        logger.info(
            "Track %s now at %s (%d bytes, duration %s)",
            track_id,
            content_id,
            file_size,
            f"{duration:.2f}s" if duration is not None else "unknown",
        )

        if (
            self.unpin_replaced
            and previous_content_id
            and previous_content_id != content_id
            and not self.repository.is_content_in_use(db, previous_content_id)
        ):
            await self.store.unpin(previous_content_id)

        return updated


def create_upload_pipeline(store: ContentStore, prober: DurationProber, repository: TrackRepository) -> UploadPipeline:
    """Build an upload pipeline configured from settings."""
    settings = get_settings()
    return UploadPipeline(
        store=store,
        prober=prober,
        repository=repository,
        upload_dir=settings.UPLOAD_DIR,
        max_upload_bytes=settings.max_upload_bytes,
        unpin_replaced=settings.UNPIN_REPLACED_CONTENT,
    )
