"""Range-aware streaming of stored content."""

import logging
import re
from collections.abc import AsyncIterator
from dataclasses import dataclass, field

from sqlalchemy.orm import Session

from seednode.config import get_settings
from seednode.errors import ContentNotFoundError, RangeNotSatisfiableError, StoreUnavailableError
from seednode.services.content_store import ContentStore
from seednode.services.track import TrackRepository

logger = logging.getLogger("seednode")

RANGE_PATTERN = re.compile(r"bytes=(\d+)-(\d*)")


@dataclass
class ByteRange:
    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start + 1


@dataclass
class StreamResult:
    """Status, headers and lazily produced body for a stream response."""

    status_code: int
    media_type: str
    headers: dict[str, str] = field(default_factory=dict)
    body: AsyncIterator[bytes] | None = None


def parse_range(range_header: str | None, total_size: int) -> ByteRange | None:
    """Parse a single `bytes=start-[end]` range against a known size.

    Returns None when there is no usable Range header (the full body should be
    sent). Raises RangeNotSatisfiableError when the range falls outside the
    content.
    """
    if not range_header:
        return None
    match = RANGE_PATTERN.fullmatch(range_header.strip())
    if not match:
        return None

    start = int(match.group(1))
    end = int(match.group(2)) if match.group(2) else total_size - 1
    end = min(end, total_size - 1)
    if start >= total_size or start > end:
        raise RangeNotSatisfiableError(total_size)
    return ByteRange(start=start, end=end)


class PrimedStream:
    """Async iterator replaying an already-read first chunk ahead of the rest of a store read.

    aclose() always closes the underlying read, even if iteration never started.
    """

    def __init__(self, first: bytes, rest: AsyncIterator[bytes]) -> None:
        self._first: bytes | None = first
        self._rest = rest

    def __aiter__(self) -> "PrimedStream":
        return self

    async def __anext__(self) -> bytes:
        if self._first is not None:
            first, self._first = self._first, None
            if first:
                return first
        return await self._rest.__anext__()

    async def aclose(self) -> None:
        self._first = None
        await self._rest.aclose()


class StreamingService:
    """Serves content from the store, honoring HTTP byte ranges."""

    def __init__(self, store: ContentStore, repository: TrackRepository, default_mime_type: str = "audio/mp4") -> None:
        self.store = store
        self.repository = repository
        self.default_mime_type = default_mime_type

    async def _open(self, content_id: str, offset: int | None = None, length: int | None = None) -> PrimedStream:
        """Start a store read and wait for its first chunk so failures surface before headers go out."""
        body = self.store.cat(content_id, offset=offset, length=length)
        try:
            first = await body.__anext__()
        except StopAsyncIteration:
            first = b""
        except StoreUnavailableError as e:
            await body.aclose()
            logger.warning("Stream of %s failed before first byte: %s", content_id, getattr(e, "stderr", "") or e)
            raise ContentNotFoundError() from e
        return PrimedStream(first, body)

    async def stream(self, db: Session, content_id: str, range_header: str | None = None) -> StreamResult:
        track = self.repository.find_by_content_id(db, content_id)
        media_type = (track.mime_type if track else None) or self.default_mime_type
        total_size = track.file_size_bytes if track else None

        if total_size is None:
            body = await self._open(content_id)
            return StreamResult(status_code=200, media_type=media_type, headers={"Accept-Ranges": "none"}, body=body)

        try:
            byte_range = parse_range(range_header, total_size)
        except RangeNotSatisfiableError:
            return StreamResult(
                status_code=416,
                media_type=media_type,
                headers={"Content-Range": f"bytes */{total_size}", "Accept-Ranges": "bytes"},
            )

        if byte_range is None:
            body = await self._open(content_id)
            return StreamResult(
                status_code=200,
                media_type=media_type,
                headers={"Accept-Ranges": "bytes", "Content-Length": str(total_size)},
                body=body,
            )

        body = await self._open(content_id, offset=byte_range.start, length=byte_range.length)
        return StreamResult(
            status_code=206,
            media_type=media_type,
            headers={
                "Accept-Ranges": "bytes",
                "Content-Range": f"bytes {byte_range.start}-{byte_range.end}/{total_size}",
                "Content-Length": str(byte_range.length),
            },
            body=body,
        )

    async def read_all(self, content_id: str, max_bytes: int) -> bytes:
        """Read a whole blob into memory, refusing anything over max_bytes."""
        chunks = []
        size = 0
        body = await self._open(content_id, length=max_bytes + 1)
        try:
            async for chunk in body:
                size += len(chunk)
                if size > max_bytes:
                    raise ValueError(f"Content exceeds {max_bytes} bytes")
                chunks.append(chunk)
        finally:
            await body.aclose()
        return b"".join(chunks)


def create_streaming_service(store: ContentStore, repository: TrackRepository) -> StreamingService:
    """Build a streaming service configured from settings."""
    settings = get_settings()
    return StreamingService(store=store, repository=repository, default_mime_type=settings.DEFAULT_STREAM_MIME_TYPE)
