"""Content-addressed blob store adapter backed by the IPFS CLI."""

import asyncio
import json
import logging
import re
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator
from dataclasses import dataclass
from pathlib import Path

from seednode.config import get_settings
from seednode.errors import StoreUnavailableError

logger = logging.getLogger("seednode")

CONTENT_ID_PATTERN = re.compile(r"[A-Za-z0-9]{46,128}")


def is_valid_content_id(content_id: str | None) -> bool:
    """Check that a client-supplied CID is alphanumeric and 46-128 characters long."""
    return bool(content_id) and CONTENT_ID_PATTERN.fullmatch(content_id) is not None


@dataclass
class StoreStats:
    """Best-effort snapshot of the store daemon."""

    peer_id: str | None = None
    version: str | None = None
    peer_count: int = 0


class StoreCommandError(StoreUnavailableError):
    """A store command exited with a non-zero status."""

    def __init__(self, command: str, returncode: int | None, stderr: str = "") -> None:
        super().__init__(f"Store command '{command}' failed")
        self.command = command
        self.returncode = returncode
        self.stderr = stderr


class ContentStore(ABC):
    """Interface for a content-addressed blob store.

    Every operation is an out-of-process call; implementations raise
    StoreUnavailableError instead of crashing when the backend is unreachable.
    """

    @abstractmethod
    async def add(self, path: Path) -> str:
        """Add the file at path and return its content identifier."""

    @abstractmethod
    async def pin(self, content_id: str) -> None:
        """Pin content so it survives garbage collection."""

    @abstractmethod
    async def unpin(self, content_id: str) -> bool:
        """Unpin content. Returns False on failure, never raises."""

    @abstractmethod
    def cat(self, content_id: str, offset: int | None = None, length: int | None = None) -> AsyncIterator[bytes]:
        """Stream content bytes, optionally limited to a byte range."""

    @abstractmethod
    async def stats(self) -> StoreStats:
        """Return daemon identity and connectivity. Never raises."""


STDERR_KEEP_BYTES = 64 * 1024


async def _drain(stream: asyncio.StreamReader, keep: int = STDERR_KEEP_BYTES) -> bytes:
    """Read a pipe to EOF, keeping only the tail."""
    data = b""
    while True:
        chunk = await stream.read(4096)
        if not chunk:
            return data
        data = (data + chunk)[-keep:]


def _kill(proc: asyncio.subprocess.Process) -> None:
    if proc.returncode is None:
        try:
            proc.kill()
        except ProcessLookupError:
            pass


class IpfsContentStore(ContentStore):
    """ContentStore that shells out to the `ipfs` command for each operation."""

    def __init__(self, binary: str = "ipfs", timeout: float = 120.0, chunk_size: int = 64 * 1024) -> None:
        self.binary = binary
        self.timeout = timeout
        self.chunk_size = chunk_size if chunk_size > 0 else 64 * 1024

    async def _spawn(self, args: list[str]) -> asyncio.subprocess.Process:
        try:
            return await asyncio.create_subprocess_exec(
                self.binary,
                *args,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
        except OSError as e:
            logger.error("Could not start %s %s: %s", self.binary, args[0], e)
            raise StoreUnavailableError(f"Could not start {self.binary}") from e

    async def _run(self, args: list[str]) -> bytes:
        """Run a store command to completion and return its stdout."""
        proc = await self._spawn(args)
        try:
            stdout, stderr = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError as e:
            _kill(proc)
            await proc.wait()
            logger.error("ipfs %s timed out after %.0fs", args[0], self.timeout)
            raise StoreUnavailableError(f"Store command '{args[0]}' timed out") from e
        except asyncio.CancelledError:
            _kill(proc)
            raise

        if proc.returncode != 0:
            message = stderr.decode("utf-8", errors="replace").strip()
            raise StoreCommandError(" ".join(args[:2]), proc.returncode, message)
        return stdout

    async def add(self, path: Path) -> str:
        output = await self._run(["add", "-q", "--pin=false", str(path)])
        lines = [line.strip() for line in output.decode("utf-8", errors="replace").splitlines() if line.strip()]
        if not lines:
            raise StoreUnavailableError("Store returned no content identifier")
        return lines[-1]

    async def pin(self, content_id: str) -> None:
        await self._run(["pin", "add", content_id])

    async def unpin(self, content_id: str) -> bool:
        try:
            await self._run(["pin", "rm", content_id])
        except StoreCommandError as e:
            if "not pinned" in e.stderr:
                return True
            logger.warning("Unpin of %s failed: %s", content_id, e.stderr)
            return False
        except StoreUnavailableError as e:
            logger.warning("Unpin of %s failed: %s", content_id, e)
            return False
        return True

    async def cat(
        self, content_id: str, offset: int | None = None, length: int | None = None
    ) -> AsyncIterator[bytes]:
        args = ["cat"]
        if offset:
            args += ["--offset", str(offset)]
        if length is not None:
            args += ["--length", str(length)]
        args.append(content_id)

        proc = await self._spawn(args)
        stderr_task = asyncio.ensure_future(_drain(proc.stderr))
        try:
            while True:
                chunk = await proc.stdout.read(self.chunk_size)
                if not chunk:
                    break
                yield chunk
            stderr = await stderr_task
            returncode = await proc.wait()
            if returncode != 0:
                raise StoreCommandError("cat", returncode, stderr.decode("utf-8", errors="replace").strip())
        finally:
            if proc.returncode is None:
                # Reader went away mid-transfer
                _kill(proc)
                await proc.wait()
            if not stderr_task.done():
                stderr_task.cancel()
            await asyncio.gather(stderr_task, return_exceptions=True)

    async def stats(self) -> StoreStats:
        result = StoreStats()

        try:
            ident = json.loads(await self._run(["id", "--encoding=json"]))
            if not isinstance(ident, dict):
                raise ValueError("ipfs id did not return an object")
            result.peer_id = ident.get("ID")
            result.version = ident.get("AgentVersion")
        except (StoreUnavailableError, ValueError) as e:
            logger.warning("ipfs id unavailable: %s", e)

        try:
            peers = (await self._run(["swarm", "peers"])).decode("utf-8", errors="replace")
            result.peer_count = len([line for line in peers.splitlines() if line.strip()])
        except StoreUnavailableError as e:
            logger.warning("ipfs swarm peers unavailable: %s", e)

        return result


_content_store: ContentStore | None = None


def get_content_store() -> ContentStore:
    """Get singleton content store instance."""
    global _content_store
    if _content_store is None:
        settings = get_settings()
        _content_store = IpfsContentStore(
            binary=settings.IPFS_BIN,
            timeout=settings.IPFS_TIMEOUT_SECONDS,
            chunk_size=settings.STREAM_CHUNK_SIZE,
        )
    return _content_store
