"""Audio duration probing with ffprobe."""

import asyncio
import json
import logging
import math
from pathlib import Path

from seednode.config import get_settings

logger = logging.getLogger("seednode")


class DurationProber:
    """Reads audio duration from a file. Failures yield None, never an exception."""

    def __init__(self, binary: str = "ffprobe", timeout: float = 15.0) -> None:
        self.binary = binary
        self.timeout = timeout

    async def probe(self, path: Path) -> float | None:
        """Return the duration of the file in seconds, or None if unknown."""
        try:
            proc = await asyncio.create_subprocess_exec(
                self.binary,
                "-v",
                "quiet",
                "-print_format",
                "json",
                "-show_format",
                str(path),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.DEVNULL,
            )
        except OSError as e:
            logger.warning("Duration probe could not start %s: %s", self.binary, e)
            return None

        try:
            stdout, _ = await asyncio.wait_for(proc.communicate(), timeout=self.timeout)
        except asyncio.TimeoutError:
            if proc.returncode is None:
                proc.kill()
            await proc.wait()
            logger.warning("Duration probe timed out for %s", path.name)
            return None

        if proc.returncode != 0:
            logger.warning("Duration probe failed for %s (exit %s)", path.name, proc.returncode)
            return None

        return parse_ffprobe_duration(stdout)


def parse_ffprobe_duration(output: bytes | str) -> float | None:
    """Extract format.duration from ffprobe JSON output."""
    try:
        data = json.loads(output)
        duration = float(data["format"]["duration"])
    except (ValueError, KeyError, TypeError):
        return None
    if not math.isfinite(duration) or duration <= 0:
        return None
    return duration


_duration_prober: DurationProber | None = None


def get_duration_prober() -> DurationProber:
    """Get singleton duration prober instance."""
    global _duration_prober
    if _duration_prober is None:
        settings = get_settings()
        _duration_prober = DurationProber(binary=settings.FFPROBE_BIN, timeout=settings.PROBE_TIMEOUT_SECONDS)
    return _duration_prober
