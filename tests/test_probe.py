"""Tests for duration probing."""

import asyncio
import json
from pathlib import Path

from seednode.services.probe import DurationProber, parse_ffprobe_duration


class TestParseDuration:
    def test_valid(self):
        output = json.dumps({"format": {"duration": "215.340000"}})
        assert parse_ffprobe_duration(output) == 215.34

    def test_bytes_output(self):
        assert parse_ffprobe_duration(b'{"format": {"duration": "1.5"}}') == 1.5

    def test_missing_duration(self):
        assert parse_ffprobe_duration(json.dumps({"format": {}})) is None

    def test_not_json(self):
        assert parse_ffprobe_duration(b"") is None

    def test_non_positive_or_nan(self):
        assert parse_ffprobe_duration(json.dumps({"format": {"duration": "0"}})) is None
        assert parse_ffprobe_duration(json.dumps({"format": {"duration": "nan"}})) is None
        assert parse_ffprobe_duration(json.dumps({"format": {"duration": "N/A"}})) is None


class TestProber:
    def test_missing_binary_returns_none(self, tmp_path: Path):
        """An absent prober is a soft failure."""
        audio = tmp_path / "song.mp3"
        audio.write_bytes(b"\x00" * 16)
        prober = DurationProber(binary="seednode-no-such-ffprobe")
        assert asyncio.run(prober.probe(audio)) is None
