"""Configuration settings for SeedNode."""

import os
from functools import lru_cache

from dotenv import load_dotenv

load_dotenv()


class Settings:
    """Application settings loaded from environment variables."""

    # Database
    DATABASE_URL: str = os.getenv("DATABASE_URL", "sqlite:///./seedthenode.db")

    # IPFS daemon
    IPFS_BIN: str = os.getenv("IPFS_BIN", "ipfs")
    IPFS_TIMEOUT_SECONDS: float = float(os.getenv("IPFS_TIMEOUT_SECONDS", "120"))

    # Duration probing
    FFPROBE_BIN: str = os.getenv("FFPROBE_BIN", "ffprobe")
    PROBE_TIMEOUT_SECONDS: float = float(os.getenv("PROBE_TIMEOUT_SECONDS", "15"))

    # Upload
    UPLOAD_DIR: str = os.getenv("UPLOAD_DIR", "uploads")
    MAX_UPLOAD_SIZE_MB: int = int(os.getenv("MAX_UPLOAD_SIZE_MB", "100"))
    UPLOAD_RATE_LIMIT: str = os.getenv("UPLOAD_RATE_LIMIT", "20/minute")
    UNPIN_REPLACED_CONTENT: bool = os.getenv("UNPIN_REPLACED_CONTENT", "false").lower() == "true"

    # Streaming
    STREAM_CHUNK_SIZE: int = int(os.getenv("STREAM_CHUNK_SIZE", str(64 * 1024)))
    DEFAULT_STREAM_MIME_TYPE: str = os.getenv("DEFAULT_STREAM_MIME_TYPE", "audio/mp4")
    CONTENT_INLINE_MAX_BYTES: int = int(os.getenv("CONTENT_INLINE_MAX_BYTES", str(1024 * 1024)))

    # Health
    DISK_STATS_PATH: str = os.getenv("DISK_STATS_PATH", "/")

    # Application
    APP_ENV: str = os.getenv("APP_ENV", "development")
    DEBUG: bool = os.getenv("DEBUG", "false").lower() == "true"
    LOG_LEVEL: str = os.getenv("LOG_LEVEL", "INFO")
    HOST: str = os.getenv("HOST", "0.0.0.0")
    PORT: int = int(os.getenv("PORT", "3000"))

    @property
    def max_upload_bytes(self) -> int:
        return self.MAX_UPLOAD_SIZE_MB * 1024 * 1024

    def validate(self) -> list[str]:
        """Validate settings and return list of warnings."""
        warnings = []
        if self.MAX_UPLOAD_SIZE_MB <= 0:
            warnings.append("MAX_UPLOAD_SIZE_MB must be positive - uploads will always be rejected")
        if self.STREAM_CHUNK_SIZE <= 0:
            warnings.append("STREAM_CHUNK_SIZE must be positive - falling back to 64KB")
        if self.UNPIN_REPLACED_CONTENT:
            warnings.append("UNPIN_REPLACED_CONTENT is enabled - older versions may become unplayable")
        return warnings


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
