"""Track model."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, Float, Integer, String
from sqlalchemy.orm import relationship

from seednode.database import Base


class Track(Base):
    """User-facing audio work with at most one current content identifier."""

    __tablename__ = "track"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(512), nullable=False)
    artist_name = Column(String(512), nullable=False)
    content_id = Column(String(128), nullable=True, index=True)
    mime_type = Column(String(128), nullable=True)
    file_size_bytes = Column(Integer, nullable=True)
    duration_seconds = Column(Float, nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    versions = relationship(
        "Version",
        back_populates="track",
        cascade="all, delete-orphan",
        order_by="Version.version_number",
    )
