"""Version model."""

import uuid
from datetime import datetime

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, UniqueConstraint
from sqlalchemy.orm import relationship

from seednode.database import Base


class Version(Base):
    """Immutable record of one audio upload for a track."""

    __tablename__ = "version"
    __table_args__ = (UniqueConstraint("track_id", "version_number", name="uq_version_track_number"),)

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    track_id = Column(String(36), ForeignKey("track.id", ondelete="CASCADE"), nullable=False, index=True)
    version_number = Column(Integer, nullable=False)
    audio_content_id = Column(String(128), nullable=False)
    voice_note_content_id = Column(String(128), nullable=True)
    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    track = relationship("Track", back_populates="versions")
