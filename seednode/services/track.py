"""Track repository for track and version persistence."""

from datetime import datetime

from sqlalchemy import func
from sqlalchemy.orm import Session

from seednode.models.track import Track
from seednode.models.version import Version


class TrackRepository:
    """Handles track CRUD and the version history attached to uploads."""

    def create(self, db: Session, title: str, artist_name: str) -> Track:
        """Create a track with no audio yet."""
        now = datetime.utcnow()
        track = Track(title=title, artist_name=artist_name, created_at=now, updated_at=now)
        db.add(track)
        db.commit()
        db.refresh(track)
        return track

    def get(self, db: Session, track_id: str) -> Track | None:
        return db.query(Track).filter(Track.id == track_id).first()

    def list_tracks(self, db: Session, playable_only: bool = False) -> list[dict]:
        """Get all tracks with their version counts, newest first."""
        query = (
            db.query(Track, func.count(Version.id))
            .outerjoin(Version, Version.track_id == Track.id)
            .group_by(Track.id)
        )
        if playable_only:
            query = query.filter(Track.content_id.isnot(None))

        items = []
        for track, version_count in query.order_by(Track.created_at.desc()).all():
            items.append(
                {
                    "id": track.id,
                    "title": track.title,
                    "artist_name": track.artist_name,
                    "content_id": track.content_id,
                    "mime_type": track.mime_type,
                    "file_size_bytes": track.file_size_bytes,
                    "duration_seconds": track.duration_seconds,
                    "created_at": track.created_at,
                    "updated_at": track.updated_at,
                    "version_count": version_count,
                }
            )
        return items

    def get_versions(self, db: Session, track_id: str) -> list[Version]:
        """Get the version history of a track, latest first."""
        return (
            db.query(Version).filter(Version.track_id == track_id).order_by(Version.version_number.desc()).all()
        )

    def find_by_content_id(self, db: Session, content_id: str) -> Track | None:
        """Find the track currently serving a content identifier."""
        return (
            db.query(Track).filter(Track.content_id == content_id).order_by(Track.updated_at.desc()).first()
        )

    def count(self, db: Session) -> int:
        return db.query(func.count(Track.id)).scalar() or 0

    def delete(self, db: Session, track_id: str) -> bool:
        """Delete a track and its versions. Returns False if it does not exist."""
        track = self.get(db, track_id)
        if not track:
            return False
        db.delete(track)
        db.commit()
        return True

    def attach_upload(
        self,
        db: Session,
        track_id: str,
        content_id: str,
        mime_type: str | None,
        file_size_bytes: int,
        duration_seconds: float | None,
    ) -> Track | None:
        """Point a track at new content and append a version, in one transaction.

        Returns None if the track no longer exists.
        """
        try:
            track = self.get(db, track_id)
            if not track:
                return None

            now = datetime.utcnow()
            track.content_id = content_id
            track.mime_type = mime_type
            track.file_size_bytes = file_size_bytes
            track.duration_seconds = duration_seconds
            track.updated_at = now

            existing = db.query(func.count(Version.id)).filter(Version.track_id == track_id).scalar() or 0
            db.add(
                Version(
                    track_id=track_id,
                    version_number=existing + 1,
                    audio_content_id=content_id,
                    created_at=now,
                )
            )
            db.commit()
        except Exception:
            db.rollback()
            raise

        db.refresh(track)
        return track

    def set_duration(self, db: Session, track_id: str, duration_seconds: float) -> bool:
        track = self.get(db, track_id)
        if not track:
            return False
        track.duration_seconds = duration_seconds
        track.updated_at = datetime.utcnow()
        db.commit()
        return True

    def tracks_missing_duration(self, db: Session) -> list[Track]:
        """Tracks that have content but no known duration."""
        return (
            db.query(Track)
            .filter(Track.content_id.isnot(None), Track.duration_seconds.is_(None))
            .order_by(Track.created_at)
            .all()
        )

    def is_content_in_use(self, db: Session, content_id: str, exclude_track_id: str | None = None) -> bool:
        """Check whether any track currently points at a content identifier."""
        query = db.query(Track.id).filter(Track.content_id == content_id)
        if exclude_track_id:
            query = query.filter(Track.id != exclude_track_id)
        return query.first() is not None


_track_repository: TrackRepository | None = None


def get_track_repository() -> TrackRepository:
    """Get singleton track repository instance."""
    global _track_repository
    if _track_repository is None:
        _track_repository = TrackRepository()
    return _track_repository
