"""Service dependencies for FastAPI routes.

The content store and duration prober are resolved through Depends so tests
can swap them with app.dependency_overrides.
"""

from fastapi import Depends, HTTPException

from seednode.services.content_store import ContentStore, get_content_store, is_valid_content_id
from seednode.services.health import HealthService, create_health_service
from seednode.services.probe import DurationProber, get_duration_prober
from seednode.services.streaming import StreamingService, create_streaming_service
from seednode.services.track import TrackRepository, get_track_repository
from seednode.services.upload import UploadPipeline, create_upload_pipeline


def get_upload_pipeline(
    store: ContentStore = Depends(get_content_store),
    prober: DurationProber = Depends(get_duration_prober),
    repository: TrackRepository = Depends(get_track_repository),
) -> UploadPipeline:
    return create_upload_pipeline(store, prober, repository)


def get_streaming_service(
    store: ContentStore = Depends(get_content_store),
    repository: TrackRepository = Depends(get_track_repository),
) -> StreamingService:
    return create_streaming_service(store, repository)


def get_health_service(
    store: ContentStore = Depends(get_content_store),
    repository: TrackRepository = Depends(get_track_repository),
) -> HealthService:
    return create_health_service(store, repository)


def valid_content_id(content_id: str) -> str:
    """Path dependency rejecting malformed content identifiers before any store call."""
    if not is_valid_content_id(content_id):
        raise HTTPException(status_code=400, detail="Invalid content identifier format")
    return content_id
