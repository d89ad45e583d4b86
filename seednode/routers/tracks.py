"""Track API endpoints."""

import logging

from fastapi import APIRouter, Depends, File, HTTPException, Request, UploadFile
from sqlalchemy.orm import Session

from seednode.config import get_settings
from seednode.database import get_db
from seednode.dependencies import get_upload_pipeline
from seednode.errors import InvalidInputError, StoreUnavailableError, TrackNotFoundError
from seednode.rate_limit import limiter
from seednode.schemas.track import (
    DeleteResponse,
    TrackCreateRequest,
    TrackDetailResponse,
    TrackListItem,
    TrackResponse,
    VersionResponse,
)
from seednode.services.content_store import ContentStore, get_content_store
from seednode.services.track import TrackRepository, get_track_repository
from seednode.services.upload import UploadPipeline

logger = logging.getLogger("seednode")

router = APIRouter(prefix="/tracks", tags=["Tracks"])


@router.get("", response_model=list[TrackListItem])
def list_tracks(
    playable: bool = False,
    db: Session = Depends(get_db),
    repository: TrackRepository = Depends(get_track_repository),
) -> list[TrackListItem]:
    """List tracks newest first, each with its version count."""
    return [TrackListItem(**item) for item in repository.list_tracks(db, playable_only=playable)]


@router.get("/{track_id}", response_model=TrackDetailResponse)
def get_track(
    track_id: str,
    db: Session = Depends(get_db),
    repository: TrackRepository = Depends(get_track_repository),
) -> TrackDetailResponse:
    """Get a track with its version history."""
    track = repository.get(db, track_id)
    if not track:
        raise HTTPException(status_code=404, detail="Track not found")
    versions = repository.get_versions(db, track_id)
    return TrackDetailResponse(
        **TrackResponse.model_validate(track).model_dump(),
        versions=[VersionResponse.model_validate(v) for v in versions],
    )


@router.post("", response_model=TrackResponse, status_code=201)
def create_track(
    body: TrackCreateRequest,
    db: Session = Depends(get_db),
    repository: TrackRepository = Depends(get_track_repository),
) -> TrackResponse:
    """Create a track without audio."""
    title = (body.title or "").strip()
    artist_name = (body.artist_name or "").strip()
    if not title or not artist_name:
        raise HTTPException(status_code=400, detail="title and artistName are required")

    track = repository.create(db, title, artist_name)
    logger.info("Created track %s (%s - %s)", track.id, artist_name, title)
    return TrackResponse.model_validate(track)


@router.delete("/{track_id}", response_model=DeleteResponse)
async def delete_track(
    track_id: str,
    db: Session = Depends(get_db),
    repository: TrackRepository = Depends(get_track_repository),
    store: ContentStore = Depends(get_content_store),
) -> DeleteResponse:
    """Delete a track and its versions, unpinning its current content."""
    track = repository.get(db, track_id)
    if not track:
        raise HTTPException(status_code=404, detail="Track not found")

    content_id = track.content_id
    if not repository.delete(db, track_id):
        raise HTTPException(status_code=404, detail="Track not found")

    if content_id and not repository.is_content_in_use(db, content_id):
        if not await store.unpin(content_id):
            logger.warning("Track %s deleted but %s is still pinned", track_id, content_id)

    return DeleteResponse(deleted=True)


@router.post("/{track_id}/upload", response_model=TrackResponse)
@limiter.limit(get_settings().UPLOAD_RATE_LIMIT)
async def upload_audio(
    request: Request,
    track_id: str,
    audio: UploadFile | None = File(None),
    db: Session = Depends(get_db),
    pipeline: UploadPipeline = Depends(get_upload_pipeline),
) -> TrackResponse:
    """Upload audio for a track: add to the content store, pin, and record a new version."""
    try:
        track = await pipeline.upload(db, track_id, audio)
    except TrackNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from None
    except InvalidInputError as e:
        raise HTTPException(status_code=400, detail=e.message) from None
    except StoreUnavailableError as e:
        raise HTTPException(status_code=500, detail=e.message) from None

    return TrackResponse.model_validate(track)
