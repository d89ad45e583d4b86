"""Pydantic schemas for track endpoints."""

from datetime import datetime

from pydantic import BaseModel
from pydantic.alias_generators import to_camel

CAMEL_CONFIG = {"from_attributes": True, "alias_generator": to_camel, "populate_by_name": True}


class TrackCreateRequest(BaseModel):
    title: str | None = None
    artist_name: str | None = None

    model_config = CAMEL_CONFIG


class VersionResponse(BaseModel):
    id: str
    track_id: str
    version_number: int
    audio_content_id: str
    voice_note_content_id: str | None
    created_at: datetime

    model_config = CAMEL_CONFIG


class TrackResponse(BaseModel):
    id: str
    title: str
    artist_name: str
    content_id: str | None
    mime_type: str | None
    file_size_bytes: int | None
    duration_seconds: float | None
    created_at: datetime
    updated_at: datetime

    model_config = CAMEL_CONFIG


class TrackListItem(TrackResponse):
    version_count: int = 0


class TrackDetailResponse(TrackResponse):
    versions: list[VersionResponse] = []


class DeleteResponse(BaseModel):
    deleted: bool
