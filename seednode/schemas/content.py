"""Pydantic schemas for content and health endpoints."""

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

from seednode.schemas.track import CAMEL_CONFIG


class ContentResponse(BaseModel):
    content_id: str
    content: str

    model_config = CAMEL_CONFIG


class PinResponse(BaseModel):
    pinned: bool
    content_id: str

    model_config = CAMEL_CONFIG


class StorageInfo(BaseModel):
    total_gb: float = Field(0.0, alias="totalGB")
    used_gb: float = Field(0.0, alias="usedGB")
    free_gb: float = Field(0.0, alias="freeGB")

    model_config = {"populate_by_name": True}


class PeerInfo(BaseModel):
    peer_id: str | None = None
    version: str | None = None
    peer_count: int = 0

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class UptimeInfo(BaseModel):
    system_seconds: int | None = None
    api_seconds: int

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class HealthResponse(BaseModel):
    status: str
    track_count: int
    storage: StorageInfo
    peer: PeerInfo
    uptime: UptimeInfo

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
