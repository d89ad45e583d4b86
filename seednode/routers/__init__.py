"""API routers."""

from seednode.routers.content import router as content_router
from seednode.routers.health import router as health_router
from seednode.routers.stream import router as stream_router
from seednode.routers.tracks import router as tracks_router

__all__ = ["health_router", "tracks_router", "stream_router", "content_router"]
