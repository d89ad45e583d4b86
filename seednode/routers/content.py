"""Raw content and pinning endpoints."""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from seednode.config import get_settings
from seednode.dependencies import get_streaming_service, valid_content_id
from seednode.errors import ContentNotFoundError, StoreUnavailableError
from seednode.rate_limit import limiter
from seednode.schemas.content import ContentResponse, PinResponse
from seednode.services.content_store import ContentStore, get_content_store
from seednode.services.streaming import StreamingService

logger = logging.getLogger("seednode")

router = APIRouter(prefix="/content", tags=["Content"])


@router.get("/{content_id}", response_model=ContentResponse)
async def get_content(
    cid: str = Depends(valid_content_id),
    service: StreamingService = Depends(get_streaming_service),
) -> ContentResponse:
    """Return a small blob decoded as text."""
    settings = get_settings()
    try:
        data = await service.read_all(cid, settings.CONTENT_INLINE_MAX_BYTES)
    except ContentNotFoundError:
        raise HTTPException(status_code=404, detail="Content not found or store error") from None
    except StoreUnavailableError as e:
        logger.warning("Read of %s failed mid-transfer: %s", cid, e)
        raise HTTPException(status_code=404, detail="Content not found or store error") from None
    except ValueError:
        raise HTTPException(status_code=400, detail="Content too large to return inline") from None

    return ContentResponse(content_id=cid, content=data.decode("utf-8", errors="replace"))


@router.post("/{content_id}/pin", response_model=PinResponse)
@limiter.limit("30/minute")
async def pin_content(
    request: Request,
    cid: str = Depends(valid_content_id),
    store: ContentStore = Depends(get_content_store),
) -> PinResponse:
    """Pin arbitrary content on this node."""
    try:
        await store.pin(cid)
    except StoreUnavailableError as e:
        logger.error("Pin of %s failed: %s", cid, getattr(e, "stderr", "") or e)
        raise HTTPException(status_code=500, detail="Failed to pin") from None
    return PinResponse(pinned=True, content_id=cid)
