"""Audio streaming endpoint."""

import anyio
from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import Response, StreamingResponse
from sqlalchemy.orm import Session
from starlette.types import Receive, Scope, Send

from seednode.database import get_db
from seednode.dependencies import get_streaming_service, valid_content_id
from seednode.errors import ContentNotFoundError
from seednode.services.streaming import StreamingService

router = APIRouter(prefix="/stream", tags=["Streaming"])


class ClosingStreamingResponse(StreamingResponse):
    """StreamingResponse that closes its body when the response ends, including on disconnect.

    Closing the body stops the underlying store read instead of leaving it to
    garbage collection.
    """

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        try:
            await super().__call__(scope, receive, send)
        finally:
            with anyio.CancelScope(shield=True):
                await self.body_iterator.aclose()


@router.get("/{content_id}")
async def stream_content(
    request: Request,
    cid: str = Depends(valid_content_id),
    db: Session = Depends(get_db),
    service: StreamingService = Depends(get_streaming_service),
) -> Response:
    """Stream stored audio, honoring a single-range Range header."""
    try:
        result = await service.stream(db, cid, request.headers.get("range"))
    except ContentNotFoundError as e:
        raise HTTPException(status_code=404, detail=e.message) from None

    if result.body is None:
        return Response(status_code=result.status_code, headers=result.headers, media_type=result.media_type)
    return ClosingStreamingResponse(
        result.body,
        status_code=result.status_code,
        headers=result.headers,
        media_type=result.media_type,
    )
