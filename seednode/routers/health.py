"""Health endpoint."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from seednode.database import get_db
from seednode.dependencies import get_health_service
from seednode.schemas.content import HealthResponse
from seednode.services.health import HealthService

router = APIRouter(tags=["Health"])


@router.get("/health", response_model=HealthResponse)
async def health_check(
    db: Session = Depends(get_db),
    service: HealthService = Depends(get_health_service),
) -> HealthResponse:
    """Report track count, disk, daemon peers and uptime."""
    return HealthResponse(**await service.health(db))
