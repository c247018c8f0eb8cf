"""Health check endpoint for GPU Sizer."""

from datetime import datetime, timezone

from fastapi import APIRouter
from pydantic import BaseModel

from .. import __version__

router = APIRouter()


class HealthStatus(BaseModel):
    """Health check response model."""
    status: str
    timestamp: str
    version: str


@router.get("/health", response_model=HealthStatus)
async def health_check():
    """Liveness probe; does not contact the catalog."""
    return HealthStatus(
        status="healthy",
        timestamp=datetime.now(timezone.utc).isoformat(),
        version=__version__,
    )
