"""Health check."""

from fastapi import APIRouter

from netdrive import __version__
from netdrive.config import settings
from netdrive.schemas.system import HealthResponse

router = APIRouter()


@router.get("/health", response_model=HealthResponse)
async def health_check():
    return HealthResponse(version=__version__, storage_backend=settings.storage_backend)


@router.get("/ping")
async def ping():
    """Ultra-lightweight ping."""
    return {"status": "ok"}
