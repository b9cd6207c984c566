"""API route registration."""

from fastapi import APIRouter

from netdrive.api.routes import audit, files, health

api_router = APIRouter()

api_router.include_router(health.router, tags=["health"])
api_router.include_router(files.router, prefix="/files", tags=["files"])
api_router.include_router(audit.router, prefix="/audit", tags=["audit"])
