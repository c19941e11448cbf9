"""Health check routes."""

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from pagecraft.api.config import Settings, get_settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response."""
    status: str
    app: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check(settings: Settings = Depends(get_settings)):
    """Basic health check endpoint."""
    return HealthResponse(
        status="healthy",
        app=settings.app_name,
        version=settings.app_version,
    )
