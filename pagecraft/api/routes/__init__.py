"""API routes for Pagecraft."""

from fastapi import APIRouter

from pagecraft.api.routes.gestures import router as gestures_router
from pagecraft.api.routes.health import router as health_router
from pagecraft.api.routes.layouts import router as layouts_router

# Main API router
api_router = APIRouter()

api_router.include_router(health_router, tags=["Health"])
api_router.include_router(layouts_router, prefix="/layouts", tags=["Layouts"])
api_router.include_router(gestures_router, prefix="/gestures", tags=["Gestures"])

__all__ = ["api_router"]
