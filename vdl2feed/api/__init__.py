"""API routers for vdl2feed."""

from fastapi import APIRouter

from .events import router as events_router
from .feed import feed_endpoint
from .feed import router as feed_router
from .health import router as health_router

api_router = APIRouter()
api_router.include_router(health_router)
api_router.include_router(events_router)
api_router.include_router(feed_router)

__all__ = ["api_router", "feed_endpoint"]
