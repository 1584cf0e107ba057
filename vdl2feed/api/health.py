"""Health check endpoint."""

from fastapi import APIRouter, Request

from vdl2feed.config import settings

router = APIRouter()


@router.get("/healthz", summary="Health check")
def health_check(request: Request) -> dict[str, str | int]:
    """Report liveness and the number of connected feed subscribers."""
    runtime = getattr(request.app.state, "runtime", None)
    subscribers = len(runtime.broadcaster) if runtime else 0
    return {"status": "ok", "env": settings.env, "subscribers": subscribers}
