from __future__ import annotations

import contextlib
import logging
import time

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from vdl2feed.api import api_router, feed_endpoint
from vdl2feed.config import Settings, settings
from vdl2feed.db import ReferenceStoreError
from vdl2feed.runtime import FeedRuntime, build_runtime

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)s %(name)s - %(message)s",
)
logger = logging.getLogger("vdl2feed")


def load_runtime(config: Settings) -> FeedRuntime:
    """Build the pipeline or exit the process if the reference store is unusable."""

    try:
        return build_runtime(config)
    except ReferenceStoreError as exc:
        logger.critical("SQLite open error: %s", exc)
        raise SystemExit(1) from exc


def create_app(
    runtime: FeedRuntime | None = None, *, start_listeners: bool = True
) -> FastAPI:
    """Build the query-surface app.

    Without an explicit runtime one is built from settings at startup. With
    ``start_listeners`` the UDP port and the rotation timer run for the
    lifetime of the app.
    """

    @contextlib.asynccontextmanager
    async def lifespan(app: FastAPI):
        """Manage application startup and shutdown lifecycle."""

        active = runtime or load_runtime(settings)
        app.state.runtime = active
        if start_listeners:
            await active.start()

        try:
            yield
        finally:
            await active.stop()

    app = FastAPI(title="vdl2feed", lifespan=lifespan)
    if runtime is not None:
        app.state.runtime = runtime

    config = runtime.settings if runtime is not None else settings
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in config.cors_origins.split(",") if o.strip()],
        allow_methods=["GET"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log basic request information for observability."""

        start_time = time.time()
        response = await call_next(request)
        duration_ms = (time.time() - start_time) * 1000
        logger.info(
            "HTTP %s %s -> %s (%.2f ms)",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response

    app.include_router(api_router)
    return app


def create_feed_app(runtime: FeedRuntime) -> FastAPI:
    """Build the dissemination app served on its own port."""

    feed_app = FastAPI(title="vdl2feed stream", openapi_url=None, docs_url=None, redoc_url=None)
    feed_app.state.runtime = runtime
    feed_app.add_api_websocket_route("/", feed_endpoint)
    return feed_app


app = create_app()
