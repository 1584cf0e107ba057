"""Statistics query endpoints."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Query, Request

from vdl2feed.models import ModelCount, OwnerCount, SummaryResponse, TimelineBucket
from vdl2feed.services.statistics import TIMELINE_HORIZON, TIMELINE_WINDOW, StatsAggregator

router = APIRouter(prefix="/api/events", tags=["events"])

logger = logging.getLogger("vdl2feed.events")


def _stats(request: Request) -> StatsAggregator:
    return request.app.state.runtime.stats


@router.get("/summary", response_model=SummaryResponse, summary="Running totals")
async def get_summary(request: Request) -> SummaryResponse:
    """Return totals and the top owners and types since startup."""

    snapshot = _stats(request).summary()
    return SummaryResponse(
        total_packets=snapshot.total_packets,
        unique_aircraft=snapshot.unique_aircraft,
        unique_flights=snapshot.unique_flights,
        top_owners=[OwnerCount(owner=o, count=c) for o, c in snapshot.top_owners],
        top_models=[ModelCount(model=m, count=c) for m, c in snapshot.top_models],
    )


@router.get(
    "/timeline",
    response_model=list[TimelineBucket],
    summary="Per-minute message counts",
)
async def get_timeline(
    request: Request,
    minutes: int = Query(
        default=TIMELINE_WINDOW,
        ge=1,
        le=TIMELINE_HORIZON,
        description="Number of most recent minute buckets to return",
    ),
) -> list[TimelineBucket]:
    buckets = _stats(request).timeline(limit=minutes)
    return [TimelineBucket(time=b.time, count=b.count) for b in buckets]
