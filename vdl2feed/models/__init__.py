"""Pydantic models for vdl2feed."""

from .aircraft import EMPTY_ENRICHMENT, AircraftRecord
from .events import ModelCount, OwnerCount, SummaryResponse, TimelineBucket

__all__ = [
    "AircraftRecord",
    "EMPTY_ENRICHMENT",
    "ModelCount",
    "OwnerCount",
    "SummaryResponse",
    "TimelineBucket",
]
