"""Response models for the statistics query endpoints."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field


class OwnerCount(BaseModel):
    """Message count attributed to one owner/operator."""

    owner: str = Field(..., description="Owner or operator, 'Unknown' when missing")
    count: int = Field(..., description="Messages attributed to this owner")


class ModelCount(BaseModel):
    """Message count attributed to one aircraft type."""

    model: str = Field(..., description="ICAO type designator, 'Unknown' when missing")
    count: int = Field(..., description="Messages attributed to this type")

    model_config = ConfigDict(protected_namespaces=())


class SummaryResponse(BaseModel):
    """Running totals since the process started."""

    total_packets: int = Field(..., alias="totalPackets")
    unique_aircraft: int = Field(..., alias="uniqueAircraft")
    unique_flights: int = Field(..., alias="uniqueFlights")
    top_owners: list[OwnerCount] = Field(default_factory=list, alias="topOwners")
    top_models: list[ModelCount] = Field(default_factory=list, alias="topModels")

    model_config = ConfigDict(populate_by_name=True)


class TimelineBucket(BaseModel):
    """Messages processed during one wall-clock minute (UTC)."""

    time: str = Field(..., description="Minute key formatted as YYYY-MM-DDTHH:MM")
    count: int = Field(..., description="Messages processed in that minute")


__all__ = ["ModelCount", "OwnerCount", "SummaryResponse", "TimelineBucket"]
