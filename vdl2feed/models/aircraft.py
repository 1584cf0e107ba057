"""Aircraft enrichment model attached to every ingested message."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


def _text(value: Any) -> str:
    if value is None:
        return ""
    return str(value)


def _flag(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "t"}
    return bool(value)


class AircraftRecord(BaseModel):
    """Reference metadata for one aircraft address.

    An instance with every field left at its default is the enrichment used
    when no reference row matches.
    """

    reg: str = Field(default="", description="Registration mark")
    icaotype: str = Field(default="", description="ICAO aircraft type designator")
    year: str = Field(default="", description="Year of manufacture")
    manufacturer: str = Field(default="", description="Airframe manufacturer")
    model: str = Field(default="", description="Model name")
    ownop: str = Field(default="", description="Owner or operator")
    short_type: str = Field(default="", description="Short type description")
    mil: bool = Field(default=False, description="Military aircraft")
    faa_pia: bool = Field(default=False, description="FAA privacy ICAO address program")
    faa_ladd: bool = Field(default=False, description="FAA limiting aircraft data displayed")

    model_config = ConfigDict(frozen=True, protected_namespaces=())

    @classmethod
    def from_row(cls, row: Any) -> "AircraftRecord":
        """Build a record from an ORM row, tolerating NULLs and loose flag values."""

        return cls(
            reg=_text(row.reg),
            icaotype=_text(row.icaotype),
            year=_text(row.year),
            manufacturer=_text(row.manufacturer),
            model=_text(row.model),
            ownop=_text(row.ownop),
            short_type=_text(row.short_type),
            mil=_flag(row.mil),
            faa_pia=_flag(row.faa_pia),
            faa_ladd=_flag(row.faa_ladd),
        )


EMPTY_ENRICHMENT = AircraftRecord()

__all__ = ["AircraftRecord", "EMPTY_ENRICHMENT"]
