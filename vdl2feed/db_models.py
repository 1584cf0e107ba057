"""SQLAlchemy ORM models for the aircraft reference store."""

from __future__ import annotations

from sqlalchemy import Column, Integer, String

from vdl2feed.db import Base


class Aircraft(Base):
    """Reference row describing one airframe, keyed by its ICAO address."""

    __tablename__ = "aircraft"

    icao = Column(String, primary_key=True)
    reg = Column(String, nullable=True)
    icaotype = Column(String, nullable=True)
    year = Column(String, nullable=True)
    manufacturer = Column(String, nullable=True)
    model = Column(String, nullable=True)
    ownop = Column(String, nullable=True)
    faa_pia = Column(Integer, nullable=True)
    faa_ladd = Column(Integer, nullable=True)
    short_type = Column(String, nullable=True)
    mil = Column(Integer, nullable=True)
