"""VDL2 message enrichment, logging and live fan-out service."""

__version__ = "0.1.0"
