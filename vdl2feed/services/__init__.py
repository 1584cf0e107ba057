"""Service-layer components of the ingestion pipeline."""

from .address import ABSENT_KEY, is_absent, normalize_address
from .broadcaster import Broadcaster
from .log_writer import RotatingLogWriter, rotate_periodically
from .pipeline import IngestPipeline, format_timestamp
from .reference_lookup import ReferenceLookup, UnknownKeyLedger
from .statistics import MinuteBucket, StatsAggregator, StatsSummary

__all__ = [
    "ABSENT_KEY",
    "Broadcaster",
    "IngestPipeline",
    "MinuteBucket",
    "ReferenceLookup",
    "RotatingLogWriter",
    "StatsAggregator",
    "StatsSummary",
    "UnknownKeyLedger",
    "format_timestamp",
    "is_absent",
    "normalize_address",
    "rotate_periodically",
]
