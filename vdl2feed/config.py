"""Configuration settings for the vdl2feed service."""

from __future__ import annotations

import os
from dataclasses import dataclass


def _get_bool(env_var: str, default: bool = False) -> bool:
    """Parse an environment variable into a boolean with a default."""

    value = os.getenv(env_var)
    if value is None:
        return default

    return value.lower() in {"1", "true", "yes", "on"}


@dataclass
class Settings:
    """Startup parameters loaded from environment variables."""

    env: str = os.getenv("VDL2FEED_ENV", "local")
    log_level: str = os.getenv("VDL2FEED_LOG_LEVEL", "INFO")

    # Listeners
    bind_host: str = os.getenv("VDL2FEED_BIND_HOST", "0.0.0.0")
    udp_port: int = int(os.getenv("VDL2FEED_UDP_PORT", "5555"))
    ws_port: int = int(os.getenv("VDL2FEED_WS_PORT", "8080"))
    http_port: int = int(os.getenv("VDL2FEED_HTTP_PORT", "3000"))
    cors_origins: str = os.getenv("VDL2FEED_CORS_ORIGINS", "*")

    # Daily JSONL logs
    log_dir: str = os.getenv("VDL2FEED_LOG_DIR", "/var/log/vdl2")
    log_prefix: str = os.getenv("VDL2FEED_LOG_PREFIX", "received")
    retention_days: int = int(os.getenv("VDL2FEED_RETENTION_DAYS", "7"))
    rotation_interval_seconds: float = float(
        os.getenv("VDL2FEED_ROTATION_INTERVAL", "30")
    )

    # Aircraft reference store
    reference_db_path: str = os.getenv(
        "VDL2FEED_REFERENCE_DB", os.path.join(os.getcwd(), "aircraft.db")
    )
    unknown_dir: str = os.getenv("VDL2FEED_UNKNOWN_DIR", "/var/www/localhost/logs")
    debug_lookups: bool = _get_bool("VDL2FEED_DEBUG_LOOKUPS", default=True)


settings = Settings()

__all__ = ["settings", "Settings"]
