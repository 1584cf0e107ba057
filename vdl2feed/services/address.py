"""Aircraft address normalization."""

from __future__ import annotations

import re
from typing import Any

ABSENT_KEY = "000000"
KEY_WIDTH = 6

_NON_HEX_RE = re.compile(r"[^0-9a-fA-F]")


def normalize_address(raw: Any) -> str:
    """Canonicalize a transmitted address into a lowercase hex key.

    Non-hex characters are dropped and the result is left-padded with zeros
    to six characters. Longer values are kept as-is. Missing or garbage input
    yields ``"000000"``.
    """

    text = "" if raw is None else str(raw)
    return _NON_HEX_RE.sub("", text.strip()).rjust(KEY_WIDTH, "0").lower()


def is_absent(key: str | None) -> bool:
    """Return True when a key carries no address information."""

    return not key or key == ABSENT_KEY


__all__ = ["ABSENT_KEY", "is_absent", "normalize_address"]
