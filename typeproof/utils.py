"""Small shared helpers for clocks, ids and text counts."""

import secrets
import string
import time
from datetime import datetime, timezone

_ID_ALPHABET = string.ascii_lowercase + string.digits


def now_ms() -> int:
    """Current wall-clock time in epoch milliseconds."""
    return int(time.time() * 1000)


def generate_id(prefix: str, timestamp_ms: int | None = None) -> str:
    """Build an id such as ``paste_1700000000000_k3j9x0a1b``."""
    if timestamp_ms is None:
        timestamp_ms = now_ms()
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(9))
    return f"{prefix}_{timestamp_ms}_{suffix}"


def iso_from_ms(timestamp_ms: int) -> str:
    """ISO-8601 UTC string with millisecond precision, e.g. ``2024-01-01T00:00:00.000Z``."""
    dt = datetime.fromtimestamp(timestamp_ms // 1000, tz=timezone.utc)
    return dt.strftime("%Y-%m-%dT%H:%M:%S.") + f"{timestamp_ms % 1000:03d}Z"


def count_words(text: str) -> int:
    """Number of whitespace-separated words in ``text``."""
    stripped = text.strip()
    if not stripped:
        return 0
    return len(stripped.split())
