# reddit_clone/utils.py
from datetime import datetime, timezone
from typing import Optional


# ── timestamps ─────────────────────────────────────────────
def utcnow_iso(now: Optional[datetime] = None) -> str:
    """
    UTC ISO8601 string with fixed microsecond precision.

    Every stored timestamp goes through here so that string order equals
    time order and SQLite's julianday() can parse the value.
    - naive datetimes are assumed to be UTC
    """
    dt = now or datetime.now(timezone.utc)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc).isoformat(timespec="microseconds")


# ── input cleanup ──────────────────────────────────────────
def clean_text(value: Optional[str]) -> str:
    return (value or "").strip()
