from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    return datetime.strptime(value, "%Y-%m-%d").date()


def to_naive_utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: str, field_name: str = "timestamp") -> datetime:
    """Parse an ISO-8601 timestamp into a naive UTC datetime.

    MySQL DATETIME columns come back naive, so every instant the app compares
    is kept naive UTC.
    """
    v = (value or "").strip()
    if not v:
        raise ValidationError(f"{field_name} is required")
    if v.endswith("Z"):
        v = v[:-1] + "+00:00"
    try:
        return to_naive_utc(datetime.fromisoformat(v))
    except ValueError:
        raise ValidationError(f"{field_name} is not a valid ISO-8601 timestamp")


def parse_optional_datetime(value: Optional[str], field_name: str) -> Optional[datetime]:
    if value is None or not str(value).strip():
        return None
    return parse_iso_datetime(str(value), field_name)


def now_utc() -> datetime:
    """Current UTC time (naive).

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now(timezone.utc).replace(tzinfo=None)


def isoformat(value: Optional[datetime]) -> Optional[str]:
    if value is None:
        return None
    return value.strftime("%Y-%m-%dT%H:%M:%SZ")
