# Overview: UTC clock, ISO-8601 parsing and the "Z" serializer used by the JSON provider.

from __future__ import annotations

from datetime import date, datetime, timezone
from typing import Optional


def utcnow() -> datetime:
    """Current time as a UTC-naive datetime; every stored timestamp uses this form."""
    return datetime.now(timezone.utc).replace(tzinfo=None)


def as_utc_naive(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def parse_iso_datetime(value: Optional[str]) -> Optional[datetime]:
    """
    Parse a query-string or payload timestamp.

    Blank input gives None. A bare date means midnight UTC, a naive time is
    taken as UTC, and a "Z" or numeric offset is converted to UTC.

    Raises ValueError for anything fromisoformat rejects.
    """
    if value is None or not value.strip():
        return None
    text = value.strip()
    if text[-1] in "zZ":
        text = text[:-1] + "+00:00"
    return as_utc_naive(datetime.fromisoformat(text))


def to_utc_z(dt: Optional[datetime]) -> Optional[str]:
    """Second-precision ISO-8601 with a trailing Z; naive values are read as UTC."""
    if dt is None:
        return None
    return as_utc_naive(dt).replace(microsecond=0).isoformat() + "Z"


def minimum_birth_date(min_age: int, today: Optional[date] = None) -> date:
    """Latest birth date that makes a customer at least min_age years old today."""
    today = today or utcnow().date()
    try:
        return today.replace(year=today.year - min_age)
    except ValueError:
        # Feb 29 on a non-leap target year
        return today.replace(year=today.year - min_age, day=28)
