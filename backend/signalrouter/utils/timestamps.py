"""Timestamp helpers."""

from datetime import datetime, timezone

from dateutil.parser import isoparse


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def from_unix(seconds: int | float) -> datetime:
    """Convert unix seconds to an aware UTC datetime."""

    return datetime.fromtimestamp(seconds, tz=timezone.utc)


def parse_iso(value: str) -> datetime:
    """Parse an ISO-8601 string, assuming UTC when no offset is given."""

    parsed = isoparse(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed
