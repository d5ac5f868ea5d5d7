from __future__ import annotations

from datetime import UTC, datetime


def now_utc() -> datetime:
    """Return timezone-aware UTC timestamp."""
    return datetime.now(tz=UTC)


def iso_timestamp(value: datetime | None = None) -> str:
    """Return an ISO-8601 UTC string with millisecond precision and a ``Z`` suffix."""
    value = value or now_utc()
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.astimezone(UTC).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def filename_timestamp(value: datetime | None = None) -> str:
    """ISO timestamp with ``:`` and ``.`` replaced so it is safe in file names."""
    return iso_timestamp(value).replace(":", "-").replace(".", "-")


def elapsed_ms(started: datetime, finished: datetime | None = None) -> int:
    finished = finished or now_utc()
    return int((finished - started).total_seconds() * 1000)
