"""
UTC datetime helpers.

SQLite (tests) hands back naive datetimes for timezone-aware columns while
PostgreSQL returns aware ones; every value read from the database goes through
`ensure_utc` so domain code only ever compares aware UTC instants.
"""

from datetime import datetime, timezone
from typing import Optional, overload


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


@overload
def ensure_utc(value: datetime) -> datetime: ...


@overload
def ensure_utc(value: None) -> None: ...


def ensure_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)
