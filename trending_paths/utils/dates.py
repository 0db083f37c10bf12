from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Optional

import pandas as pd
from dateutil import parser as date_parser

SECONDS_PER_DAY = 86400.0


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def is_missing(value: Any) -> bool:
    """True for None and the pandas/numpy null markers (NaN, NaT, pd.NA)."""

    if value is None:
        return True
    if isinstance(value, (list, tuple, dict, set)):
        return False
    return bool(pd.isna(value))


def parse_timestamp(value: Any) -> Optional[datetime]:
    """Return an aware UTC datetime, or None when the value is missing or unparseable.

    Strings are read as ISO-8601, including the ``+00`` offsets and long
    fractional seconds Postgres emits.
    """

    if is_missing(value):
        return None
    if isinstance(value, pd.Timestamp):
        value = value.to_pydatetime()
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            value = date_parser.isoparse(text)
        except (ValueError, OverflowError):
            return None
    if not isinstance(value, datetime):
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def days_between(start: datetime, end: datetime) -> float:
    return (end - start).total_seconds() / SECONDS_PER_DAY


def resolve_now(now: Optional[datetime] = None) -> datetime:
    """Snapshot the clock unless the caller pinned the current instant."""

    if now is None:
        return utc_now()
    return parse_timestamp(now)
