from __future__ import annotations

from datetime import datetime, timedelta
from typing import Iterable, List, Optional, TypeVar

from ..utils.dates import resolve_now
from ..utils.records import effective_published_at

T = TypeVar("T")


def filter_recent_paths(
    items: Iterable[T],
    days_ago: float = 30,
    now: Optional[datetime] = None,
) -> List[T]:
    """Keep items whose effective publish time falls within the last ``days_ago`` days.

    The boundary is inclusive. Items without a valid publish or creation
    timestamp are dropped. Input order is preserved.
    """

    now = resolve_now(now)
    cutoff = now - timedelta(days=days_ago)
    filtered: List[T] = []
    for item in items:
        published = effective_published_at(item)
        if published is None or published < cutoff:
            continue
        filtered.append(item)
    return filtered
