from __future__ import annotations

from datetime import datetime
from typing import Any, Callable, Dict, Iterable, List, Optional, TypeVar

from ..utils.records import count_value, effective_published_at, field_value
from .ranking import sort_by_trending

T = TypeVar("T")

SORT_OPTIONS = ("recent", "popular", "views", "trending")


def _recent_key(item: Any) -> float:
    published = effective_published_at(item)
    return float("-inf") if published is None else published.timestamp()


_SORT_KEYS: Dict[str, Callable[[Any], float]] = {
    "recent": _recent_key,
    "popular": lambda item: count_value(item, "like_count"),
    "views": lambda item: count_value(item, "view_count"),
}


def search_paths(items: Iterable[T], search: str) -> List[T]:
    """Case-insensitive substring match against topic or title."""

    needle = (search or "").strip().lower()
    if not needle:
        return list(items)
    matched: List[T] = []
    for item in items:
        haystack = " ".join(
            str(field_value(item, name) or "") for name in ("topic", "title")
        ).lower()
        if needle in haystack:
            matched.append(item)
    return matched


def browse_paths(
    items: Iterable[T],
    sort_by: str = "recent",
    search: str = "",
    now: Optional[datetime] = None,
) -> List[T]:
    if sort_by not in SORT_OPTIONS:
        raise ValueError(f"Unknown sort option {sort_by!r}; expected one of {', '.join(SORT_OPTIONS)}")
    matched = search_paths(items, search)
    if sort_by == "trending":
        return sort_by_trending(matched, now)
    return sorted(matched, key=_SORT_KEYS[sort_by], reverse=True)
