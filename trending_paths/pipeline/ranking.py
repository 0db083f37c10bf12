from __future__ import annotations

import math
from datetime import datetime
from typing import Iterable, List, Optional, TypeVar

from ..models import ScoringWeights
from ..utils.dates import resolve_now
from ..utils.logging import get_logger
from .recency import filter_recent_paths
from .scoring import score_paths

T = TypeVar("T")


def _sort_key(score: float) -> float:
    # NaN compares false both ways and would corrupt the ordering.
    return -math.inf if math.isnan(score) else score


def sort_by_trending(
    items: Iterable[T],
    now: Optional[datetime] = None,
    weights: Optional[ScoringWeights] = None,
) -> List[T]:
    """Return a new list ordered by trending score, highest first.

    Equal scores keep their input order; unscorable items go last.
    """

    scored = score_paths(items, resolve_now(now), weights)
    scored.sort(key=lambda pair: _sort_key(pair[1]), reverse=True)
    return [item for item, _ in scored]


def get_top_trending(
    items: Iterable[T],
    limit: int = 5,
    days_ago: float = 30,
    now: Optional[datetime] = None,
    weights: Optional[ScoringWeights] = None,
) -> List[T]:
    now = resolve_now(now)
    if limit <= 0:
        return []
    recent = filter_recent_paths(items, days_ago, now)
    ranked = sort_by_trending(recent, now, weights)[:limit]
    get_logger(__name__).debug(
        "Ranked trending paths", extra={"candidates": len(recent), "returned": len(ranked)}
    )
    return ranked
