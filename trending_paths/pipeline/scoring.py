from __future__ import annotations

import math
from datetime import datetime
from typing import Any, Iterable, List, Optional, Tuple, TypeVar

from ..models import ScoringWeights
from ..utils.dates import days_between, resolve_now
from ..utils.records import count_value, effective_published_at

T = TypeVar("T")

# Items published at or after "now" still get a finite score.
MIN_AGE_DAYS = 0.1

DEFAULT_WEIGHTS = ScoringWeights()


def engagement_score(metrics: Any, weights: Optional[ScoringWeights] = None) -> float:
    weights = weights or DEFAULT_WEIGHTS
    return (
        count_value(metrics, "view_count") * weights.view
        + count_value(metrics, "like_count") * weights.like
        + count_value(metrics, "fork_count") * weights.fork
    )


def age_in_days(metrics: Any, now: datetime) -> float:
    """Days since the effective publish time, floored at ``MIN_AGE_DAYS``.

    Returns NaN when the effective publish time is not a valid timestamp.
    """

    published = effective_published_at(metrics)
    if published is None:
        return math.nan
    return max(days_between(published, now), MIN_AGE_DAYS)


def calculate_trending_score(
    metrics: Any,
    now: Optional[datetime] = None,
    weights: Optional[ScoringWeights] = None,
) -> float:
    """Weighted engagement divided by age in days. Higher means more trending.

    ``metrics`` is any record exposing ``view_count``, ``like_count``,
    ``fork_count``, ``published_at`` and ``created_at`` as attributes or keys.
    Missing counts count as zero.
    """

    now = resolve_now(now)
    return engagement_score(metrics, weights) / age_in_days(metrics, now)


def score_paths(
    items: Iterable[T],
    now: Optional[datetime] = None,
    weights: Optional[ScoringWeights] = None,
) -> List[Tuple[T, float]]:
    now = resolve_now(now)
    return [(item, calculate_trending_score(item, now, weights)) for item in items]
