import math
from datetime import datetime, timedelta, timezone

import pandas as pd

from trending_paths.models import EngagementMetrics, ScoringWeights
from trending_paths.pipeline.scoring import MIN_AGE_DAYS, age_in_days, calculate_trending_score, score_paths

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_metrics(views=0, likes=0, forks=0, days=1.0, published=True) -> EngagementMetrics:
    stamp = NOW - timedelta(days=days)
    return EngagementMetrics(
        view_count=views,
        like_count=likes,
        fork_count=forks,
        published_at=stamp if published else None,
        created_at=stamp if not published else NOW - timedelta(days=90),
    )


def test_score_matches_weighted_formula():
    for views, likes, forks, days in [(0, 0, 0, 1), (7, 2, 1, 4), (100, 10, 3, 0.5)]:
        metrics = make_metrics(views, likes, forks, days)
        expected = (views + 3 * likes + 5 * forks) / days
        assert math.isclose(calculate_trending_score(metrics, NOW), expected)


def test_concrete_scores():
    a = make_metrics(views=100, likes=10, forks=0, days=2)
    b = make_metrics(views=10, likes=5, forks=10, days=1)
    assert math.isclose(calculate_trending_score(a, NOW), 65.0)
    assert math.isclose(calculate_trending_score(b, NOW), 75.0)


def test_score_is_monotonic_in_each_count():
    base = calculate_trending_score(make_metrics(5, 5, 5, 3), NOW)
    assert calculate_trending_score(make_metrics(6, 5, 5, 3), NOW) > base
    assert calculate_trending_score(make_metrics(5, 6, 5, 3), NOW) > base
    assert calculate_trending_score(make_metrics(5, 5, 6, 3), NOW) > base


def test_forks_outweigh_likes_outweigh_views():
    views = calculate_trending_score(make_metrics(views=4, days=2), NOW)
    likes = calculate_trending_score(make_metrics(likes=4, days=2), NOW)
    forks = calculate_trending_score(make_metrics(forks=4, days=2), NOW)
    assert forks > likes > views


def test_missing_counts_are_zero():
    metrics = {"created_at": NOW - timedelta(days=2), "like_count": 4}
    assert math.isclose(calculate_trending_score(metrics, NOW), 6.0)


def test_created_at_used_when_unpublished():
    metrics = make_metrics(views=10, days=5, published=False)
    assert math.isclose(calculate_trending_score(metrics, NOW), 2.0)


def test_age_floor_for_items_published_now_or_later():
    assert age_in_days(make_metrics(days=0), NOW) == MIN_AGE_DAYS
    assert age_in_days(make_metrics(days=-3), NOW) == MIN_AGE_DAYS
    assert math.isclose(calculate_trending_score(make_metrics(views=1, days=0), NOW), 10.0)


def test_accepts_iso_strings_and_naive_datetimes():
    record = {"view_count": 10, "published_at": "2026-10-17T12:00:00Z", "created_at": "2026-10-01T00:00:00Z"}
    assert math.isclose(calculate_trending_score(record, NOW), 5.0)
    naive = {"view_count": 10, "created_at": datetime(2026, 10, 17, 12, 0)}
    assert math.isclose(calculate_trending_score(naive, NOW), 5.0)


def test_malformed_timestamp_yields_nan():
    assert math.isnan(calculate_trending_score({"view_count": 3, "created_at": "not a date"}, NOW))
    record = {"view_count": 3, "published_at": "garbage", "created_at": "2026-10-18T12:00:00Z"}
    assert math.isnan(calculate_trending_score(record, NOW))


def test_custom_weights():
    metrics = make_metrics(views=2, likes=2, forks=2, days=1)
    weights = ScoringWeights(view=0, like=1, fork=0)
    assert math.isclose(calculate_trending_score(metrics, NOW, weights), 2.0)


def test_score_paths_keeps_input_order():
    items = [make_metrics(views=1), make_metrics(views=9)]
    scored = score_paths(items, NOW)
    assert [item for item, _ in scored] == items
    assert [score for _, score in scored] == [1.0, 9.0]


def test_dataframe_records_treat_nulls_as_missing():
    df = pd.DataFrame(
        [
            {"view_count": 10, "like_count": None, "fork_count": 0, "published_at": NOW - timedelta(days=1)},
            {"view_count": 6, "like_count": 1, "fork_count": 0, "published_at": None},
        ]
    )
    df["published_at"] = pd.to_datetime(df["published_at"], utc=True)
    df["created_at"] = pd.to_datetime([NOW - timedelta(days=5), NOW - timedelta(days=3)], utc=True)
    first, second = df.to_dict(orient="records")

    assert math.isclose(calculate_trending_score(first, NOW), 10.0)
    assert math.isclose(calculate_trending_score(second, NOW), 3.0)


def test_postgres_timestamp_forms():
    record = {"view_count": 10, "created_at": "2026-10-17 12:00:00.12345+00"}
    expected = 10 / (2 - 0.12345 / 86400)
    assert math.isclose(calculate_trending_score(record, NOW), expected)
    assert math.isclose(calculate_trending_score({"view_count": 4, "created_at": "2026-10-17T12:00:00+0000"}, NOW), 2.0)
