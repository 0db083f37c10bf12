from datetime import datetime, timedelta, timezone

import pandas as pd

from trending_paths.pipeline.recency import filter_recent_paths

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def item(name, days=None, created_days=60):
    return {
        "name": name,
        "published_at": NOW - timedelta(days=days) if days is not None else None,
        "created_at": NOW - timedelta(days=created_days),
    }


def test_excludes_items_older_than_window():
    items = [item("fresh", 1), item("old", 31), item("ancient", 400)]
    assert [i["name"] for i in filter_recent_paths(items, 30, NOW)] == ["fresh"]


def test_boundary_is_inclusive():
    items = [item("edge", 30), item("just-out", 30.0001)]
    assert [i["name"] for i in filter_recent_paths(items, 30, NOW)] == ["edge"]


def test_falls_back_to_created_at():
    items = [item("draft-new", created_days=2), item("draft-old", created_days=45)]
    assert [i["name"] for i in filter_recent_paths(items, 30, NOW)] == ["draft-new"]


def test_preserves_order():
    items = [item("c", 3), item("a", 1), item("b", 2)]
    assert [i["name"] for i in filter_recent_paths(items, 30, NOW)] == ["c", "a", "b"]


def test_zero_days_keeps_only_items_at_or_after_now():
    items = [item("now", 0), item("past", 0.5), item("future", -1)]
    assert [i["name"] for i in filter_recent_paths(items, 0, NOW)] == ["now", "future"]


def test_invalid_timestamps_are_dropped():
    items = [{"name": "bad", "created_at": "nope"}, item("ok", 1)]
    assert [i["name"] for i in filter_recent_paths(items, 30, NOW)] == ["ok"]


def test_dataframe_records_fall_back_to_created_at():
    df = pd.DataFrame(
        [
            {"name": "unpublished-old", "published_at": None, "created_at": NOW - timedelta(days=90)},
            {"name": "unpublished-new", "published_at": None, "created_at": NOW - timedelta(days=3)},
            {"name": "published", "published_at": NOW - timedelta(days=1), "created_at": NOW - timedelta(days=90)},
        ]
    )
    df["published_at"] = pd.to_datetime(df["published_at"], utc=True)
    records = df.to_dict(orient="records")

    kept = filter_recent_paths(records, 30, NOW)

    assert [i["name"] for i in kept] == ["unpublished-new", "published"]
