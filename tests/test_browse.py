from datetime import datetime, timedelta, timezone

import pytest

from trending_paths.pipeline.browse import browse_paths, search_paths

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_row(path_id, topic, title=None, views=0, likes=0, days=1.0):
    return {
        "id": path_id,
        "topic": topic,
        "title": title,
        "view_count": views,
        "like_count": likes,
        "published_at": NOW - timedelta(days=days),
        "created_at": NOW - timedelta(days=days),
    }


ROWS = [
    make_row("1", "Rust ownership", views=50, likes=1, days=3),
    make_row("2", "Intro to Python", title="Python for data work", views=5, likes=20, days=10),
    make_row("3", "Linear algebra", views=500, likes=2, days=1),
]


def test_search_matches_topic_and_title_case_insensitively():
    assert [r["id"] for r in search_paths(ROWS, "PYTHON")] == ["2"]
    assert [r["id"] for r in search_paths(ROWS, "data work")] == ["2"]
    assert [r["id"] for r in search_paths(ROWS, "   ")] == ["1", "2", "3"]


def test_sort_options():
    assert [r["id"] for r in browse_paths(ROWS, "recent", now=NOW)] == ["3", "1", "2"]
    assert [r["id"] for r in browse_paths(ROWS, "popular", now=NOW)] == ["2", "3", "1"]
    assert [r["id"] for r in browse_paths(ROWS, "views", now=NOW)] == ["3", "1", "2"]
    assert [r["id"] for r in browse_paths(ROWS, "trending", now=NOW)] == ["3", "1", "2"]


def test_search_and_sort_combined():
    rows = ROWS + [make_row("4", "Python packaging", likes=50, days=2)]
    assert [r["id"] for r in browse_paths(rows, "popular", "python", NOW)] == ["4", "2"]


def test_recent_puts_invalid_dates_last():
    rows = [{"id": "bad", "topic": "x", "created_at": "??"}] + ROWS
    assert [r["id"] for r in browse_paths(rows, "recent", now=NOW)][-1] == "bad"


def test_unknown_sort_option():
    with pytest.raises(ValueError):
        browse_paths(ROWS, "alphabetical")
