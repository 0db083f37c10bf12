from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime
from typing import Any, Optional

from .dates import is_missing, parse_timestamp


def field_value(item: Any, name: str, default: Any = None) -> Any:
    """Read ``name`` from a mapping or an attribute-style record."""

    if isinstance(item, Mapping):
        return item.get(name, default)
    return getattr(item, name, default)


def count_value(item: Any, name: str) -> float:
    value = field_value(item, name)
    return 0 if is_missing(value) else value


def effective_published_at(item: Any) -> Optional[datetime]:
    """Publish time if set, else creation time. None when that value is invalid.

    Null markers and empty strings count as unset. A present but malformed
    ``published_at`` does not fall back to ``created_at``.
    """

    raw = field_value(item, "published_at")
    if is_missing(raw) or raw == "":
        raw = field_value(item, "created_at")
    return parse_timestamp(raw)
