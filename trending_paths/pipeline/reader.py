from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, List

import pandas as pd

from ..models import LearningPath
from ..utils.dates import is_missing
from ..utils.logging import get_logger


def _clean(value: Any) -> Any:
    if is_missing(value):
        return None
    if isinstance(value, pd.Timestamp):
        return value.to_pydatetime()
    return value


def _split_tags(value: Any) -> List[str]:
    if value is None:
        return []
    if isinstance(value, str):
        return [tag for tag in value.split(",") if tag.strip()]
    return [str(tag) for tag in value]


def record_to_path(record: Dict[str, Any]) -> LearningPath:
    """Build a LearningPath from a raw row, flattening a nested ``profile`` object."""

    payload = {key: _clean(value) for key, value in record.items()}
    profile = payload.pop("profile", None)
    if isinstance(profile, dict) and not payload.get("username"):
        payload["username"] = profile.get("username")
    payload["tags"] = _split_tags(payload.get("tags"))
    if payload.get("id") is not None:
        payload["id"] = str(payload["id"])
    return LearningPath(**payload)


def read_paths_file(path: Path) -> List[LearningPath]:
    if path.suffix == ".json":
        with path.open("r", encoding="utf-8") as fh:
            payload = json.load(fh)
        records = payload.get("paths", []) if isinstance(payload, dict) else payload
    elif path.suffix == ".csv":
        records = pd.read_csv(path).to_dict(orient="records")
    else:
        raise ValueError(f"Unsupported input format: {path.suffix or path.name}")

    paths = [record_to_path(record) for record in records]
    get_logger(__name__).info("Read learning paths", extra={"count": len(paths), "path": str(path)})
    return paths
