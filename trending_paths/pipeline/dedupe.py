from __future__ import annotations

from typing import Dict, Iterable, List

from ..models import LearningPath
from ..utils.logging import get_logger


def dedupe_paths(paths: Iterable[LearningPath]) -> List[LearningPath]:
    """Keep the last record per id, in first-seen position."""

    latest: Dict[str, LearningPath] = {}
    total = 0
    for path in paths:
        latest[path.id] = path
        total += 1
    dropped = total - len(latest)
    if dropped:
        get_logger(__name__).info("Dropped duplicate paths", extra={"dropped": dropped, "kept": len(latest)})
    return list(latest.values())
