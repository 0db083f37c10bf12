from __future__ import annotations

from typing import Iterable, List

from ..models import LearningPath


def normalize_paths(paths: Iterable[LearningPath]) -> List[LearningPath]:
    normalized: List[LearningPath] = []
    for path in paths:
        path.topic = path.topic.strip()
        title = (path.title or "").strip()
        path.title = title or path.topic[:120] or None
        tags: List[str] = []
        for tag in path.tags:
            tag = tag.strip().lower()
            if tag and tag not in tags:
                tags.append(tag)
        path.tags = tags
        normalized.append(path)
    return normalized
