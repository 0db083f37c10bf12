from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class ScoringWeights(BaseModel):
    view: float = Field(1.0, ge=0)
    like: float = Field(3.0, ge=0)
    fork: float = Field(5.0, ge=0)


class TrendingSettings(BaseModel):
    limit: int = Field(5, description="Maximum number of trending paths to return")
    days_ago: float = Field(30, ge=0, description="Trailing recency window in days")
    weights: ScoringWeights = Field(default_factory=ScoringWeights)


class StorageSettings(BaseModel):
    path: str = Field("data/paths.duckdb", description="Database file path")
    write_parquet: bool = False
    parquet_dir: str = Field("data/exports", description="Directory for Parquet exports")


class Settings(BaseModel):
    trending: TrendingSettings = Field(default_factory=TrendingSettings)
    storage: StorageSettings = Field(default_factory=StorageSettings)


def _as_utc(value: Optional[datetime]) -> Optional[datetime]:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class EngagementMetrics(BaseModel):
    """Engagement counters and publish timestamps of a content item."""

    view_count: Optional[int] = Field(None, ge=0)
    like_count: Optional[int] = Field(None, ge=0)
    fork_count: Optional[int] = Field(None, ge=0)
    published_at: Optional[datetime] = None
    created_at: datetime

    @field_validator("published_at", "created_at")
    @classmethod
    def _normalize_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)


class LearningPath(EngagementMetrics):
    id: str
    topic: str
    title: Optional[str] = None
    user_id: Optional[str] = None
    username: Optional[str] = None
    is_public: bool = False
    is_featured: bool = False
    featured_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)
    difficulty_level: Optional[str] = None
    category: Optional[str] = None
    forked_from_id: Optional[str] = None

    @field_validator("featured_at", "updated_at")
    @classmethod
    def _normalize_optional_timezone(cls, value: Optional[datetime]) -> Optional[datetime]:
        return _as_utc(value)

    def dict_for_storage(self) -> Dict[str, Any]:
        """Flatten the record into primitives with naive UTC timestamps."""

        payload = self.model_dump(mode="python")
        for key in ("published_at", "created_at", "featured_at", "updated_at"):
            value = payload.get(key)
            if value is not None:
                payload[key] = value.astimezone(timezone.utc).replace(tzinfo=None)
        payload["tags"] = ",".join(self.tags)
        return payload
