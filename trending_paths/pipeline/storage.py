from __future__ import annotations

import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Iterable, List, Optional

import duckdb
import pandas as pd

from ..models import LearningPath, StorageSettings
from ..utils.dates import resolve_now
from ..utils.logging import get_logger
from .reader import record_to_path

COLUMNS = [
    "id",
    "topic",
    "title",
    "user_id",
    "username",
    "is_public",
    "is_featured",
    "featured_at",
    "published_at",
    "created_at",
    "updated_at",
    "view_count",
    "like_count",
    "fork_count",
    "tags",
    "difficulty_level",
    "category",
    "forked_from_id",
]


def ensure_schema(conn: duckdb.DuckDBPyConnection) -> None:
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS learning_paths (
            id TEXT PRIMARY KEY,
            topic TEXT,
            title TEXT,
            user_id TEXT,
            username TEXT,
            is_public BOOLEAN,
            is_featured BOOLEAN,
            featured_at TIMESTAMP,
            published_at TIMESTAMP,
            created_at TIMESTAMP,
            updated_at TIMESTAMP,
            view_count BIGINT,
            like_count BIGINT,
            fork_count BIGINT,
            tags TEXT,
            difficulty_level TEXT,
            category TEXT,
            forked_from_id TEXT
        )
        """
    )
    conn.execute(
        """
        CREATE TABLE IF NOT EXISTS path_interactions (
            path_id TEXT,
            user_id TEXT,
            interaction_type TEXT,
            created_at TIMESTAMP
        )
        """
    )


def _connect(settings: StorageSettings) -> duckdb.DuckDBPyConnection:
    db_path = Path(settings.path)
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = duckdb.connect(str(db_path))
    ensure_schema(conn)
    return conn


def _storage_frame(paths: List[LearningPath]) -> pd.DataFrame:
    df = pd.DataFrame([path.dict_for_storage() for path in paths]).reindex(columns=COLUMNS)
    for column in ("featured_at", "published_at", "created_at", "updated_at"):
        df[column] = pd.to_datetime(df[column])
    for column in ("view_count", "like_count", "fork_count"):
        df[column] = df[column].astype("Int64")
    return df


def _upsert(conn: duckdb.DuckDBPyConnection, df: pd.DataFrame) -> None:
    for path_id in df["id"].tolist():
        conn.execute("DELETE FROM learning_paths WHERE id = ?", [path_id])
    conn.register("paths_df", df)
    conn.execute(f"INSERT INTO learning_paths SELECT {', '.join(COLUMNS)} FROM paths_df")
    conn.unregister("paths_df")


def write_paths(paths: Iterable[LearningPath], settings: StorageSettings) -> int:
    paths = list(paths)
    if not paths:
        return 0
    df = _storage_frame(paths)

    conn = _connect(settings)
    try:
        _upsert(conn, df)
    finally:
        conn.close()

    if settings.write_parquet:
        export_dir = Path(settings.parquet_dir)
        export_dir.mkdir(parents=True, exist_ok=True)
        parquet_path = export_dir / "learning_paths.parquet"
        df.to_parquet(parquet_path, index=False)
        get_logger(__name__).info("Wrote Parquet export", extra={"path": str(parquet_path)})

    get_logger(__name__).info("Stored learning paths", extra={"count": len(df), "path": settings.path})
    return len(df)


def load_dataframe(
    settings: StorageSettings,
    query: str = "SELECT * FROM learning_paths",
    params: Optional[list] = None,
) -> pd.DataFrame:
    """Run a read query. A database that does not exist yet reads as empty."""

    if not Path(settings.path).exists():
        return pd.DataFrame(columns=COLUMNS)
    conn = duckdb.connect(str(settings.path), read_only=True)
    try:
        return conn.execute(query, params or []).df()
    finally:
        conn.close()


def load_paths(
    settings: StorageSettings,
    query: str = "SELECT * FROM learning_paths",
    params: Optional[list] = None,
) -> List[LearningPath]:
    df = load_dataframe(settings, query, params)
    return [record_to_path(row) for row in df.to_dict(orient="records")]


def load_public_recent_paths(
    settings: StorageSettings,
    days_ago: float = 30,
    now: Optional[datetime] = None,
) -> List[LearningPath]:
    """Public, published paths inside the recency window, newest first by creation."""

    now = resolve_now(now)
    cutoff = (now - timedelta(days=days_ago)).astimezone(timezone.utc).replace(tzinfo=None)
    return load_paths(
        settings,
        """
        SELECT * FROM learning_paths
        WHERE is_public AND published_at IS NOT NULL AND published_at >= ?
        ORDER BY created_at DESC
        """,
        [cutoff],
    )


def load_public_paths(settings: StorageSettings) -> List[LearningPath]:
    return load_paths(settings, "SELECT * FROM learning_paths WHERE is_public ORDER BY created_at DESC")


def load_featured_paths(settings: StorageSettings, limit: int = 6) -> List[LearningPath]:
    if limit <= 0:
        return []
    return load_paths(
        settings,
        f"""
        SELECT * FROM learning_paths
        WHERE is_public AND is_featured
        ORDER BY featured_at DESC NULLS LAST
        LIMIT {int(limit)}
        """,
    )


def export_dataframe(df: pd.DataFrame, out_path: Path) -> None:
    out_path.parent.mkdir(parents=True, exist_ok=True)
    if out_path.suffix == ".csv":
        df.to_csv(out_path, index=False)
    elif out_path.suffix == ".json":
        df.to_json(out_path, orient="records", lines=False, date_format="iso")
    elif out_path.suffix in {".parquet", ".pq"}:
        df.to_parquet(out_path, index=False)
    else:
        raise ValueError("Unsupported export format")
    get_logger(__name__).info("Exported dataset", extra={"rows": len(df), "path": str(out_path)})


def _naive_utc(now: Optional[datetime]) -> datetime:
    return resolve_now(now).replace(tzinfo=None)


def _require_path(conn: duckdb.DuckDBPyConnection, path_id: str) -> None:
    row = conn.execute("SELECT id FROM learning_paths WHERE id = ?", [path_id]).fetchone()
    if row is None:
        raise LookupError(f"Unknown learning path: {path_id}")


def _record_interaction(
    conn: duckdb.DuckDBPyConnection, path_id: str, user_id: str, interaction_type: str, stamp: datetime
) -> None:
    conn.execute(
        "INSERT INTO path_interactions VALUES (?, ?, ?, ?)",
        [path_id, user_id, interaction_type, stamp],
    )


def get_path(settings: StorageSettings, path_id: str) -> LearningPath:
    paths = load_paths(settings, "SELECT * FROM learning_paths WHERE id = ?", [path_id])
    if not paths:
        raise LookupError(f"Unknown learning path: {path_id}")
    return paths[0]


def set_visibility(
    settings: StorageSettings,
    path_id: str,
    make_public: bool,
    now: Optional[datetime] = None,
) -> LearningPath:
    """Publish or unpublish a path.

    ``published_at`` is stamped on the first publish only, so unpublishing and
    republishing keeps the original publish time.
    """

    stamp = _naive_utc(now)
    conn = _connect(settings)
    try:
        _require_path(conn, path_id)
        if make_public:
            conn.execute(
                """
                UPDATE learning_paths
                SET is_public = TRUE, published_at = COALESCE(published_at, ?), updated_at = ?
                WHERE id = ?
                """,
                [stamp, stamp, path_id],
            )
        else:
            conn.execute(
                "UPDATE learning_paths SET is_public = FALSE, updated_at = ? WHERE id = ?",
                [stamp, path_id],
            )
    finally:
        conn.close()
    get_logger(__name__).info("Updated path visibility", extra={"path_id": path_id, "public": make_public})
    return get_path(settings, path_id)


def increment_view_count(
    settings: StorageSettings,
    path_id: str,
    viewer_id: str,
    now: Optional[datetime] = None,
) -> int:
    stamp = _naive_utc(now)
    conn = _connect(settings)
    try:
        _require_path(conn, path_id)
        conn.begin()
        try:
            _record_interaction(conn, path_id, viewer_id, "view", stamp)
            conn.execute(
                "UPDATE learning_paths SET view_count = COALESCE(view_count, 0) + 1 WHERE id = ?",
                [path_id],
            )
            conn.commit()
        except duckdb.Error:
            conn.rollback()
            raise
        (count,) = conn.execute("SELECT view_count FROM learning_paths WHERE id = ?", [path_id]).fetchone()
    finally:
        conn.close()
    return int(count)


def toggle_like(
    settings: StorageSettings,
    path_id: str,
    user_id: str,
    now: Optional[datetime] = None,
) -> bool:
    """Like the path for ``user_id``, or remove an existing like. Returns the new liked state."""

    stamp = _naive_utc(now)
    conn = _connect(settings)
    try:
        _require_path(conn, path_id)
        conn.begin()
        try:
            (existing,) = conn.execute(
                """
                SELECT COUNT(*) FROM path_interactions
                WHERE path_id = ? AND user_id = ? AND interaction_type = 'like'
                """,
                [path_id, user_id],
            ).fetchone()
            if existing:
                conn.execute(
                    """
                    DELETE FROM path_interactions
                    WHERE path_id = ? AND user_id = ? AND interaction_type = 'like'
                    """,
                    [path_id, user_id],
                )
                conn.execute(
                    """
                    UPDATE learning_paths
                    SET like_count = GREATEST(COALESCE(like_count, 0) - 1, 0)
                    WHERE id = ?
                    """,
                    [path_id],
                )
            else:
                _record_interaction(conn, path_id, user_id, "like", stamp)
                conn.execute(
                    "UPDATE learning_paths SET like_count = COALESCE(like_count, 0) + 1 WHERE id = ?",
                    [path_id],
                )
            conn.commit()
        except duckdb.Error:
            conn.rollback()
            raise
    finally:
        conn.close()
    liked = not existing
    get_logger(__name__).info("Toggled like", extra={"path_id": path_id, "liked": liked})
    return liked


def fork_path(
    settings: StorageSettings,
    path_id: str,
    user_id: str,
    now: Optional[datetime] = None,
) -> LearningPath:
    """Create a private copy of a path owned by ``user_id`` and count the fork on the source."""

    now = resolve_now(now)
    source = get_path(settings, path_id)
    fork = LearningPath(
        id=str(uuid.uuid4()),
        topic=source.topic,
        title=f"{source.title} (Fork)" if source.title else None,
        user_id=user_id,
        forked_from_id=source.id,
        is_public=False,
        created_at=now,
        updated_at=now,
        view_count=0,
        like_count=0,
        fork_count=0,
    )
    df = _storage_frame([fork])

    conn = _connect(settings)
    try:
        conn.begin()
        try:
            _upsert(conn, df)
            _record_interaction(conn, path_id, user_id, "fork", _naive_utc(now))
            conn.execute(
                "UPDATE learning_paths SET fork_count = COALESCE(fork_count, 0) + 1 WHERE id = ?",
                [path_id],
            )
            conn.commit()
        except duckdb.Error:
            conn.rollback()
            raise
    finally:
        conn.close()
    get_logger(__name__).info("Forked path", extra={"path_id": path_id, "fork_id": fork.id})
    return fork
