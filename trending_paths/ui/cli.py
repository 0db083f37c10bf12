from __future__ import annotations

from pathlib import Path
from typing import List, Optional

import pandas as pd
import typer

from ..config import load_settings
from ..models import LearningPath, ScoringWeights
from ..pipeline.browse import SORT_OPTIONS, browse_paths
from ..pipeline.dedupe import dedupe_paths
from ..pipeline.normalizer import normalize_paths
from ..pipeline.ranking import get_top_trending
from ..pipeline.reader import read_paths_file
from ..pipeline.scoring import score_paths
from ..pipeline.storage import (
    export_dataframe,
    fork_path,
    increment_view_count,
    load_featured_paths,
    load_public_paths,
    load_public_recent_paths,
    set_visibility,
    toggle_like,
    write_paths,
)
from ..utils.dates import utc_now
from ..utils.logging import configure_logging

app = typer.Typer(add_completion=False, help="Rank community learning paths by trending score")

DISPLAY_COLUMNS = ["title", "username", "trending_score", "view_count", "like_count", "fork_count", "published_at"]


def _paths_frame(paths: List[LearningPath], weights: Optional[ScoringWeights] = None, now=None) -> pd.DataFrame:
    rows = []
    for path, score in score_paths(paths, now, weights):
        row = path.model_dump(mode="json")
        row["tags"] = ",".join(path.tags)
        row["trending_score"] = round(score, 2)
        rows.append(row)
    return pd.DataFrame(rows)


def _echo_paths(df: pd.DataFrame) -> None:
    if df.empty:
        typer.echo("No learning paths available")
    else:
        typer.echo(df[DISPLAY_COLUMNS].to_string(index=False))


@app.command()
def ingest(
    source: Path = typer.Argument(..., exists=True, dir_okay=False, help="JSON or CSV file of learning paths"),
    settings: Path = typer.Option(Path("config/settings.yml"), help="Path to runtime settings"),
    dry_run: bool = typer.Option(False, help="Do not persist results to storage"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Load learning paths from a file into local storage."""

    configure_logging(log_level)
    cfg = load_settings(settings)
    paths = dedupe_paths(normalize_paths(read_paths_file(source)))
    if dry_run:
        typer.echo(f"Read {len(paths)} paths (dry-run, not persisted)")
        return
    written = write_paths(paths, cfg.storage)
    typer.echo(f"Persisted {written} paths to {cfg.storage.path}")


@app.command()
def trending(
    settings: Path = typer.Option(Path("config/settings.yml"), help="Path to runtime settings"),
    limit: Optional[int] = typer.Option(None, help="Number of paths to show (defaults to settings)"),
    days: Optional[float] = typer.Option(None, min=0, help="Recency window in days (defaults to settings)"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Show the top trending public paths."""

    configure_logging(log_level)
    cfg = load_settings(settings)
    limit = cfg.trending.limit if limit is None else limit
    days = cfg.trending.days_ago if days is None else days
    now = utc_now()
    candidates = load_public_recent_paths(cfg.storage, days, now)
    top = get_top_trending(candidates, limit, days, now, cfg.trending.weights)
    _echo_paths(_paths_frame(top, cfg.trending.weights, now))


@app.command()
def browse(
    settings: Path = typer.Option(Path("config/settings.yml"), help="Path to runtime settings"),
    sort_by: str = typer.Option("recent", help=f"One of: {', '.join(SORT_OPTIONS)}"),
    search: str = typer.Option("", help="Filter by topic or title"),
    limit: int = typer.Option(20, min=1, help="Number of rows to display"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """List public paths the way the community page does."""

    configure_logging(log_level)
    if sort_by not in SORT_OPTIONS:
        raise typer.BadParameter(f"expected one of {', '.join(SORT_OPTIONS)}", param_hint="--sort-by")
    cfg = load_settings(settings)
    now = utc_now()
    paths = browse_paths(load_public_paths(cfg.storage), sort_by, search, now)[:limit]
    _echo_paths(_paths_frame(paths, cfg.trending.weights, now))


@app.command()
def featured(
    settings: Path = typer.Option(Path("config/settings.yml"), help="Path to runtime settings"),
    limit: int = typer.Option(6, min=1, help="Number of featured paths"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Show featured public paths, most recently featured first."""

    configure_logging(log_level)
    cfg = load_settings(settings)
    _echo_paths(_paths_frame(load_featured_paths(cfg.storage, limit), cfg.trending.weights))


@app.command()
def export(
    out: Path = typer.Argument(..., help="Destination file (csv, json, parquet)"),
    settings: Path = typer.Option(Path("config/settings.yml"), help="Path to runtime settings"),
    limit: Optional[int] = typer.Option(None, help="Number of paths to export (defaults to settings)"),
    days: Optional[float] = typer.Option(None, min=0, help="Recency window in days (defaults to settings)"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Export the current trending ranking to a file."""

    configure_logging(log_level)
    cfg = load_settings(settings)
    limit = cfg.trending.limit if limit is None else limit
    days = cfg.trending.days_ago if days is None else days
    now = utc_now()
    top = get_top_trending(load_public_recent_paths(cfg.storage, days, now), limit, days, now, cfg.trending.weights)
    df = _paths_frame(top, cfg.trending.weights, now)
    export_dataframe(df, out)
    typer.echo(f"Exported {len(df)} paths to {out}")


@app.command()
def publish(
    path_id: str = typer.Argument(..., help="Learning path id"),
    settings: Path = typer.Option(Path("config/settings.yml"), help="Path to runtime settings"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Make a path public. The first publish sets its publish time."""

    configure_logging(log_level)
    cfg = load_settings(settings)
    path = set_visibility(cfg.storage, path_id, True)
    typer.echo(f"Published {path.id} (published_at {path.published_at.isoformat()})")


@app.command()
def unpublish(
    path_id: str = typer.Argument(..., help="Learning path id"),
    settings: Path = typer.Option(Path("config/settings.yml"), help="Path to runtime settings"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Make a path private again."""

    configure_logging(log_level)
    cfg = load_settings(settings)
    path = set_visibility(cfg.storage, path_id, False)
    typer.echo(f"Unpublished {path.id}")


@app.command()
def view(
    path_id: str = typer.Argument(..., help="Learning path id"),
    viewer: str = typer.Option(..., help="Id of the viewing user"),
    settings: Path = typer.Option(Path("config/settings.yml"), help="Path to runtime settings"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Record a view of a path."""

    configure_logging(log_level)
    cfg = load_settings(settings)
    count = increment_view_count(cfg.storage, path_id, viewer)
    typer.echo(f"{path_id} now has {count} views")


@app.command()
def like(
    path_id: str = typer.Argument(..., help="Learning path id"),
    user: str = typer.Option(..., help="Id of the liking user"),
    settings: Path = typer.Option(Path("config/settings.yml"), help="Path to runtime settings"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Like a path, or remove the user's existing like."""

    configure_logging(log_level)
    cfg = load_settings(settings)
    liked = toggle_like(cfg.storage, path_id, user)
    typer.echo(f"{'Liked' if liked else 'Unliked'} {path_id}")


@app.command()
def fork(
    path_id: str = typer.Argument(..., help="Learning path id"),
    user: str = typer.Option(..., help="Id of the user who owns the fork"),
    settings: Path = typer.Option(Path("config/settings.yml"), help="Path to runtime settings"),
    log_level: str = typer.Option("INFO", help="Logging level"),
):
    """Copy a path into a private fork owned by another user."""

    configure_logging(log_level)
    cfg = load_settings(settings)
    forked = fork_path(cfg.storage, path_id, user)
    typer.echo(f"Forked {path_id} as {forked.id}")


if __name__ == "__main__":  # pragma: no cover
    app()
