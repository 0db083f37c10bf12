from __future__ import annotations

import yaml
from pathlib import Path
from typing import Any, Dict

from .models import Settings

PROJECT_ROOT = Path(__file__).resolve().parents[1]


def load_yaml(path: Path) -> Dict[str, Any]:
    with path.open("r", encoding="utf-8") as fh:
        return yaml.safe_load(fh) or {}


def _resolve(path_value: str) -> str:
    path = Path(path_value)
    if not path.is_absolute():
        path = (PROJECT_ROOT / path).resolve()
    return str(path)


def load_settings(settings_path: Path) -> Settings:
    config = load_yaml(settings_path)
    settings = Settings(**config)
    settings.storage.path = _resolve(settings.storage.path)
    settings.storage.parquet_dir = _resolve(settings.storage.parquet_dir)
    return settings
