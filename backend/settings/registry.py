from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

import yaml

from settings.config import config_path
from settings.types import SearchConfig


def _load_yaml(path: Path) -> dict:
    raw = path.read_text(encoding="utf-8")
    data = yaml.safe_load(raw) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid search config root: {path}")
    return data


def _env_overrides(data: dict) -> dict:
    out = dict(data)
    service = dict(out.get("service") or {})
    if os.getenv("FSCSEARCH_SERVER_SCRIPT"):
        service["serverScript"] = os.environ["FSCSEARCH_SERVER_SCRIPT"].strip()
    out["service"] = service
    if os.getenv("FSCSEARCH_LOCALE"):
        out["locale"] = os.environ["FSCSEARCH_LOCALE"].strip().lower()
    if os.getenv("FSCSEARCH_TRANSPORT"):
        out["transport"] = os.environ["FSCSEARCH_TRANSPORT"].strip().lower()
    if os.getenv("FSCSEARCH_FEATURES_CSV"):
        out["featuresCsv"] = os.environ["FSCSEARCH_FEATURES_CSV"].strip()
    return out


@lru_cache(maxsize=1)
def get_config() -> SearchConfig:
    path = config_path()
    data = _load_yaml(path) if path.exists() else {}
    return SearchConfig.model_validate(_env_overrides(data))


def clear_config_cache() -> None:
    """
    Forget the cached config.

    Env overrides and YAML edits are otherwise not picked up until the process restarts.
    """
    get_config.cache_clear()
