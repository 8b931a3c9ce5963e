from __future__ import annotations

import os
from pathlib import Path


def _repo_root() -> Path:
    return Path(__file__).resolve().parents[2]


def config_path() -> Path:
    return Path(os.getenv("FSCSEARCH_CONFIG") or (_repo_root() / "config" / "search.yaml"))


def translations_path() -> Path:
    return Path(
        os.getenv("FSCSEARCH_TRANSLATIONS")
        or (_repo_root() / "config" / "translations.yaml")
    )


def resolve_repo_path(repo_relative: str) -> Path:
    p = Path(repo_relative)
    if p.is_absolute() and p.exists():
        return p
    # Allow both "data/..." and "/data/..." inputs (normalize to repo-relative).
    return _repo_root() / str(repo_relative or "").lstrip("/")


def log_level() -> str:
    return (os.getenv("FSCSEARCH_LOG_LEVEL") or "INFO").strip().upper()
