from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any

import yaml

from settings.config import translations_path


def _merge(into: dict[str, Any], texts: dict[str, Any]) -> None:
    for k, v in texts.items():
        if isinstance(v, dict) and isinstance(into.get(k), dict):
            _merge(into[k], v)
        else:
            into[k] = v


class Translations:
    """
    Display strings per locale, addressed by dotted keys ("SearchControl.NoResult").

    Unknown keys come back unchanged so a missing string stays visible in the UI.
    """

    def __init__(self, locale: str = "eng"):
        self.locale = locale
        self._texts: dict[str, dict[str, Any]] = {}

    def add_text(self, locale: str, texts: dict[str, Any]) -> None:
        _merge(self._texts.setdefault(locale, {}), texts)

    def locales(self) -> list[str]:
        return sorted(self._texts)

    def texts(self, locale: str) -> dict[str, Any]:
        return self._texts.get(locale) or {}

    def get_text(self, key: str, locale: str | None = None) -> str:
        node: Any = self._texts.get(locale or self.locale) or {}
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return key
            node = node[part]
        return node if isinstance(node, str) else key


def load_translations(path: Path | None = None, *, locale: str = "eng") -> Translations:
    p = path or translations_path()
    data = yaml.safe_load(p.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Invalid translations root: {p}")
    t = Translations(locale=locale)
    for loc, texts in data.items():
        if not isinstance(texts, dict):
            raise ValueError(f"Invalid translations for locale {loc!r}: {p}")
        t.add_text(str(loc), texts)
    return t


@lru_cache(maxsize=4)
def default_translations(locale: str = "eng") -> Translations:
    return load_translations(locale=locale)
