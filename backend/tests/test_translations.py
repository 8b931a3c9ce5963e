from __future__ import annotations

import pytest

from i18n.translations import Translations, default_translations, load_translations


def test_repo_translations_cover_both_locales():
    t = default_translations("rus")
    assert t.locales() == ["eng", "rus"]
    assert t.get_text("SearchControl.NoResult") == "Поиск не дал результатов"
    assert t.get_text("SearchControl.NoResult", "eng") == "No results found"
    assert t.get_text("SearchControl.SearchPlaceholder", "eng") == "FSC_ID, company search"


def test_missing_keys_come_back_unchanged():
    t = Translations("eng")
    t.add_text("eng", {"SearchControl": {"NoResult": "none"}})
    assert t.get_text("SearchControl.Missing") == "SearchControl.Missing"
    assert t.get_text("SearchControl") == "SearchControl"
    assert t.get_text("SearchControl.NoResult", "fra") == "SearchControl.NoResult"


def test_add_text_merges_nested_keys():
    t = Translations("eng")
    t.add_text("eng", {"SearchControl": {"NoResult": "none"}})
    t.add_text("eng", {"SearchControl": {"SearchPlaceholder": "find"}})
    assert t.texts("eng") == {"SearchControl": {"NoResult": "none", "SearchPlaceholder": "find"}}


def test_load_rejects_malformed_files(tmp_path):
    p = tmp_path / "t.yaml"
    p.write_text("- just\n- a list\n", encoding="utf-8")
    with pytest.raises(ValueError, match="Invalid translations root"):
        load_translations(p)

    p.write_text("eng: plain string\n", encoding="utf-8")
    with pytest.raises(ValueError, match="eng"):
        load_translations(p)
