"""Tests for name normalization and alias expansion."""

import json
from pathlib import Path

import pytest

from pt_scheduler.matching.aliases import (
    DEFAULT_NICKNAMES,
    AliasTable,
    AliasTableError,
)
from pt_scheduler.matching.normalizer import normalize, tokenize


class TestNormalize:
    """Tests for normalize and tokenize."""

    def test_lowercases_and_collapses_whitespace(self):
        assert normalize("  Robert \t  JOHNSON\n") == "robert johnson"

    def test_blank_input_is_empty(self):
        assert normalize("   ") == ""
        assert tokenize("   ") == set()
        assert tokenize("") == set()

    def test_tokenize_collapses_duplicates(self):
        assert tokenize("Johnson johnson  JOHNSON") == {"johnson"}

    def test_hyphens_and_apostrophes_kept(self):
        """Punctuation stays part of the token."""
        assert tokenize("Mary-Jane O'Neil") == {"mary-jane", "o'neil"}


class TestAliasTable:
    """Tests for AliasTable expansion."""

    def test_formal_name_adds_variants(self):
        table = AliasTable.default()

        assert table.expand({"robert"}) == {"robert", "bob", "bobby", "rob"}

    def test_variant_adds_formal_and_siblings(self):
        table = AliasTable.default()

        assert table.expand({"bobby", "johnson"}) == {
            "robert",
            "bob",
            "bobby",
            "rob",
            "johnson",
        }

    def test_unrelated_tokens_unchanged(self):
        table = AliasTable.default()

        assert table.expand({"xyz123"}) == {"xyz123"}

    @pytest.mark.parametrize("formal", sorted(DEFAULT_NICKNAMES))
    def test_siblings_are_symmetric(self, formal: str):
        """Every member of a group expands to the whole group."""
        table = AliasTable.default()
        group = table.siblings(formal)

        for variant in DEFAULT_NICKNAMES[formal]:
            assert table.siblings(variant) == group

    def test_alternate_table_does_not_touch_default(self):
        custom = AliasTable({"Alexander": ["Alex", "Sasha"]})

        assert custom.expand({"sasha"}) == {"alexander", "alex", "sasha"}
        assert AliasTable.default().expand({"sasha"}) == {"sasha"}

    def test_from_json_file(self, tmp_path: Path):
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps({"edward": ["ed", "eddie", "ted"]}))

        table = AliasTable.from_json_file(path)

        assert len(table) == 1
        assert table.expand({"ted"}) == {"edward", "ed", "eddie", "ted"}

    def test_from_json_file_rejects_bad_shape(self, tmp_path: Path):
        path = tmp_path / "aliases.json"
        path.write_text(json.dumps({"edward": "ed"}))

        with pytest.raises(AliasTableError):
            AliasTable.from_json_file(path)

    def test_from_json_file_missing(self, tmp_path: Path):
        with pytest.raises(AliasTableError):
            AliasTable.from_json_file(tmp_path / "missing.json")
