"""Nickname table used for alias expansion.

Maps a formal first name to its informal variants. Lookup is symmetric:
a formal name pulls in its variants, and any variant pulls in the formal
name plus every sibling variant, so "Bob" and "Robert" expand to the same
token set.
"""

import json
from collections.abc import Iterable, Mapping
from pathlib import Path
from types import MappingProxyType

# fmt: off
DEFAULT_NICKNAMES: dict[str, list[str]] = {
    "robert": ["bob", "bobby", "rob"],
    "william": ["bill", "billy", "will"],
    "richard": ["rick", "ricky", "dick"],
    "margaret": ["maggie", "peggy"],
    "elizabeth": ["liz", "lizzy", "beth", "betty"],
    "jennifer": ["jen", "jenny"],
    "michael": ["mike", "mikey"],
    "james": ["jim", "jimmy"],
    "joseph": ["joe", "joey"],
    "thomas": ["tom", "tommy"],
    "christopher": ["chris"],
    "daniel": ["dan", "danny"],
    "matthew": ["matt"],
    "anthony": ["tony"],
    "patricia": ["pat", "patty"],
    "katherine": ["kate", "kathy", "katie"],
    "deborah": ["deb", "debbie"],
    "barbara": ["barb", "barbie"],
    "susan": ["sue", "susie"],
}
# fmt: on


class AliasTableError(ValueError):
    """Raised when an alias table file cannot be loaded."""


class AliasTable:
    """Read-only formal name -> variants table.

    Safe to share between concurrent resolutions. Build a separate
    instance to use an alternate table, e.g. in tests.
    """

    def __init__(self, entries: Mapping[str, Iterable[str]]):
        """Initialize from a formal -> variants mapping.

        Args:
            entries: Formal first names mapped to informal variants.
                     Keys and variants are lowercased.
        """
        self._entries: Mapping[str, frozenset[str]] = MappingProxyType(
            {
                formal.strip().lower(): frozenset(
                    v.strip().lower() for v in variants if v.strip()
                )
                for formal, variants in entries.items()
                if formal.strip()
            }
        )

    @classmethod
    def default(cls) -> "AliasTable":
        """Table built from the bundled nickname list."""
        return cls(DEFAULT_NICKNAMES)

    @classmethod
    def from_json_file(cls, path: str | Path) -> "AliasTable":
        """Load a table from a JSON object of formal name -> list of variants.

        Raises:
            AliasTableError: If the file is unreadable or wrongly shaped
        """
        try:
            raw = json.loads(Path(path).read_text(encoding="utf-8"))
        except (OSError, json.JSONDecodeError) as e:
            raise AliasTableError(f"Cannot read alias table {path}: {e}") from e

        if not isinstance(raw, dict) or not all(
            isinstance(variants, list)
            and all(isinstance(v, str) for v in variants)
            for variants in raw.values()
        ):
            raise AliasTableError(
                f"Alias table {path} must map names to lists of strings"
            )
        return cls(raw)

    def __len__(self) -> int:
        return len(self._entries)

    def items(self) -> Iterable[tuple[str, frozenset[str]]]:
        """Iterate (formal, variants) pairs."""
        return self._entries.items()

    def siblings(self, token: str) -> frozenset[str]:
        """All names interchangeable with ``token``, itself included."""
        return self.expand({token.lower()})

    def expand(self, tokens: Iterable[str]) -> frozenset[str]:
        """Add every alias related to any of ``tokens``.

        Args:
            tokens: Normalized name tokens

        Returns:
            Original tokens plus formal names and sibling variants
        """
        tokens = frozenset(tokens)
        expanded = set(tokens)
        for formal, variants in self._entries.items():
            if formal in tokens or not variants.isdisjoint(tokens):
                expanded.add(formal)
                expanded.update(variants)
        return frozenset(expanded)


default_alias_table = AliasTable.default()
