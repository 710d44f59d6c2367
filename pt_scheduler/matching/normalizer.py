"""Name normalization for token matching.

Only case and whitespace are canonicalized. Punctuation stays inside
tokens, so "Robert's" does not match "Robert" and "Mary-Jane" matches only
"Mary-Jane"; the fuzzy and remote stages pick up those cases.
"""

import re

_WHITESPACE = re.compile(r"\s+")


def normalize(raw: str) -> str:
    """Lowercase, collapse whitespace runs and trim."""
    return _WHITESPACE.sub(" ", raw.lower()).strip()


def tokenize(raw: str) -> set[str]:
    """Split a normalized name into its set of tokens.

    Returns:
        Unique tokens; empty set for blank input
    """
    normalized = normalize(raw)
    if not normalized:
        return set()
    return set(normalized.split(" "))
