"""Exact and nickname-aware token matching (stage 1).

Scores each candidate by how many of the query's alias-expanded tokens
appear in the candidate's alias-expanded name and nickname tokens.
Pure and synchronous.
"""

from pt_scheduler.matching.aliases import AliasTable, default_alias_table
from pt_scheduler.matching.confidence import to_confidence
from pt_scheduler.matching.normalizer import tokenize
from pt_scheduler.matching.schemas import MatchCandidate, StageMatch


class TokenMatcher:
    """Token overlap scorer with symmetric nickname expansion.

    "Bob Johnson" and "Robert Johnson" expand to the same token set and
    score 100 against each other in either direction.
    """

    def __init__(self, alias_table: AliasTable = default_alias_table):
        self._aliases = alias_table

    def query_tokens(self, query: str) -> frozenset[str]:
        """Expanded token set of a raw query."""
        return self._aliases.expand(tokenize(query))

    def candidate_tokens(self, candidate: MatchCandidate) -> frozenset[str]:
        """Expanded tokens of a candidate's full name and declared nicknames."""
        tokens = tokenize(candidate.full_name)
        for nickname in candidate.nicknames:
            tokens |= tokenize(nickname)
        return self._aliases.expand(tokens)

    def score(self, query: str, candidate: MatchCandidate) -> int:
        """Confidence (0-100) that ``query`` names ``candidate``."""
        return self._score_tokens(self.query_tokens(query), candidate)

    def find_best_match(
        self,
        query: str,
        candidates: list[MatchCandidate],
    ) -> StageMatch:
        """Find the candidate with the highest token overlap.

        Ties keep the earlier candidate.

        Args:
            query: Raw name (typed or OCR-extracted)
            candidates: Known patients, in registry order

        Returns:
            StageMatch, or StageMatch.none() when nothing overlaps
        """
        query_tokens = self.query_tokens(query)
        if not query_tokens:
            return StageMatch.none()

        best = StageMatch.none()
        for candidate in candidates:
            confidence = self._score_tokens(query_tokens, candidate)
            if confidence > best.confidence:
                best = StageMatch(candidate=candidate, confidence=confidence)
        return best

    def _score_tokens(
        self, query_tokens: frozenset[str], candidate: MatchCandidate
    ) -> int:
        if not query_tokens:
            return 0
        overlap = len(query_tokens & self.candidate_tokens(candidate))
        return to_confidence(overlap / max(len(query_tokens), 1))
