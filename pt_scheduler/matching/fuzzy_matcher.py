"""Fuzzy name matching using RapidFuzz (stage 2).

Scores the full name and the nickname list of every candidate with
token_sort_ratio, so OCR typos ("Jonson") and reordered names
("Johnson, Robert") still land on the right patient.
"""

from dataclasses import dataclass

from rapidfuzz import fuzz, process, utils

from pt_scheduler.matching.confidence import to_confidence
from pt_scheduler.matching.schemas import MatchCandidate, ScoredCandidate, StageMatch


@dataclass(frozen=True)
class _IndexEntry:
    candidate: MatchCandidate
    full_name: str
    nicknames: list[str]


class FuzzyMatcher:
    """Weighted fuzzy matcher over full name and nickname fields.

    Each field gets a similarity in [0, 1]; the nickname field uses the
    best of the candidate's nicknames. A field counts only when its
    distance (1 - similarity) is within the threshold, and the candidate's
    distance is the weighted mean over counted fields. Candidates with no
    counted field are dropped.
    """

    def __init__(
        self,
        threshold: float = 0.4,
        name_weight: float = 0.7,
        nickname_weight: float = 0.3,
    ):
        """Initialize matcher.

        Args:
            threshold: Maximum distance (0-1) for a field to count.
                      Tuned empirically; larger values surface more
                      irrelevant alternatives.
            name_weight: Weight of the full name field
            nickname_weight: Weight of the nickname field
        """
        self._threshold = threshold
        self._name_weight = name_weight
        self._nickname_weight = nickname_weight

    def rank(
        self,
        query: str,
        candidates: list[MatchCandidate],
    ) -> list[ScoredCandidate]:
        """Rank candidates that clear the threshold, best first.

        Ties keep candidate order.

        Args:
            query: Raw name to search for
            candidates: Known patients

        Returns:
            Scored candidates sorted by descending confidence; empty if
            nothing clears the threshold
        """
        processed_query = utils.default_process(query)
        if not processed_query or not candidates:
            return []

        scored: list[ScoredCandidate] = []
        for entry in self._build_index(candidates):
            distance = self._distance(processed_query, entry)
            if distance is None:
                continue
            scored.append(
                ScoredCandidate(
                    candidate=entry.candidate,
                    confidence=to_confidence(1.0 - distance),
                )
            )

        # sorted() is stable, so equal scores stay in candidate order
        return sorted(scored, key=lambda s: s.confidence, reverse=True)

    def find_best_match(
        self,
        query: str,
        candidates: list[MatchCandidate],
    ) -> StageMatch:
        """Best fuzzy match, or StageMatch.none() below threshold."""
        ranked = self.rank(query, candidates)
        if not ranked:
            return StageMatch.none()
        top = ranked[0]
        return StageMatch(candidate=top.candidate, confidence=top.confidence)

    def _build_index(self, candidates: list[MatchCandidate]) -> list[_IndexEntry]:
        """Preprocess searchable strings once per call."""
        index = []
        for candidate in candidates:
            nicknames = [utils.default_process(n) for n in candidate.nicknames]
            index.append(
                _IndexEntry(
                    candidate=candidate,
                    full_name=utils.default_process(candidate.full_name),
                    nicknames=[n for n in nicknames if n],
                )
            )
        return index

    def _distance(self, query: str, entry: _IndexEntry) -> float | None:
        """Weighted distance over counted fields, None if no field counts."""
        fields: list[tuple[float, float]] = []

        name_distance = 1.0 - fuzz.token_sort_ratio(query, entry.full_name) / 100
        if name_distance <= self._threshold:
            fields.append((self._name_weight, name_distance))

        if entry.nicknames:
            best = process.extractOne(
                query, entry.nicknames, scorer=fuzz.token_sort_ratio
            )
            if best is not None:
                nickname_distance = 1.0 - best[1] / 100
                if nickname_distance <= self._threshold:
                    fields.append((self._nickname_weight, nickname_distance))

        if not fields:
            return None
        total_weight = sum(weight for weight, _ in fields)
        return sum(weight * d for weight, d in fields) / total_weight
