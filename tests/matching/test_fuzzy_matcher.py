"""Tests for fuzzy name matching."""

import pytest

from pt_scheduler.matching.fuzzy_matcher import FuzzyMatcher
from pt_scheduler.matching.schemas import MatchCandidate


@pytest.fixture
def matcher() -> FuzzyMatcher:
    """Default matcher with 0.4 distance threshold."""
    return FuzzyMatcher(threshold=0.4)


class TestFindBestMatch:
    """Tests for find_best_match method."""

    def test_exact_match_returns_100(
        self, matcher: FuzzyMatcher, candidates: list[MatchCandidate]
    ):
        """Exact name match returns confidence 100."""
        result = matcher.find_best_match("Robert Johnson", candidates)

        assert result.candidate is not None
        assert result.candidate.id == "1"
        assert result.confidence == 100

    def test_typo_scores_high(
        self, matcher: FuzzyMatcher, candidates: list[MatchCandidate]
    ):
        """One dropped letter costs about 4 points."""
        result = matcher.find_best_match("Robert Jonson", candidates)

        assert result.candidate is not None
        assert result.candidate.id == "1"
        assert result.confidence == 96

    def test_name_order_independence(
        self, matcher: FuzzyMatcher, candidates: list[MatchCandidate]
    ):
        """'Johnson, Robert' matches 'Robert Johnson' fully."""
        result = matcher.find_best_match("Johnson, Robert", candidates)

        assert result.candidate is not None
        assert result.candidate.id == "1"
        assert result.confidence == 100

    def test_case_insensitive_matching(
        self, matcher: FuzzyMatcher, candidates: list[MatchCandidate]
    ):
        result = matcher.find_best_match("MARGARET DAVIS", candidates)

        assert result.candidate is not None
        assert result.candidate.id == "3"
        assert result.confidence == 100

    def test_nickname_field_matches(
        self, matcher: FuzzyMatcher, candidates: list[MatchCandidate]
    ):
        """Searching a declared nickname returns its patient."""
        result = matcher.find_best_match("Peggy", candidates)

        assert result.candidate is not None
        assert result.candidate.id == "3"
        assert result.confidence == 100

    def test_both_fields_blended_by_weight(self, matcher: FuzzyMatcher):
        """Name distance 0 (weight 0.7), nickname distance 3/21 (weight 0.3)."""
        patients = [
            MatchCandidate(id="1", full_name="Katie Byrne", nicknames=["Katy Byrne"])
        ]

        result = matcher.find_best_match("Katie Byrne", patients)

        assert result.confidence == 96

    def test_dissimilar_name_excluded(
        self, matcher: FuzzyMatcher, candidates: list[MatchCandidate]
    ):
        """Very different names return no match."""
        result = matcher.find_best_match("XYZ123", candidates)

        assert result.candidate is None
        assert result.confidence == 0

    def test_threshold_is_tunable(self, candidates: list[MatchCandidate]):
        """A zero threshold only accepts exact matches."""
        strict = FuzzyMatcher(threshold=0.0)

        assert strict.find_best_match("Robert Jonson", candidates).candidate is None
        assert strict.find_best_match("Robert Johnson", candidates).confidence == 100

    def test_empty_candidates(self, matcher: FuzzyMatcher):
        result = matcher.find_best_match("John Smith", [])

        assert result.candidate is None
        assert result.confidence == 0

    def test_blank_query(self, matcher: FuzzyMatcher, candidates: list[MatchCandidate]):
        assert matcher.rank("   ", candidates) == []


class TestRank:
    """Tests for rank method."""

    @pytest.fixture
    def similar(self) -> list[MatchCandidate]:
        return [
            MatchCandidate(id="1", full_name="Jon Smith"),
            MatchCandidate(id="2", full_name="John Smith"),
            MatchCandidate(id="3", full_name="Zelda Quark"),
            MatchCandidate(id="4", full_name="John Smyth"),
        ]

    def test_sorted_by_descending_confidence(
        self, matcher: FuzzyMatcher, similar: list[MatchCandidate]
    ):
        ranked = matcher.rank("John Smith", similar)

        assert ranked[0].candidate.id == "2"
        assert ranked[0].confidence == 100
        scores = [s.confidence for s in ranked]
        assert scores == sorted(scores, reverse=True)

    def test_excludes_candidates_beyond_threshold(
        self, matcher: FuzzyMatcher, similar: list[MatchCandidate]
    ):
        ranked = matcher.rank("John Smith", similar)

        assert "3" not in {s.candidate.id for s in ranked}
        assert all(s.confidence >= 60 for s in ranked)

    def test_ties_keep_candidate_order(self, matcher: FuzzyMatcher):
        patients = [
            MatchCandidate(id="a", full_name="Ann Lee"),
            MatchCandidate(id="b", full_name="Ann Lee"),
        ]

        ranked = matcher.rank("Ann Lee", patients)

        assert [s.candidate.id for s in ranked] == ["a", "b"]

    def test_each_candidate_listed_once(
        self, matcher: FuzzyMatcher, candidates: list[MatchCandidate]
    ):
        """Name and nickname hits on one patient give one entry."""
        ranked = matcher.rank("Rob Johnson", candidates)

        ids = [s.candidate.id for s in ranked]
        assert len(ids) == len(set(ids))
