"""Patient name matching for OCR-extracted and typed schedule entries.

This module provides:
- PatientResolver: Three-stage resolution pipeline (token -> fuzzy -> remote)
- Nickname-aware token matching with an injectable AliasTable
- Fuzzy name matching using RapidFuzz (token_sort_ratio)
- Remote semantic fallback with explicit success/failure outcomes
- Trust tier classification (auto / confirm / manual)
"""

from pt_scheduler.matching.aliases import AliasTable, AliasTableError
from pt_scheduler.matching.confidence import TierThresholds, classify_tier
from pt_scheduler.matching.fuzzy_matcher import FuzzyMatcher
from pt_scheduler.matching.remote_matcher import (
    RemoteFailureReason,
    RemoteMatcher,
    RemoteMatchFailure,
    RemoteMatchOutcome,
    RemoteMatchSuccess,
)
from pt_scheduler.matching.resolver import PatientResolver
from pt_scheduler.matching.schemas import (
    MatchCandidate,
    MatchOptions,
    MatchResult,
    MatchTier,
    ScoredCandidate,
    StageMatch,
)
from pt_scheduler.matching.token_matcher import TokenMatcher

__all__ = [
    "AliasTable",
    "AliasTableError",
    "FuzzyMatcher",
    "MatchCandidate",
    "MatchOptions",
    "MatchResult",
    "MatchTier",
    "PatientResolver",
    "RemoteFailureReason",
    "RemoteMatchFailure",
    "RemoteMatchOutcome",
    "RemoteMatchSuccess",
    "RemoteMatcher",
    "ScoredCandidate",
    "StageMatch",
    "TierThresholds",
    "TokenMatcher",
    "classify_tier",
]
