"""PatientResolver orchestrates the three-stage patient name match.

Resolution pipeline (in order, cheapest first):
1. Token match with nickname expansion (exits at >= 90)
2. Fuzzy match on full name and nicknames (exits at >= 70)
3. Remote semantic fallback (only when both above fell short)
"""

import asyncio

import structlog

from pt_scheduler.matching.confidence import (
    DEFAULT_THRESHOLDS,
    TierThresholds,
    classify_tier,
)
from pt_scheduler.matching.fuzzy_matcher import FuzzyMatcher
from pt_scheduler.matching.normalizer import normalize
from pt_scheduler.matching.remote_matcher import RemoteMatcher
from pt_scheduler.matching.schemas import (
    MatchCandidate,
    MatchOptions,
    MatchResult,
    MatchTier,
    ScoredCandidate,
    StageMatch,
)
from pt_scheduler.matching.token_matcher import TokenMatcher

logger = structlog.get_logger()

MAX_ALTERNATIVES = 3


class PatientResolver:
    """Resolves a raw patient name to a known patient.

    Stages run in order and stop as soon as one is confident enough, so
    the remote service is only called for names the local stages could
    not place.
    """

    def __init__(
        self,
        token_matcher: TokenMatcher,
        fuzzy_matcher: FuzzyMatcher,
        remote_matcher: RemoteMatcher | None = None,
        thresholds: TierThresholds = DEFAULT_THRESHOLDS,
    ):
        """Initialize resolver with its stages.

        Args:
            token_matcher: Stage 1 token scorer
            fuzzy_matcher: Stage 2 fuzzy scorer
            remote_matcher: Optional stage 3 client; None disables stage 3
            thresholds: Tier gates, also used as early-exit gates
        """
        self._tokens = token_matcher
        self._fuzzy = fuzzy_matcher
        self._remote = remote_matcher
        self._thresholds = thresholds

    async def resolve(
        self,
        raw_name: str,
        candidates: list[MatchCandidate],
        options: MatchOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> MatchResult:
        """Resolve one raw name against the candidate list.

        Args:
            raw_name: Name as typed or OCR-extracted
            candidates: Known patients, in registry order
            options: Per-call switches (e.g. skip the remote stage)
            cancel_event: Set to abandon a pending remote call

        Returns:
            MatchResult with chosen candidate, confidence, tier and
            up to three alternatives
        """
        options = options or MatchOptions()

        if not candidates or not normalize(raw_name):
            return self._no_match()

        # Stage 1: token match
        stage1 = self._tokens.find_best_match(raw_name, candidates)
        if stage1.confidence >= self._thresholds.auto:
            logger.debug("patient_match", stage="token", confidence=stage1.confidence)
            return MatchResult(
                candidate=stage1.candidate,
                confidence=stage1.confidence,
                alternatives=self._token_alternatives(
                    raw_name, candidates, stage1.candidate
                ),
                tier=classify_tier(stage1.confidence, self._thresholds),
            )

        # Stage 2: fuzzy match
        ranked = self._fuzzy.rank(raw_name, candidates)
        stage2 = (
            StageMatch(candidate=ranked[0].candidate, confidence=ranked[0].confidence)
            if ranked
            else StageMatch.none()
        )
        best = stage1 if stage1.confidence >= stage2.confidence else stage2

        if best.confidence >= self._thresholds.confirm:
            logger.debug(
                "patient_match",
                stage="token" if best is stage1 else "fuzzy",
                confidence=best.confidence,
            )
            return self._build_result(best, ranked)

        # Stage 3: remote fallback
        if self._remote is not None and not options.skip_remote_fallback:
            outcome = await self._remote.match(raw_name, candidates, cancel_event)
            stage3 = outcome.as_stage_match()
            if stage3.confidence > best.confidence:
                best = stage3
                logger.debug(
                    "patient_match", stage="remote", confidence=best.confidence
                )

        return self._build_result(best, ranked)

    async def resolve_all(
        self,
        names: list[str],
        candidates: list[MatchCandidate],
        options: MatchOptions | None = None,
        cancel_event: asyncio.Event | None = None,
    ) -> list[MatchResult]:
        """Resolve several names concurrently.

        Args:
            names: Raw names, e.g. every row of one schedule screenshot
            candidates: Known patients
            options: Per-call switches applied to every name
            cancel_event: Set to abandon pending remote calls

        Returns:
            List of results in same order as names
        """
        return list(
            await asyncio.gather(
                *(
                    self.resolve(name, candidates, options, cancel_event)
                    for name in names
                )
            )
        )

    def _build_result(
        self, best: StageMatch, ranked: list[ScoredCandidate]
    ) -> MatchResult:
        chosen_id = best.candidate.id if best.candidate else None
        alternatives = [s for s in ranked if s.candidate.id != chosen_id]
        return MatchResult(
            candidate=best.candidate,
            confidence=best.confidence,
            alternatives=alternatives[:MAX_ALTERNATIVES],
            tier=classify_tier(best.confidence, self._thresholds),
        )

    def _token_alternatives(
        self,
        raw_name: str,
        candidates: list[MatchCandidate],
        chosen: MatchCandidate | None,
    ) -> list[ScoredCandidate]:
        """Re-score other candidates with the token scorer only."""
        chosen_id = chosen.id if chosen else None
        scored = []
        for candidate in candidates:
            if candidate.id == chosen_id:
                continue
            confidence = self._tokens.score(raw_name, candidate)
            if confidence > 0:
                scored.append(
                    ScoredCandidate(candidate=candidate, confidence=confidence)
                )
        scored.sort(key=lambda s: s.confidence, reverse=True)
        return scored[:MAX_ALTERNATIVES]

    def _no_match(self) -> MatchResult:
        return MatchResult(
            candidate=None,
            confidence=0,
            alternatives=[],
            tier=MatchTier.MANUAL,
        )
