"""Confidence helpers and trust tier classification.

Every stage reports an integer confidence 0-100. The tier a result gets
depends only on that number, never on which stage produced it:
- confidence >= 90: auto (apply without asking)
- 70 <= confidence < 90: confirm (ask the user)
- below 70: manual (user enters the patient)
"""

import math

from pydantic import BaseModel, ConfigDict, Field, model_validator

from pt_scheduler.matching.schemas import MatchTier


class TierThresholds(BaseModel):
    """Confidence gates between tiers."""

    model_config = ConfigDict(frozen=True)

    auto: int = Field(default=90, ge=1, le=100)
    confirm: int = Field(default=70, ge=1, le=100)

    @model_validator(mode="after")
    def _ordered(self) -> "TierThresholds":
        if self.confirm > self.auto:
            raise ValueError("confirm threshold cannot exceed auto threshold")
        return self


DEFAULT_THRESHOLDS = TierThresholds()


def classify_tier(
    confidence: int, thresholds: TierThresholds = DEFAULT_THRESHOLDS
) -> MatchTier:
    """Map a final confidence to its trust tier.

    Args:
        confidence: Final match confidence (0-100)
        thresholds: Tier gates (default 90/70)

    Returns:
        MatchTier for the confidence
    """
    if confidence >= thresholds.auto:
        return MatchTier.AUTO
    if confidence >= thresholds.confirm:
        return MatchTier.CONFIRM
    return MatchTier.MANUAL


def to_confidence(fraction: float) -> int:
    """Convert a 0-1 score to an integer confidence, rounding halves up."""
    fraction = min(max(fraction, 0.0), 1.0)
    return int(math.floor(fraction * 100 + 0.5))
