"""Patient matching schemas.

Defines data models for known patients, per-stage matches and the final
resolution result handed back to the scheduling UI.
"""

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class MatchCandidate(BaseModel):
    """Known patient eligible to match a raw name.

    Owned by the patient registry. The resolver only reads it.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(description="Opaque patient identifier")
    full_name: str = Field(alias="fullName", description="Full name")
    nicknames: list[str] = Field(
        default_factory=list,
        description="Names the patient is known by besides the full name",
    )


class MatchTier(str, Enum):
    """How far a match can be trusted."""

    AUTO = "auto"
    CONFIRM = "confirm"
    MANUAL = "manual"


class ScoredCandidate(BaseModel):
    """Candidate paired with the confidence one stage gave it."""

    model_config = ConfigDict(frozen=True)

    candidate: MatchCandidate
    confidence: int = Field(ge=0, le=100)


class StageMatch(BaseModel):
    """Best answer of a single matching stage."""

    model_config = ConfigDict(frozen=True)

    candidate: MatchCandidate | None = None
    confidence: int = Field(default=0, ge=0, le=100)

    @classmethod
    def none(cls) -> "StageMatch":
        """No candidate, zero confidence."""
        return cls(candidate=None, confidence=0)


class MatchOptions(BaseModel):
    """Per-call switches for the resolver."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    skip_remote_fallback: bool = Field(
        default=False,
        alias="skipRemoteFallback",
        description="Never call the remote disambiguation service",
    )


class MatchResult(BaseModel):
    """Result of resolving one raw name against the candidate list.

    ``candidate`` is None exactly when no stage scored any candidate
    above zero. ``alternatives`` never holds the chosen candidate.
    """

    model_config = ConfigDict(frozen=True)

    candidate: MatchCandidate | None = Field(
        default=None, description="Chosen patient, if any"
    )
    confidence: int = Field(ge=0, le=100, description="Match confidence (0-100)")
    alternatives: list[ScoredCandidate] = Field(
        default_factory=list,
        max_length=3,
        description="Other likely patients, best first",
    )
    tier: MatchTier = Field(description="auto, confirm or manual")

    @property
    def requires_review(self) -> bool:
        """True unless the match can be applied without a human."""
        return self.tier != MatchTier.AUTO
