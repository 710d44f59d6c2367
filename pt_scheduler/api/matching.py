"""Patient matching API endpoints.

Provides the name disambiguation endpoint used by the remote fallback
stage, and a batch endpoint resolving OCR-extracted names against the
patient list supplied by the client.
"""

import structlog
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, ConfigDict, Field

from pt_scheduler.matching.disambiguator import NameDisambiguator
from pt_scheduler.matching.resolver import PatientResolver
from pt_scheduler.matching.schemas import MatchCandidate, MatchOptions, MatchResult
from pt_scheduler.services.llm_client import LLMClientError

logger = structlog.get_logger()

router = APIRouter(tags=["matching"])


class MatchPatientResponse(BaseModel):
    """Disambiguation answer, in the remote fallback wire format."""

    model_config = ConfigDict(populate_by_name=True)

    matched_name: str | None = Field(
        default=None, alias="matchedName", description="Chosen candidate name"
    )
    confidence: int = Field(ge=0, le=100, description="Match confidence (0-100)")


class ResolveRequest(BaseModel):
    """Request to resolve names against a patient list."""

    model_config = ConfigDict(populate_by_name=True)

    names: list[str] = Field(description="Raw names (typed or OCR-extracted)")
    candidates: list[MatchCandidate] = Field(description="Known patients")
    skip_remote_fallback: bool = Field(
        default=False,
        alias="skipRemoteFallback",
        description="Resolve locally only",
    )


class ResolveResponse(BaseModel):
    """Response with one result per requested name."""

    model_config = ConfigDict(populate_by_name=True)

    results: list[MatchResult] = Field(description="Results in request order")
    pending_review_count: int = Field(
        alias="pendingReviewCount", description="Count needing human review"
    )
    review_summary: str | None = Field(
        default=None,
        alias="reviewSummary",
        description="Human-readable summary if items need review",
    )


def get_patient_resolver(request: Request) -> PatientResolver:
    """Dependency to get PatientResolver from app state."""
    return request.app.state.patient_resolver


def get_name_disambiguator(request: Request) -> NameDisambiguator:
    """Dependency to get NameDisambiguator from app state."""
    return request.app.state.name_disambiguator


def _error(status_code: int, message: str, code: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code, content={"error": message, "code": code}
    )


def _generate_review_summary(
    names: list[str], results: list[MatchResult]
) -> str | None:
    """Generate human-readable summary of names needing review.

    Args:
        names: Raw names in request order
        results: Matching results in the same order

    Returns:
        Summary string or None if no review needed
    """
    review_items = [(n, r) for n, r in zip(names, results) if r.requires_review]
    if not review_items:
        return None

    lines = [f"{len(review_items)} name(s) need review:"]
    for name, result in review_items[:5]:  # Show first 5
        if result.candidate is not None:
            lines.append(
                f"  - '{name}' -> '{result.candidate.full_name}' "
                f"({result.confidence}% confidence)"
            )
        elif result.alternatives:
            top_alt = result.alternatives[0]
            lines.append(
                f"  - '{name}' -> '{top_alt.candidate.full_name}' "
                f"({top_alt.confidence}%)? (needs confirmation)"
            )
        else:
            lines.append(f"  - '{name}' -> no match found")

    if len(review_items) > 5:
        lines.append(f"  ... and {len(review_items) - 5} more")

    return "\n".join(lines)


@router.post("/api/match-patient", response_model=MatchPatientResponse)
async def match_patient(
    request: Request,
    disambiguator: NameDisambiguator = Depends(get_name_disambiguator),
):
    """Pick the known patient an OCR-extracted name refers to.

    Body: ``{"ocrName": str, "candidateNames": [str]}``. Returns
    ``{"matchedName": str | null, "confidence": int}``.
    """
    try:
        body = await request.json()
    except ValueError:
        return _error(400, "Invalid JSON body", "VALIDATION_ERROR")

    ocr_name = body.get("ocrName") if isinstance(body, dict) else None
    candidate_names = body.get("candidateNames") if isinstance(body, dict) else None
    if (
        not isinstance(ocr_name, str)
        or not ocr_name.strip()
        or not isinstance(candidate_names, list)
        or not all(isinstance(n, str) for n in candidate_names)
    ):
        return _error(400, "Missing ocrName or candidateNames", "VALIDATION_ERROR")

    try:
        answer = await disambiguator.disambiguate(ocr_name, candidate_names)
    except LLMClientError as e:
        logger.error("match_patient_llm_failed", error=str(e))
        return _error(502, "AI service unavailable", "UPSTREAM_ERROR")

    return MatchPatientResponse(
        matched_name=answer.matched_name, confidence=answer.confidence
    )


@router.post("/match/resolve", response_model=ResolveResponse)
async def resolve_names(
    request: ResolveRequest,
    resolver: PatientResolver = Depends(get_patient_resolver),
) -> ResolveResponse:
    """Resolve raw names to known patients.

    Each name runs through token, fuzzy and (unless skipped) remote
    matching. Results below 90% confidence are flagged for review.

    Args:
        request: Names to resolve with the candidate patients
        resolver: Patient matching service

    Returns:
        ResolveResponse with one result per name and a review summary
    """
    results = await resolver.resolve_all(
        names=request.names,
        candidates=request.candidates,
        options=MatchOptions(skip_remote_fallback=request.skip_remote_fallback),
    )

    pending_count = sum(1 for r in results if r.requires_review)
    return ResolveResponse(
        results=results,
        pending_review_count=pending_count,
        review_summary=_generate_review_summary(request.names, results),
    )
