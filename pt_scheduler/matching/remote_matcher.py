"""Remote semantic fallback (stage 3).

Sends the raw name and every candidate's full name to the name
disambiguation service and maps the name it picks back to a candidate.
The call never raises: every failure comes back as a RemoteMatchFailure,
which the resolver reads as "no match, confidence 0".
"""

import asyncio
from enum import Enum

import httpx
import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from pt_scheduler.matching.schemas import MatchCandidate, StageMatch

logger = structlog.get_logger()


class RemoteMatchRequest(BaseModel):
    """Body sent to the disambiguation service."""

    model_config = ConfigDict(populate_by_name=True)

    ocr_name: str = Field(alias="ocrName")
    candidate_names: list[str] = Field(alias="candidateNames")


class RemoteMatchResponse(BaseModel):
    """Body returned by the disambiguation service."""

    model_config = ConfigDict(populate_by_name=True)

    matched_name: str | None = Field(alias="matchedName")
    confidence: int = Field(ge=0, le=100)


class RemoteFailureReason(str, Enum):
    """Why the remote stage produced no answer."""

    TIMEOUT = "timeout"
    CANCELLED = "cancelled"
    TRANSPORT_ERROR = "transport_error"
    BAD_STATUS = "bad_status"
    MALFORMED_PAYLOAD = "malformed_payload"


class RemoteMatchSuccess(BaseModel):
    """Service answered; ``match`` may still hold no candidate."""

    model_config = ConfigDict(frozen=True)

    match: StageMatch

    def as_stage_match(self) -> StageMatch:
        return self.match


class RemoteMatchFailure(BaseModel):
    """Service could not be used for this call."""

    model_config = ConfigDict(frozen=True)

    reason: RemoteFailureReason
    detail: str | None = None

    def as_stage_match(self) -> StageMatch:
        return StageMatch.none()


RemoteMatchOutcome = RemoteMatchSuccess | RemoteMatchFailure


class RemoteMatcher:
    """Client for the name disambiguation service.

    One POST per call, no retries, bounded by a fixed timeout and
    abortable through an asyncio.Event.
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        url: str,
        timeout: float = 30.0,
    ):
        """Initialize with a shared HTTP client.

        Args:
            client: Async HTTP client (owned by the caller)
            url: Disambiguation endpoint
            timeout: Seconds before the call is abandoned
        """
        self._client = client
        self._url = url
        self._timeout = timeout

    async def match(
        self,
        raw_name: str,
        candidates: list[MatchCandidate],
        cancel_event: asyncio.Event | None = None,
    ) -> RemoteMatchOutcome:
        """Ask the service which candidate ``raw_name`` refers to.

        Args:
            raw_name: Name as typed or OCR-extracted
            candidates: Known patients
            cancel_event: Set by the caller to abandon the request

        Returns:
            RemoteMatchSuccess with the mapped candidate, or
            RemoteMatchFailure describing why no answer is available
        """
        payload = RemoteMatchRequest(
            ocr_name=raw_name,
            candidate_names=[c.full_name for c in candidates],
        ).model_dump(by_alias=True)

        request = asyncio.create_task(self._post(payload))
        waiters: set[asyncio.Task] = {request}
        cancel_waiter = None
        if cancel_event is not None:
            cancel_waiter = asyncio.create_task(cancel_event.wait())
            waiters.add(cancel_waiter)

        try:
            done, _pending = await asyncio.wait(
                waiters,
                timeout=self._timeout,
                return_when=asyncio.FIRST_COMPLETED,
            )
        finally:
            for task in waiters:
                if not task.done():
                    task.cancel()

        if request not in done:
            reason = (
                RemoteFailureReason.CANCELLED
                if cancel_waiter is not None and cancel_waiter in done
                else RemoteFailureReason.TIMEOUT
            )
            return self._failure(reason)

        try:
            response = request.result()
        except httpx.TimeoutException as e:
            return self._failure(RemoteFailureReason.TIMEOUT, str(e))
        except httpx.HTTPError as e:
            return self._failure(RemoteFailureReason.TRANSPORT_ERROR, str(e))

        if not response.is_success:
            return self._failure(
                RemoteFailureReason.BAD_STATUS, f"HTTP {response.status_code}"
            )

        try:
            parsed = RemoteMatchResponse.model_validate(response.json())
        except (ValueError, ValidationError) as e:
            return self._failure(RemoteFailureReason.MALFORMED_PAYLOAD, str(e))

        return RemoteMatchSuccess(match=self._to_stage_match(parsed, candidates))

    async def _post(self, payload: dict) -> httpx.Response:
        return await self._client.post(
            self._url, json=payload, timeout=self._timeout
        )

    def _to_stage_match(
        self,
        parsed: RemoteMatchResponse,
        candidates: list[MatchCandidate],
    ) -> StageMatch:
        """Map the returned name to a candidate by case-insensitive equality."""
        if not parsed.matched_name:
            return StageMatch.none()

        wanted = parsed.matched_name.lower()
        matched = next(
            (c for c in candidates if c.full_name.lower() == wanted),
            None,
        )
        if matched is None:
            logger.info(
                "remote_match_unknown_name",
                matched_name=parsed.matched_name,
                confidence=parsed.confidence,
            )
            return StageMatch.none()
        return StageMatch(candidate=matched, confidence=parsed.confidence)

    def _failure(
        self, reason: RemoteFailureReason, detail: str | None = None
    ) -> RemoteMatchFailure:
        logger.warning("remote_match_failed", reason=reason.value, detail=detail)
        return RemoteMatchFailure(reason=reason, detail=detail)
