"""LLM-backed name disambiguation, the service behind the remote fallback.

Handles cases the local stages can't:
- OCR errors (misread, missing or swapped letters)
- Nicknames missing from the alias table
- "Last, First" ordering mixed with punctuation
"""

import structlog
from pydantic import BaseModel, Field

from pt_scheduler.services.llm_client import LLMClient

logger = structlog.get_logger()


class NameMatchAnswer(BaseModel):
    """Answer the LLM must produce."""

    matched_name: str | None = Field(
        description="Exact string from the candidate list, or null if no match"
    )
    confidence: int = Field(ge=0, le=100, description="Certainty (0-100)")


class NameDisambiguator:
    """Picks which known patient an OCR-extracted name refers to."""

    # fmt: off
    SYSTEM_PROMPT = (
        "You are a patient-name matching assistant for a home health PT "
        "scheduling app.\n"
        "You will receive a name extracted from an OCR screenshot and a list "
        "of known patient names.\n"
        "Your job is to determine which known patient (if any) is the best "
        "match.\n\n"
        "Rules:\n"
        "- Account for OCR errors: misread characters, missing letters, "
        "swapped letters.\n"
        "- Account for nicknames: \"Bob\" = \"Robert\", \"Bill\" = \"William\", "
        "etc.\n"
        "- Account for \"Last, First\" vs \"First Last\" ordering.\n"
        "- matched_name must be copied exactly from the candidate list.\n"
        "- If no candidate is a reasonable match, return null for "
        "matched_name and 0 for confidence."
    )

    MATCH_PROMPT = (
        "OCR extracted name: \"{ocr_name}\"\n\n"
        "Known patients:\n"
        "{candidates_formatted}\n\n"
        "Which patient is the best match?"
    )
    # fmt: on

    def __init__(self, llm_client: LLMClient):
        """Initialize with LLM client.

        Args:
            llm_client: Client for making LLM requests
        """
        self._llm_client = llm_client

    async def disambiguate(
        self, ocr_name: str, candidate_names: list[str]
    ) -> NameMatchAnswer:
        """Ask the LLM which candidate ``ocr_name`` refers to.

        Args:
            ocr_name: Name as extracted from the screenshot
            candidate_names: Full names of known patients

        Returns:
            NameMatchAnswer; no LLM call is made for an empty list

        Raises:
            LLMClientError: If the LLM call fails
        """
        if not candidate_names:
            return NameMatchAnswer(matched_name=None, confidence=0)

        prompt = self.MATCH_PROMPT.format(
            ocr_name=ocr_name,
            candidates_formatted=self._format_candidates(candidate_names),
        )
        answer = await self._llm_client.extract(
            prompt, NameMatchAnswer, system=self.SYSTEM_PROMPT
        )

        if answer.matched_name is None:
            return NameMatchAnswer(matched_name=None, confidence=0)

        logger.info(
            "name_disambiguated",
            candidates=len(candidate_names),
            confidence=answer.confidence,
        )
        return answer

    def _format_candidates(self, candidate_names: list[str]) -> str:
        """Numbered list, one patient per line."""
        return "\n".join(
            f"{i}. {name}" for i, name in enumerate(candidate_names, start=1)
        )
