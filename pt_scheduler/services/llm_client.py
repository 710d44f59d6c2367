"""LLM client wrapper for Anthropic structured outputs."""

from typing import TypeVar

from anthropic import APIError, AsyncAnthropic
from pydantic import BaseModel

from pt_scheduler.config import settings

T = TypeVar("T", bound=BaseModel)


class LLMClientError(Exception):
    """Raised when the LLM call fails or returns unusable output."""

    pass


class LLMClient:
    """Anthropic client wrapper with structured output support.

    Uses client.beta.messages.parse with Pydantic models so the name
    disambiguation answer is always schema-valid JSON.
    """

    def __init__(self, client: AsyncAnthropic | None = None):
        """Initialize LLM client.

        Args:
            client: Optional async Anthropic client for dependency injection.
                   If not provided, creates one from settings.
        """
        if client is not None:
            self._client = client
        elif settings.anthropic_api_key:
            self._client = AsyncAnthropic(api_key=settings.anthropic_api_key)
        else:
            # Allow initialization without API key for testing
            self._client = None

    async def extract(
        self,
        prompt: str,
        response_model: type[T],
        system: str | None = None,
        max_tokens: int = 150,
    ) -> T:
        """Get a structured answer from the LLM.

        Args:
            prompt: The user prompt
            response_model: Pydantic model defining the output schema
            system: Optional system prompt
            max_tokens: Output token ceiling

        Returns:
            Parsed response matching the response_model type

        Raises:
            LLMClientError: If the call fails
        """
        if self._client is None:
            raise LLMClientError(
                "Anthropic client not initialized. "
                "Set ANTHROPIC_API_KEY environment variable."
            )

        kwargs = {}
        if system:
            kwargs["system"] = system

        try:
            response = await self._client.beta.messages.parse(
                model=settings.anthropic_model,
                max_tokens=max_tokens,
                temperature=0,
                betas=["structured-outputs-2025-11-13"],
                messages=[{"role": "user", "content": prompt}],
                output_format=response_model,
                **kwargs,
            )
        except APIError as e:
            raise LLMClientError(f"Anthropic API error: {e}") from e
        except Exception as e:
            raise LLMClientError(f"LLM call failed: {e}") from e

        if response.parsed_output is None:
            raise LLMClientError("Empty response from LLM")
        return response.parsed_output
