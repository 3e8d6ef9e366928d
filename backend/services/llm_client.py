"""Language-model completion capability backed by Google Gemini.

The pipeline only depends on ``CompletionClient.complete(prompt) -> str``;
tests swap in a stub returning canned JSON.
"""

import asyncio
import json
import logging
from typing import Any, Protocol

from google import genai
from google.genai import errors as genai_errors
from google.genai import types

from config import settings
from services.errors import LLMError, LLMTimeoutError, RateLimitedError

logger = logging.getLogger(__name__)


class CompletionClient(Protocol):
    async def complete(self, prompt: str, *, timeout: float | None = None) -> str: ...


def _discard_late_result(future: asyncio.Future) -> None:
    # Consume the outcome of calls whose caller already gave up on them.
    if not future.cancelled():
        future.exception()


class GeminiCompletionClient:
    """Gemini-backed completion with a per-call time budget.

    On timeout the underlying request is shielded rather than cancelled;
    whatever it eventually returns is discarded.
    """

    def __init__(
        self,
        api_key: str,
        model: str = settings.gemini_model,
        temperature: float = settings.llm_temperature,
        default_timeout: float = settings.llm_timeout_seconds,
    ) -> None:
        self._client = genai.Client(api_key=api_key)
        self._model = model
        self._temperature = temperature
        self._default_timeout = default_timeout

    async def _generate(self, prompt: str) -> str:
        response = await self._client.aio.models.generate_content(
            model=self._model,
            contents=prompt,
            config=types.GenerateContentConfig(
                temperature=self._temperature,
                max_output_tokens=settings.llm_max_output_tokens,
            ),
        )
        return (response.text or "").strip()

    async def complete(self, prompt: str, *, timeout: float | None = None) -> str:
        budget = timeout if timeout is not None else self._default_timeout
        call = asyncio.ensure_future(self._generate(prompt))
        call.add_done_callback(_discard_late_result)
        try:
            return await asyncio.wait_for(asyncio.shield(call), timeout=budget)
        except asyncio.TimeoutError as e:
            logger.warning("Gemini call exceeded %.1fs budget", budget)
            raise LLMTimeoutError(f"Language model call timed out after {budget:.0f}s") from e
        except genai_errors.APIError as e:
            if e.code == 429:
                logger.warning("Gemini rate limited: %s", e)
                raise RateLimitedError() from e
            logger.error("Gemini API error: %s", e)
            raise LLMError(f"Language model call failed: {e.message or e.status}") from e
        except Exception as e:
            logger.error("Gemini client error: %s", e)
            raise LLMError("Language model call failed") from e


_client: GeminiCompletionClient | None = None


def get_completion_client() -> GeminiCompletionClient | None:
    global _client
    if not settings.gemini_api_key:
        logger.warning("No GEMINI_API_KEY set - language model features disabled")
        return None
    if _client is None:
        _client = GeminiCompletionClient(api_key=settings.gemini_api_key)
    return _client


def strip_code_fences(text: str) -> str:
    text = text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else text[3:]
        if text.endswith("```"):
            text = text[:-3]
        text = text.strip()
    return text


def parse_json_response(text: str) -> Any:
    """Parse a model response as JSON, tolerating markdown code fences."""
    try:
        return json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        logger.error("Failed to parse model response as JSON: %s", e)
        raise LLMError("Language model returned malformed JSON") from e


async def complete_json(
    client: CompletionClient, prompt: str, *, timeout: float | None = None
) -> dict:
    """Run a completion and require a JSON object back."""
    data = parse_json_response(await client.complete(prompt, timeout=timeout))
    if not isinstance(data, dict):
        raise LLMError("Language model returned an unexpected JSON shape")
    return data
