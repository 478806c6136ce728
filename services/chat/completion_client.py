"""Text completion client built on the OpenAI Responses API."""

import logging
import os
import time
from typing import Any, Optional

from openai import AsyncOpenAI

from services.chat.exceptions import (
    BadCompletionResponseError,
    CompletionBackendError,
    CompletionError,
    CompletionNotConfiguredError,
)
from services.chat.response_parser import extract_text

LOGGER = logging.getLogger(__name__)
DEFAULT_MODEL = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
FALLBACK_REPLY = "Sorry, I'm having trouble connecting right now. Please try again later."


class CompletionClient:
    """Send a composed prompt to the backend and return the reply text."""

    def __init__(self, client: Optional[AsyncOpenAI], model: str = DEFAULT_MODEL) -> None:
        """Initialize the client.

        Args:
            client: Async OpenAI client, or None when no API key is configured.
            model: Model name used for every completion.
        """
        self.client = client
        self.model = model

    @property
    def configured(self) -> bool:
        return self.client is not None

    async def generate(self, prompt: str) -> str:
        """Request a single non-streamed completion.

        Raises:
            CompletionNotConfiguredError: If no backend client is available.
            CompletionBackendError: If the request itself fails.
            BadCompletionResponseError: If the response carries no text.
        """
        if self.client is None:
            raise CompletionNotConfiguredError("API key not configured")

        start = time.perf_counter()
        try:
            response: Any = await self.client.responses.create(model=self.model, input=prompt)
        except Exception as exc:
            raise CompletionBackendError(str(exc) or "Failed to generate content") from exc
        LOGGER.info("Completion latency: %.3fs", time.perf_counter() - start)

        text = extract_text(response).strip()
        if not text:
            raise BadCompletionResponseError("Completion response did not include text.")
        return text

    async def complete(self, prompt: str) -> str:
        """Return the completion text, or the fallback reply on any failure."""
        try:
            return await self.generate(prompt)
        except CompletionError as exc:
            LOGGER.error("Error calling completion backend: %s", exc)
        except Exception:
            LOGGER.exception("Unexpected error while generating a completion")
        return FALLBACK_REPLY
