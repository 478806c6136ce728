import logging
from typing import Optional

from fastapi import Request
from fastapi.responses import JSONResponse

from services.chat.completion_client import CompletionClient
from services.chat.exceptions import CompletionError
from services.chat.prompts import build_prompt

LOGGER = logging.getLogger(__name__)


async def generate_completion(
    request: Request,
    prompt: str,
    mood_name: Optional[str] = None,
    current_time: Optional[str] = None,
    weather: Optional[str] = None,
    small_talk_mode: bool = False,
) -> JSONResponse:
    """Compose Niva's prompt around a single user message and return the completion.

    Args:
        request: FastAPI Request (used to access the shared completion client).
        prompt: The raw user message.
        mood_name: Display name of the selected mood; defaults to Focused.
        current_time: Local time string, omitted from the prompt when empty.
        weather: Weather summary, omitted from the prompt when empty.
        small_talk_mode: Whether to append the small-talk instructions.

    Returns:
        200 `{"response": text}` on success, or 500 `{"error": message}` when the
        API key is missing or the backend call fails.
    """
    completion: CompletionClient = request.app.state.completion_client

    full_prompt = build_prompt(
        prompt,
        mood_name=mood_name or "",
        current_time=current_time or "",
        weather=weather or "",
        small_talk_mode=bool(small_talk_mode),
    )

    try:
        text = await completion.generate(full_prompt)
    except CompletionError as exc:
        LOGGER.error("Error calling completion backend: %s", exc)
        return JSONResponse({"error": str(exc) or "Failed to generate content"}, status_code=500)

    return JSONResponse({"response": text})
