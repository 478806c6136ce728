from typing import Any, Optional

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel, field_validator

from controllers.completion_controller import generate_completion

router = APIRouter()


class SelectedMood(BaseModel):
    name: Optional[str] = None


class CompletionRequest(BaseModel):
    prompt: str = ""
    selectedMood: Optional[SelectedMood] = None
    currentTime: Optional[str] = None
    weather: Optional[str] = None
    smallTalkMode: Optional[bool] = False

    @field_validator("selectedMood", mode="before")
    @classmethod
    def _mood_object_only(cls, value: Any) -> Any:
        # Anything other than an object means no mood was selected.
        return value if isinstance(value, dict) else None


@router.post("/api/completion")
async def post_completion(request: Request):
    """Return Niva's reply to a single prompt with optional mood, time, and weather context.

    The body is parsed here rather than by FastAPI so malformed input is
    reported as 500 `{"error": ...}` like every other failure of this endpoint.
    """
    try:
        body = await request.json()
        if not isinstance(body, dict):
            raise ValueError("Request body must be a JSON object")
        payload = CompletionRequest.model_validate(body)
        return await generate_completion(
            request,
            payload.prompt,
            mood_name=payload.selectedMood.name if payload.selectedMood else None,
            current_time=payload.currentTime,
            weather=payload.weather,
            small_talk_mode=bool(payload.smallTalkMode),
        )
    except Exception as exc:
        return JSONResponse({"error": str(exc) or "Failed to generate content"}, status_code=500)
