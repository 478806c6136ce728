"""FastAPI routes for chat sessions."""

from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from controllers.session_controller import get_session, post_message, set_flag, set_mood, start_session

router = APIRouter(prefix="/sessions")


class MessagePayload(BaseModel):
	text: str


class MoodPayload(BaseModel):
	mood_id: str


class FlagPayload(BaseModel):
	value: bool


@router.post("")
async def start_session_route(request: Request):
	try:
		return await start_session(request)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.get("/{session_id}")
async def get_session_route(request: Request, session_id: str):
	try:
		return await get_session(request, session_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.post("/{session_id}/messages")
async def post_message_route(request: Request, session_id: str, payload: MessagePayload):
	try:
		return await post_message(request, session_id, payload.text)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.put("/{session_id}/mood")
async def set_mood_route(request: Request, session_id: str, payload: MoodPayload):
	try:
		return await set_mood(request, session_id, payload.mood_id)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))


@router.put("/{session_id}/flags/{name}")
async def set_flag_route(request: Request, session_id: str, name: str, payload: FlagPayload):
	try:
		return await set_flag(request, session_id, name, payload.value)
	except HTTPException:
		raise
	except Exception as exc:
		raise HTTPException(status_code=500, detail=str(exc))
