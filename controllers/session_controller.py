"""Session lifecycle helpers for chat workflows."""

from __future__ import annotations

from typing import Any, Dict

from fastapi import HTTPException, Request

from services.chat.conversation import ConversationService
from services.chat.session_store import SessionStore


def _store(request: Request) -> SessionStore:
	return request.app.state.session_store


async def start_session(request: Request) -> Dict[str, Any]:
	"""Create a new session and return its id and greeting."""
	state = _store(request).create()
	return {"session_id": state.session_id, "messages": [msg.to_dict() for msg in state.messages]}


async def get_session(request: Request, session_id: str) -> Dict[str, Any]:
	"""Return the messages, context, and flags for a session."""
	try:
		return _store(request).snapshot(session_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc


async def post_message(request: Request, session_id: str, text: str) -> Dict[str, Any]:
	"""Run a typed turn and return Niva's reply."""
	conversation: ConversationService = request.app.state.conversation
	try:
		reply = await conversation.submit(session_id, text)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	return {
		"session_id": session_id,
		"reply": reply.to_dict() if reply else None,
		"message_count": len(_store(request).messages(session_id)),
	}


async def set_mood(request: Request, session_id: str, mood_id: str) -> Dict[str, Any]:
	"""Select a mood for the session."""
	try:
		state = _store(request).set_mood(session_id, mood_id)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	except ValueError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	return {"session_id": session_id, "mood": state.context.mood.to_dict()}


async def set_flag(request: Request, session_id: str, name: str, value: bool) -> Dict[str, Any]:
	"""Toggle small-talk or always-listening mode."""
	try:
		state = _store(request).set_flag(session_id, name, value)
	except KeyError as exc:
		raise HTTPException(status_code=404, detail=str(exc)) from exc
	except ValueError as exc:
		raise HTTPException(status_code=400, detail=str(exc)) from exc
	return {"session_id": session_id, "name": name, "value": getattr(state.context, name)}
