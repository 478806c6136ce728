"""Simple in-memory store for conversation sessions."""

from __future__ import annotations

from typing import Dict, Optional, Tuple
from uuid import uuid4

from models.moods import get_mood
from models.session_models import GREETING, ConversationState, Message, SessionContext

FLAGS = ("small_talk_mode", "always_listening_mode")


class SessionStore:
	"""Manage sessions, their messages, mood, and context flags."""

	def __init__(self) -> None:
		self._sessions: Dict[str, ConversationState] = {}
		self._current_time = ""
		self._weather = ""

	def create(self) -> ConversationState:
		"""Create a new session seeded with Niva's greeting."""
		session_id = uuid4().hex
		context = SessionContext(current_time=self._current_time, weather=self._weather)
		state = ConversationState(session_id=session_id, context=context)
		state.messages.append(Message(role="assistant", text=GREETING))
		self._sessions[session_id] = state
		return state

	def get(self, session_id: str) -> ConversationState:
		"""Return a session or raise KeyError if missing."""
		state = self._sessions.get(session_id)
		if state is None:
			raise KeyError(f"Session {session_id} not found")
		return state

	def append_message(self, session_id: str, message: Message) -> ConversationState:
		"""Append a message to the session conversation."""
		state = self.get(session_id)
		state.messages.append(message)
		return state

	def messages(self, session_id: str) -> Tuple[Message, ...]:
		"""Return an ordered snapshot of the conversation."""
		return tuple(self.get(session_id).messages)

	def set_mood(self, session_id: str, mood_id: str) -> ConversationState:
		"""Select one of the fixed moods for the session."""
		mood = get_mood(mood_id)
		state = self.get(session_id)
		state.context.mood = mood
		return state

	def set_flag(self, session_id: str, name: str, value: bool) -> ConversationState:
		"""Toggle small-talk or always-listening mode."""
		if name not in FLAGS:
			raise ValueError(f"Unknown flag '{name}'")
		state = self.get(session_id)
		setattr(state.context, name, bool(value))
		return state

	def set_typing(self, session_id: str, value: bool) -> None:
		self.get(session_id).is_typing = value

	def set_listening(self, session_id: str, value: bool) -> None:
		self.get(session_id).is_listening = value

	def update_context(
		self,
		session_id: str,
		time: Optional[str] = None,
		weather: Optional[str] = None,
	) -> ConversationState:
		"""Replace the time and/or weather strings for one session."""
		state = self.get(session_id)
		if time is not None:
			state.context.current_time = time
		if weather is not None:
			state.context.weather = weather
		return state

	def update_context_all(self, time: Optional[str] = None, weather: Optional[str] = None) -> None:
		"""Push refreshed ambient values into every session and future ones."""
		if time is not None:
			self._current_time = time
		if weather is not None:
			self._weather = weather
		for session_id in list(self._sessions):
			self.update_context(session_id, time=time, weather=weather)

	def snapshot(self, session_id: str) -> Dict[str, object]:
		"""Return a serializable view of the session."""
		state = self.get(session_id)
		return {
			"session_id": state.session_id,
			"messages": [msg.to_dict() for msg in state.messages],
			"context": state.context.to_dict(),
			"is_typing": state.is_typing,
			"is_listening": state.is_listening,
		}
