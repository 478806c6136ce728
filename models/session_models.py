"""Session domain models for the conversation pipeline."""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import List, Literal

from models.moods import DEFAULT_MOOD, Mood

Role = Literal["user", "assistant"]

GREETING = "Hello! I'm Niva, your 17-year-old CS student AI bestie. How may I assist you today?"


@dataclass(frozen=True)
class Message:
	"""Single chat message; never mutated once appended."""

	role: Role
	text: str
	created_at: float = field(default_factory=lambda: time.time())

	def to_dict(self) -> dict:
		return {"role": self.role, "text": self.text, "created_at": self.created_at}


@dataclass
class SessionContext:
	"""Mood, ambient strings, and mode flags injected into every prompt."""

	mood: Mood = DEFAULT_MOOD
	current_time: str = ""
	weather: str = ""
	small_talk_mode: bool = False
	always_listening_mode: bool = False

	def to_dict(self) -> dict:
		return {
			"mood": self.mood.to_dict(),
			"current_time": self.current_time,
			"weather": self.weather,
			"small_talk_mode": self.small_talk_mode,
			"always_listening_mode": self.always_listening_mode,
		}


@dataclass
class ConversationState:
	"""In-memory conversation for one session."""

	session_id: str
	context: SessionContext = field(default_factory=SessionContext)
	messages: List[Message] = field(default_factory=list)
	is_typing: bool = False
	is_listening: bool = False
	turns: int = 0
