"""Speech-input capability and the per-session listening toggle."""

from __future__ import annotations

import enum
import logging
from typing import Optional, Set

from openai import AsyncOpenAI

from services.chat.session_store import SessionStore
from services.speech.dictation_transcriber import DictationTranscriber

LOGGER = logging.getLogger(__name__)


class SpeechInput:
	"""Base speech-input capability; every operation is a no-op."""

	available = False

	async def start(self, session_id: str) -> None:
		return None

	async def stop(self, session_id: str) -> None:
		return None

	async def transcribe(self, audio_b64: str, mime_type: str = "audio/webm") -> str:
		return ""


class UnavailableSpeechInput(SpeechInput):
	"""Used when no transcription backend is configured."""


class TranscribingSpeechInput(SpeechInput):
	"""Speech input backed by the OpenAI transcription API."""

	available = True

	def __init__(self, client: AsyncOpenAI) -> None:
		self.transcriber = DictationTranscriber(client)
		self.active: Set[str] = set()

	async def start(self, session_id: str) -> None:
		self.active.add(session_id)
		LOGGER.info("Listening started for session %s", session_id)

	async def stop(self, session_id: str) -> None:
		self.active.discard(session_id)
		LOGGER.info("Listening stopped for session %s", session_id)

	async def transcribe(self, audio_b64: str, mime_type: str = "audio/webm") -> str:
		return await self.transcriber.transcribe(audio_b64, mime_type)


def build_speech_input(client: Optional[AsyncOpenAI]) -> SpeechInput:
	"""Pick the live adapter when a client exists, else the inert one."""
	if client is None:
		return UnavailableSpeechInput()
	return TranscribingSpeechInput(client)


class ListeningState(str, enum.Enum):
	IDLE = "idle"
	LISTENING = "listening"


class ListeningToggle:
	"""Idle/Listening state machine for one session.

	Always-listening mode lives on the session context and only changes how
	transcripts are gated while in LISTENING.
	"""

	def __init__(self, speech_input: SpeechInput, store: SessionStore, session_id: str) -> None:
		self.speech_input = speech_input
		self.store = store
		self.session_id = session_id
		self.state = ListeningState.IDLE

	@property
	def listening(self) -> bool:
		return self.state is ListeningState.LISTENING

	async def start(self) -> ListeningState:
		if self.state is ListeningState.IDLE:
			await self.speech_input.start(self.session_id)
			self.state = ListeningState.LISTENING
			self.store.set_listening(self.session_id, True)
		return self.state

	async def stop(self) -> ListeningState:
		if self.state is ListeningState.LISTENING:
			await self.speech_input.stop(self.session_id)
			self.state = ListeningState.IDLE
			self.store.set_listening(self.session_id, False)
		return self.state
