"""Turn-taking pipeline: user text in, Niva's reply out."""

from __future__ import annotations

import asyncio
import logging
from typing import Dict, Optional

from models.session_models import Message
from services.chat.completion_client import CompletionClient
from services.chat.prompts import compose
from services.chat.session_store import SessionStore
from services.speech.speech_output import SpeechOutput, UnavailableSpeechOutput
from services.speech.wake_phrase import gate_transcript

LOGGER = logging.getLogger(__name__)
SPOKEN_SUBMIT_DELAY = 0.1


class ConversationService:
	"""Run conversation turns for every session in a store."""

	def __init__(
		self,
		store: SessionStore,
		completion: CompletionClient,
		speech_output: Optional[SpeechOutput] = None,
		*,
		spoken_delay: float = SPOKEN_SUBMIT_DELAY,
	) -> None:
		self.store = store
		self.completion = completion
		self.speech_output = speech_output or UnavailableSpeechOutput()
		self.spoken_delay = spoken_delay
		self._locks: Dict[str, asyncio.Lock] = {}

	def _lock_for(self, session_id: str) -> asyncio.Lock:
		lock = self._locks.get(session_id)
		if lock is None:
			lock = self._locks[session_id] = asyncio.Lock()
		return lock

	async def submit(self, session_id: str, text: str) -> Optional[Message]:
		"""Run one turn and return the assistant reply, or None for blank input.

		Turns for the same session run one at a time, so replies land in the
		order their user messages were submitted.
		"""
		self.store.get(session_id)
		user_text = (text or "").strip()
		if not user_text:
			return None

		async with self._lock_for(session_id):
			state = self.store.append_message(session_id, Message(role="user", text=user_text))
			state.turns += 1
			self.store.set_typing(session_id, True)
			try:
				prompt = compose(state.context, user_text)
				reply_text = await self.completion.complete(prompt)
				reply = Message(role="assistant", text=reply_text)
				self.store.append_message(session_id, reply)
			finally:
				self.store.set_typing(session_id, False)

		self.speech_output.speak(session_id, reply.text)
		return reply

	def accept_transcript(self, session_id: str, transcript: str) -> Optional[str]:
		"""Return the command carried by a transcript, or None if it is not for Niva."""
		state = self.store.get(session_id)
		command = gate_transcript(transcript, state.context.always_listening_mode)
		if command is None:
			LOGGER.debug("Transcript ignored for session %s", session_id)
		return command

	async def submit_spoken(self, session_id: str, command: str) -> Optional[Message]:
		"""Submit an accepted voice command after a short settling delay."""
		await asyncio.sleep(self.spoken_delay)
		return await self.submit(session_id, command)
