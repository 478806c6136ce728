"""Dispatch realtime websocket events for one chat session."""
from __future__ import annotations

import asyncio
import base64
import json
import logging
from typing import Any, Awaitable, Dict, Optional, Set

from fastapi import WebSocket

from models.session_models import Message
from services.chat.conversation import ConversationService
from services.realtime.ws_dictation import DictationMessageHandler
from services.speech.speech_input import ListeningToggle, SpeechInput
from services.speech.speech_output import SpeechOutput

LOGGER = logging.getLogger(__name__)


def _flag_value(value: Any) -> bool:
	if not isinstance(value, bool):
		raise ValueError("Flag value must be true or false.")
	return value


class RealtimeSessionHandler:
	"""Route websocket messages for a single chat session."""

	def __init__(
		self,
		websocket: WebSocket,
		session_id: str,
		conversation: ConversationService,
		speech_input: SpeechInput,
		speech_output: SpeechOutput,
	) -> None:
		self.websocket = websocket
		self.session_id = session_id
		self.conversation = conversation
		self.store = conversation.store
		self.speech_input = speech_input
		self.speech_output = speech_output
		self.listening = ListeningToggle(speech_input, self.store, session_id)
		self.dictation_handler = DictationMessageHandler(speech_input)
		self._turns: Set[asyncio.Task] = set()
		# Bound once so unregister_sink can match this socket's sink by identity.
		self._audio_sink = self._send_audio

	def open(self) -> None:
		self.speech_output.register_sink(self.session_id, self._audio_sink)

	async def close(self) -> None:
		self.speech_output.unregister_sink(self.session_id, self._audio_sink)
		await self.listening.stop()

	async def handle(self, payload: Dict[str, Any]) -> None:
		"""Process a single inbound websocket payload."""
		request_id = payload.get("request_id")
		message_type = payload.get("type")
		try:
			if message_type == "conversation.append":
				result = self._append_conversation(payload)
			elif message_type == "speech.transcript":
				result = self._handle_transcript(payload.get("text") or "")
			elif message_type == "dictation.audio":
				result = await self._handle_dictation(payload)
			elif message_type == "listening.start":
				result = {"type": "listening.state", "state": (await self.listening.start()).value}
			elif message_type == "listening.stop":
				result = {"type": "listening.state", "state": (await self.listening.stop()).value}
			elif message_type == "flags.set":
				state = self.store.set_flag(self.session_id, payload.get("name") or "", _flag_value(payload.get("value")))
				result = {"type": "context.state", "context": state.context.to_dict()}
			elif message_type == "mood.set":
				state = self.store.set_mood(self.session_id, payload.get("mood_id") or "")
				result = {"type": "context.state", "context": state.context.to_dict()}
			else:
				raise ValueError("Unsupported message type.")
			if result is not None:
				result["request_id"] = request_id
				await self._send(result)
		except Exception as exc:
			await self._send_error(request_id, str(exc))

	def _append_conversation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		"""Start a typed turn; the reply arrives later as assistant.message."""
		text = (payload.get("text") or "").strip()
		if not text:
			raise ValueError("Conversation text is required.")
		self._start_turn(self.conversation.submit(self.session_id, text))
		return {"type": "conversation.ack", "text": text}

	def _handle_transcript(self, transcript: str) -> Dict[str, Any]:
		if not self.listening.listening:
			return {"type": "speech.ignored", "reason": "not listening"}
		command = self.conversation.accept_transcript(self.session_id, transcript)
		if command is None:
			return {"type": "speech.ignored", "reason": "no wake phrase"}
		self._start_turn(self.conversation.submit_spoken(self.session_id, command))
		return {"type": "speech.command", "text": command}

	async def _handle_dictation(self, payload: Dict[str, Any]) -> Dict[str, Any]:
		if not self.speech_input.available:
			return {"type": "speech.ignored", "reason": "speech input unavailable"}
		if not self.listening.listening:
			return {"type": "speech.ignored", "reason": "not listening"}
		transcript = await self.dictation_handler.transcribe(self.session_id, payload)
		return self._handle_transcript(transcript)

	def _start_turn(self, turn: Awaitable[Optional[Message]]) -> None:
		task = asyncio.create_task(self._run_turn(turn))
		self._turns.add(task)
		task.add_done_callback(self._turns.discard)

	async def _run_turn(self, turn: Awaitable[Optional[Message]]) -> None:
		try:
			reply = await turn
		except Exception as exc:
			LOGGER.exception("Conversation turn failed for session %s", self.session_id)
			await self._send_error(None, str(exc))
			return
		if reply is not None:
			await self._send({"type": "assistant.message", "message": reply.to_dict()})

	async def _send_audio(self, audio: bytes) -> None:
		await self._send({
			"type": "speech.audio",
			"format": "mp3",
			"audio_b64": base64.b64encode(audio).decode("utf-8"),
		})

	async def _send_error(self, request_id: Any, detail: str) -> None:
		await self._send({"type": "error", "request_id": request_id, "detail": detail})

	async def _send(self, payload: Dict[str, Any]) -> None:
		try:
			await self.websocket.send_text(json.dumps(payload))
		except Exception as exc:
			LOGGER.warning("Dropping %s event for session %s: %s", payload.get("type"), self.session_id, exc)
