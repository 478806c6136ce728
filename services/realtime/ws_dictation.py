"""Handle dictation audio events coming over the realtime websocket."""
from __future__ import annotations

import logging
from typing import Any, Dict

from services.speech.speech_input import SpeechInput

LOGGER = logging.getLogger(__name__)


class DictationMessageHandler:
	"""Turn an uploaded audio chunk into a transcript."""

	def __init__(self, speech_input: SpeechInput) -> None:
		self.speech_input = speech_input

	async def transcribe(self, session_id: str, payload: Dict[str, Any]) -> str:
		"""Return the transcript for a single audio chunk, or '' when nothing was heard."""
		audio_b64 = payload.get("audio_b64") or ""
		if not audio_b64:
			raise ValueError("Audio payload is required for dictation.")
		mime_type = payload.get("mime_type") or "audio/webm"
		try:
			return await self.speech_input.transcribe(audio_b64, mime_type)
		except Exception:
			LOGGER.exception("Speech recognition failed for session %s", session_id)
			raise
