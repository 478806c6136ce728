"""Transcribe audio buffers captured by the browser microphone."""

from __future__ import annotations

import base64
import io
import logging

from openai import AsyncOpenAI

LOGGER = logging.getLogger(__name__)
TRANSCRIBE_MODEL = "whisper-1"


def _filename_for_mime(mime_type: str) -> str:
	"""Return a filename for a given audio MIME type.

	The transcription endpoint infers the container from the upload's filename,
	so unknown MIME types raise a ValueError instead of being sent as-is.
	"""
	# Strip any MIME parameters (e.g. 'audio/webm;codecs=opus') and normalize
	mime = (mime_type or "").lower().split(";", 1)[0].strip()
	mapping = {
		"audio/webm": "webm",
		"audio/wav": "wav",
		"audio/x-wav": "wav",
		"audio/mpeg": "mp3",
		"audio/mp3": "mp3",
		"audio/mp4": "mp4",
		"audio/aac": "m4a",
		"audio/ogg": "oga",
		"audio/opus": "ogg",
		"audio/flac": "flac",
		"audio/x-flac": "flac",
	}
	if mime in mapping:
		suffix = mapping[mime]
	elif "/" in mime and mime.split("/")[-1] in {"webm", "wav", "mp3", "mp4", "mpeg", "mpga", "oga", "ogg", "flac", "m4a"}:
		suffix = mime.split("/")[-1]
	else:
		raise ValueError(f"Unsupported or unknown audio MIME type: '{mime_type}'")
	return f"dictation.{suffix}"


class DictationTranscriber:
	"""Convert base64 audio chunks into text transcripts."""

	def __init__(self, client: AsyncOpenAI) -> None:
		if client is None:
			raise ValueError("AsyncOpenAI client is required.")
		self.client = client

	async def transcribe(self, audio_b64: str, mime_type: str = "audio/webm") -> str:
		"""Return a whitespace-trimmed transcript for the provided audio chunk.

		Args:
			audio_b64: Base64-encoded audio payload.
			mime_type: MIME type hint used to name the upload.

		Returns:
			The transcript text.
		"""
		if not audio_b64:
			raise ValueError("Audio payload is required for dictation.")
		audio_file = io.BytesIO(base64.b64decode(audio_b64))
		audio_file.name = _filename_for_mime(mime_type)

		try:
			response = await self.client.audio.transcriptions.create(
				model=TRANSCRIBE_MODEL,
				file=audio_file,
				response_format="text",
			)
		except Exception as exc:
			LOGGER.error("Transcription request failed: %s", exc)
			raise RuntimeError(f"Transcription failed: {exc}") from exc

		if isinstance(response, str):
			return response.strip()
		return (getattr(response, "text", "") or "").strip()
