"""Speech-output capability: synthesize replies and hand audio to a session sink."""

from __future__ import annotations

import asyncio
import logging
import os
from dataclasses import dataclass
from typing import Awaitable, Callable, Dict, List, Optional, Sequence, Tuple

from openai import AsyncOpenAI

LOGGER = logging.getLogger(__name__)
TTS_MODEL = os.getenv("NIVA_TTS_MODEL", "gpt-4o-mini-tts")
SPEECH_LOCALE = os.getenv("NIVA_SPEECH_LOCALE", "en-IN")
SPEECH_SPEED = 0.9
VOICE_INSTRUCTIONS = (
	"Speak as Niva, a 17-year-old CS student: a sweet, warm Indian English female tone, "
	"slightly playful and a little higher pitched, at a relaxed pace."
)
# The legacy tts-1 models reject voice instructions.
_NO_INSTRUCTION_MODELS = ("tts-1", "tts-1-hd")

AudioSink = Callable[[bytes], Awaitable[None]]


@dataclass(frozen=True)
class Voice:
	name: str
	lang: str


DEFAULT_VOICES: Tuple[Voice, ...] = (
	Voice("alloy", "en-US"),
	Voice("coral", "en-US"),
	Voice("nova", "en-US"),
	Voice("shimmer", "en-US"),
)


def select_voice(voices: Sequence[Voice], locale: str) -> Optional[Voice]:
	"""Prefer a voice tagged with `locale`, then any voice of its language."""
	if not voices:
		return None
	locale = locale.lower()
	language = locale.split("-", 1)[0]
	for voice in voices:
		if voice.lang.lower() == locale:
			return voice
	for voice in voices:
		if voice.lang.lower().split("-", 1)[0] == language:
			return voice
	return voices[0]


def default_voices() -> Tuple[Voice, ...]:
	"""Return the voice catalog, with NIVA_TTS_VOICE tagged for the speech locale."""
	override = os.getenv("NIVA_TTS_VOICE")
	if override:
		return (Voice(override, SPEECH_LOCALE),) + DEFAULT_VOICES
	return DEFAULT_VOICES


class SpeechOutput:
	"""Base speech-output capability; every operation is a no-op."""

	available = False

	def register_sink(self, session_id: str, sink: AudioSink) -> None:
		return None

	def unregister_sink(self, session_id: str, sink: AudioSink) -> None:
		return None

	def speak(self, session_id: str, text: str) -> None:
		return None

	async def start(self) -> None:
		return None

	async def stop(self) -> None:
		return None


class UnavailableSpeechOutput(SpeechOutput):
	"""Used when no speech synthesis backend is configured."""


class QueuedSpeechOutput(SpeechOutput):
	"""Serialize synthesis requests through a single consumer so audio never overlaps."""

	available = True

	def __init__(
		self,
		client: AsyncOpenAI,
		*,
		voices: Sequence[Voice] = (),
		locale: str = SPEECH_LOCALE,
		model: str = TTS_MODEL,
	) -> None:
		if client is None:
			raise ValueError("AsyncOpenAI client is required.")
		self.client = client
		self.model = model
		self.voice = select_voice(tuple(voices) or default_voices(), locale)
		self._sinks: Dict[str, List[AudioSink]] = {}
		self._queue: "asyncio.Queue[Tuple[str, str]]" = asyncio.Queue()
		self._worker: Optional[asyncio.Task] = None

	def register_sink(self, session_id: str, sink: AudioSink) -> None:
		"""Attach a sink; the most recently attached sink of a session receives audio."""
		self._sinks.setdefault(session_id, []).append(sink)

	def unregister_sink(self, session_id: str, sink: AudioSink) -> None:
		"""Detach `sink` only; other sockets on the same session keep theirs."""
		sinks = self._sinks.get(session_id)
		if not sinks:
			return
		self._sinks[session_id] = [registered for registered in sinks if registered is not sink]
		if not self._sinks[session_id]:
			del self._sinks[session_id]

	def active_sink(self, session_id: str) -> Optional[AudioSink]:
		sinks = self._sinks.get(session_id)
		return sinks[-1] if sinks else None

	def speak(self, session_id: str, text: str) -> None:
		"""Queue `text` for playback; returns immediately."""
		if text and text.strip():
			self._queue.put_nowait((session_id, text))

	async def start(self) -> None:
		if self._worker is None:
			self._worker = asyncio.create_task(self._run())

	async def stop(self) -> None:
		if self._worker is None:
			return
		self._worker.cancel()
		try:
			await self._worker
		except asyncio.CancelledError:
			pass
		self._worker = None

	async def drain(self) -> None:
		"""Wait until every queued request has been played."""
		await self._queue.join()

	async def _run(self) -> None:
		while True:
			session_id, text = await self._queue.get()
			try:
				sink = self.active_sink(session_id)
				if sink is None:
					continue
				audio = await self._synthesize(text)
				await sink(audio)
			except Exception:
				LOGGER.exception("Speech synthesis failed for session %s", session_id)
			finally:
				self._queue.task_done()

	async def _synthesize(self, text: str) -> bytes:
		options = {}
		if self.model not in _NO_INSTRUCTION_MODELS:
			options["instructions"] = VOICE_INSTRUCTIONS
		response = await self.client.audio.speech.create(
			model=self.model,
			voice=self.voice.name,
			input=text,
			response_format="mp3",
			speed=SPEECH_SPEED,
			**options,
		)
		return response.content


def build_speech_output(client: Optional[AsyncOpenAI]) -> SpeechOutput:
	"""Pick the live adapter when a client exists, else the inert one."""
	if client is None:
		return UnavailableSpeechOutput()
	return QueuedSpeechOutput(client)
