"""Tests for the speech input and output adapters."""

import asyncio
import base64

import pytest

from conftest import FakeOpenAI
from services.chat.completion_client import CompletionClient
from services.chat.conversation import ConversationService
from services.chat.session_store import SessionStore
from services.realtime.ws_session import RealtimeSessionHandler
from services.speech.dictation_transcriber import DictationTranscriber, _filename_for_mime
from services.speech.speech_input import (
    ListeningState,
    ListeningToggle,
    TranscribingSpeechInput,
    UnavailableSpeechInput,
    build_speech_input,
)
from services.speech.speech_output import (
    SPEECH_SPEED,
    VOICE_INSTRUCTIONS,
    QueuedSpeechOutput,
    UnavailableSpeechOutput,
    Voice,
    build_speech_output,
    select_voice,
)


class TestSelectVoice:

    def test_prefers_regional_voice(self):
        voices = [Voice("us", "en-US"), Voice("india", "en-IN"), Voice("hindi", "hi-IN")]
        assert select_voice(voices, "en-IN").name == "india"

    def test_falls_back_to_same_language(self):
        voices = [Voice("hindi", "hi-IN"), Voice("us", "en-US")]
        assert select_voice(voices, "en-IN").name == "us"

    def test_falls_back_to_first_voice(self):
        voices = [Voice("hindi", "hi-IN"), Voice("tamil", "ta-IN")]
        assert select_voice(voices, "en-IN").name == "hindi"

    def test_no_voices(self):
        assert select_voice([], "en-IN") is None


class TestQueuedSpeechOutput:

    def test_playback_never_overlaps(self):
        events = []

        async def sink(audio):
            events.append(("start", audio))
            await asyncio.sleep(0.01)
            events.append(("end", audio))

        async def run():
            fake = FakeOpenAI()
            output = QueuedSpeechOutput(fake, voices=[Voice("nova", "en-IN")])
            output.register_sink("s1", sink)
            await output.start()
            output.speak("s1", "one")
            output.speak("s1", "two")
            output.speak("s1", "three")
            await output.drain()
            await output.stop()
            return fake

        fake = asyncio.run(run())
        assert [kind for kind, _ in events] == ["start", "end"] * 3
        assert [audio for kind, audio in events if kind == "start"] == [b"audio:one", b"audio:two", b"audio:three"]
        assert {call["voice"] for call in fake.audio.speech.calls} == {"nova"}

    def test_missing_sink_skips_synthesis(self):
        async def run():
            fake = FakeOpenAI()
            output = QueuedSpeechOutput(fake)
            await output.start()
            output.speak("nobody", "hello")
            await output.drain()
            await output.stop()
            return fake

        assert asyncio.run(run()).audio.speech.calls == []

    def test_sink_failure_does_not_stop_the_worker(self):
        received = []

        async def sink(audio):
            if audio == b"audio:bad":
                raise RuntimeError("socket closed")
            received.append(audio)

        async def run():
            output = QueuedSpeechOutput(FakeOpenAI())
            output.register_sink("s1", sink)
            await output.start()
            output.speak("s1", "bad")
            output.speak("s1", "good")
            await output.drain()
            await output.stop()

        asyncio.run(run())
        assert received == [b"audio:good"]

    def test_closing_one_sink_keeps_the_other(self):
        first_received = []
        second_received = []

        async def first(audio):
            first_received.append(audio)

        async def second(audio):
            second_received.append(audio)

        async def run():
            output = QueuedSpeechOutput(FakeOpenAI())
            output.register_sink("s1", first)
            output.register_sink("s1", second)
            await output.start()
            output.unregister_sink("s1", first)
            assert output.active_sink("s1") is second
            output.speak("s1", "still here")
            await output.drain()
            # Unregistering a sink that is not attached changes nothing.
            output.unregister_sink("s1", first)
            assert output.active_sink("s1") is second
            output.unregister_sink("s1", second)
            assert output.active_sink("s1") is None
            await output.stop()

        asyncio.run(run())
        assert first_received == []
        assert second_received == [b"audio:still here"]

    def test_newest_sink_wins_and_older_one_takes_over(self):
        received = []

        async def first(audio):
            received.append(("first", audio))

        async def second(audio):
            received.append(("second", audio))

        async def run():
            output = QueuedSpeechOutput(FakeOpenAI())
            output.register_sink("s1", first)
            output.register_sink("s1", second)
            await output.start()
            output.speak("s1", "one")
            await output.drain()
            output.unregister_sink("s1", second)
            output.speak("s1", "two")
            await output.drain()
            await output.stop()

        asyncio.run(run())
        assert received == [("second", b"audio:one"), ("first", b"audio:two")]

    def test_synthesis_carries_voice_tone(self):
        async def run(model):
            fake = FakeOpenAI()
            output = QueuedSpeechOutput(fake, model=model)
            await output._synthesize("hello")
            return fake.audio.speech.calls[0]

        call = asyncio.run(run("gpt-4o-mini-tts"))
        assert call["speed"] == SPEECH_SPEED == 0.9
        assert call["instructions"] == VOICE_INSTRUCTIONS
        assert "Indian" in call["instructions"]

        legacy = asyncio.run(run("tts-1"))
        assert legacy["speed"] == 0.9
        assert "instructions" not in legacy

    def test_builder_selects_variant(self):
        assert isinstance(build_speech_output(None), UnavailableSpeechOutput)
        assert isinstance(build_speech_output(FakeOpenAI()), QueuedSpeechOutput)


class TestSpeechInput:

    def test_builder_selects_variant(self):
        assert isinstance(build_speech_input(None), UnavailableSpeechInput)
        assert build_speech_input(None).available is False
        assert isinstance(build_speech_input(FakeOpenAI()), TranscribingSpeechInput)

    def test_transcribe_returns_trimmed_text(self):
        fake = FakeOpenAI(transcript="  hey niva hello  \n")
        transcriber = DictationTranscriber(fake)
        audio_b64 = base64.b64encode(b"\x00\x01").decode("ascii")
        assert asyncio.run(transcriber.transcribe(audio_b64, "audio/webm;codecs=opus")) == "hey niva hello"
        assert fake.audio.transcriptions.calls[0]["file"].name == "dictation.webm"

    def test_unknown_mime_type_is_rejected(self):
        with pytest.raises(ValueError):
            _filename_for_mime("video/quicktime")


class TestListeningToggle:

    def test_start_and_stop(self):
        store = SessionStore()
        session_id = store.create().session_id
        speech_input = TranscribingSpeechInput(FakeOpenAI())
        toggle = ListeningToggle(speech_input, store, session_id)

        async def run():
            assert toggle.state is ListeningState.IDLE
            assert await toggle.start() is ListeningState.LISTENING
            assert session_id in speech_input.active
            assert store.get(session_id).is_listening is True
            # Redundant transitions are no-ops.
            assert await toggle.start() is ListeningState.LISTENING
            assert await toggle.stop() is ListeningState.IDLE
            assert await toggle.stop() is ListeningState.IDLE

        asyncio.run(run())
        assert session_id not in speech_input.active
        assert store.get(session_id).is_listening is False


class FakeWebSocket:
    def __init__(self):
        self.sent = []

    async def send_text(self, text):
        self.sent.append(text)


class TestSocketSinks:

    def test_closing_one_socket_keeps_audio_for_the_other(self):
        store = SessionStore()
        session_id = store.create().session_id
        fake = FakeOpenAI()
        conversation = ConversationService(store, CompletionClient(fake), spoken_delay=0)
        speech_input = TranscribingSpeechInput(fake)
        speech_output = QueuedSpeechOutput(fake)
        first_ws = FakeWebSocket()
        second_ws = FakeWebSocket()
        first = RealtimeSessionHandler(first_ws, session_id, conversation, speech_input, speech_output)
        second = RealtimeSessionHandler(second_ws, session_id, conversation, speech_input, speech_output)

        async def run():
            first.open()
            second.open()
            await speech_output.start()
            await first.close()
            assert speech_output.active_sink(session_id) is not None
            speech_output.speak(session_id, "hello")
            await speech_output.drain()
            await speech_output.stop()

        asyncio.run(run())
        assert first_ws.sent == []
        assert len(second_ws.sent) == 1
        assert '"speech.audio"' in second_ws.sent[0]
