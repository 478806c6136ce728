"""Shared fakes for the OpenAI client and an app factory for route tests."""

import asyncio
from types import SimpleNamespace

import pytest


class FakeResponses:
    """Stands in for `AsyncOpenAI.responses`."""

    def __init__(self, text="Hi bestie! 😊", error=None, delays=None):
        self.text = text
        self.error = error
        self.delays = list(delays or [])
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.delays:
            await asyncio.sleep(self.delays.pop(0))
        if self.error is not None:
            raise self.error
        text = self.text(kwargs["input"]) if callable(self.text) else self.text
        return SimpleNamespace(output_text=text)


class FakeSpeech:
    def __init__(self):
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(content=f"audio:{kwargs['input']}".encode("utf-8"))


class FakeTranscriptions:
    def __init__(self, text="hey niva what is a stack", error=None):
        self.text = text
        self.error = error
        self.calls = []

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self.error is not None:
            raise self.error
        return self.text


class FakeOpenAI:
    def __init__(self, text="Hi bestie! 😊", error=None, delays=None, transcript="hey niva what is a stack",
                 transcript_error=None):
        self.responses = FakeResponses(text=text, error=error, delays=delays)
        self.audio = SimpleNamespace(
            speech=FakeSpeech(),
            transcriptions=FakeTranscriptions(transcript, error=transcript_error),
        )


@pytest.fixture
def fake_openai():
    return FakeOpenAI()


@pytest.fixture
def make_app():
    """Build an app whose state is pre-wired before the lifespan runs."""
    from main import create_app
    from services.chat.completion_client import CompletionClient

    def _make(openai_client=None, completion_openai=None):
        app = create_app()
        app.state.openai_client = openai_client
        if completion_openai is not None:
            app.state.completion_client = CompletionClient(completion_openai)
        return app

    return _make
