import inspect
import logging
import os
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request, HTTPException
from fastapi.responses import FileResponse
from fastapi.staticfiles import StaticFiles
from openai import AsyncOpenAI

from routes.completion_route import router as completion_router
from routes.mood_route import router as mood_router
from routes.realtime_ws import router as realtime_router
from routes.session_route import router as session_router
from services.chat.ambient import AmbientContextRefresher
from services.chat.completion_client import CompletionClient
from services.chat.conversation import ConversationService
from services.chat.session_store import SessionStore
from services.speech.speech_input import build_speech_input
from services.speech.speech_output import build_speech_output

BASE_DIR = Path(__file__).resolve().parent
PUBLIC_DIR = BASE_DIR / "public"

from dotenv import load_dotenv

load_dotenv()  # Load environment variables from .env file if present

LOGGER = logging.getLogger(__name__)


def build_openai_client():
    """Return an AsyncOpenAI client, or None when OPENAI_API_KEY is not set."""
    if not os.getenv("OPENAI_API_KEY"):
        LOGGER.warning("OPENAI_API_KEY is not set; completions and speech are disabled")
        return None
    try:
        return AsyncOpenAI()
    except Exception as exc:
        raise RuntimeError("Failed to initialize OpenAI Async client") from exc


async def _close_client(client) -> None:
    aclose = getattr(client, "aclose", None) or getattr(client, "close", None)
    if aclose is None:
        return
    try:
        if inspect.iscoroutinefunction(aclose):
            await aclose()
        else:
            result = aclose()
            if inspect.isawaitable(result):
                await result
    except Exception as exc:
        LOGGER.warning("Error while closing the OpenAI client: %s", exc)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Lifespan manager that wires the conversation pipeline onto `app.state`:
      - the OpenAI async client (None when no API key is configured)
      - the completion client and the speech adapters built on it
      - the session store, conversation service, and ambient refresher
    Anything already placed on `app.state` before startup is kept, so tests can
    inject fakes.
    """
    state = app.state
    if not hasattr(state, "openai_client"):
        state.openai_client = build_openai_client()
    client = state.openai_client

    if not hasattr(state, "completion_client"):
        state.completion_client = CompletionClient(client)
    if not hasattr(state, "speech_input"):
        state.speech_input = build_speech_input(client)
    if not hasattr(state, "speech_output"):
        state.speech_output = build_speech_output(client)
    if not hasattr(state, "session_store"):
        state.session_store = SessionStore()
    if not hasattr(state, "conversation"):
        state.conversation = ConversationService(
            state.session_store, state.completion_client, state.speech_output
        )
    if not hasattr(state, "ambient_refresher"):
        state.ambient_refresher = AmbientContextRefresher(state.session_store)

    await state.speech_output.start()
    await state.ambient_refresher.start()

    try:
        yield
    finally:
        await state.ambient_refresher.stop()
        await state.speech_output.stop()
        if client is not None:
            await _close_client(client)


def create_app() -> FastAPI:
    """
    Create and configure the FastAPI application instance.
    """
    app = FastAPI(lifespan=lifespan)

    # Serve static assets from the public directory, if it exists.
    if PUBLIC_DIR.exists():
        app.mount("/public", StaticFiles(directory=PUBLIC_DIR), name="public")

    @app.get("/", include_in_schema=False)
    async def serve_index():
        """
        Serve the frontend index page from the public directory.
        """
        index_path = PUBLIC_DIR / "index.html"
        if not index_path.exists():
            raise HTTPException(status_code=404, detail="Frontend not found")
        return FileResponse(index_path)

    @app.get("/health")
    async def health(request: Request):
        """
        Report which backend capabilities are available.
        """
        state = request.app.state
        return {
            "ok": True,
            "openai_available": getattr(state, "openai_client", None) is not None,
            "speech_input": getattr(getattr(state, "speech_input", None), "available", False),
            "speech_output": getattr(getattr(state, "speech_output", None), "available", False),
        }

    # Register application routers
    app.include_router(completion_router)
    app.include_router(mood_router)
    app.include_router(session_router)
    app.include_router(realtime_router)

    return app


app = create_app()
