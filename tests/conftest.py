"""Shared fixtures for healthguide tests.

Provides settings builders, an in-memory speech backend and helpers for
faking provider HTTP responses with httpx.MockTransport.
"""

import json
from typing import Any, Callable, List, Optional

import httpx
import pytest

from healthguide.config import Settings
from healthguide.orchestrator import GuideState
from healthguide.playback import SpeechBackend


# =============================================================================
# Settings
# =============================================================================


@pytest.fixture
def demo_settings() -> Settings:
    """No credentials configured, no artificial delay."""
    return Settings(demo_delay=0.0)


@pytest.fixture
def live_settings() -> Settings:
    """Both credentials configured."""
    return Settings(
        translation_token="test-token",
        speech_api_key="test-speech-key",
        demo_delay=0.0,
    )


@pytest.fixture
def state() -> GuideState:
    return GuideState()


# =============================================================================
# HTTP
# =============================================================================


class RecordingHandler:
    """MockTransport handler that records requests and replays one response."""

    def __init__(self, response: Optional[httpx.Response] = None, exc: Optional[Exception] = None):
        self.response = response
        self.exc = exc
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.exc is not None:
            raise self.exc
        return self.response

    @property
    def last_json(self) -> Any:
        return json.loads(self.requests[-1].content)


@pytest.fixture
def http_handler() -> Callable[..., RecordingHandler]:
    return RecordingHandler


@pytest.fixture
async def make_client():
    clients: List[httpx.AsyncClient] = []

    def _make(handler: RecordingHandler) -> httpx.AsyncClient:
        client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
        clients.append(client)
        return client

    yield _make
    for client in clients:
        await client.aclose()


# =============================================================================
# Speech backend
# =============================================================================


class FakeBackend(SpeechBackend):
    """In-memory backend tracking sessions; tests drive end/error by hand."""

    def __init__(self, available: bool = True, fail_start: Optional[Exception] = None):
        super().__init__()
        self.available = available
        self.fail_start = fail_start
        self.started: List[Any] = []
        self.stop_calls = 0
        self.max_active = 0
        self._active = 0
        self.closed = False

    @property
    def is_active(self) -> bool:
        return self._active > 0

    def ensure_available(self):
        if not self.available:
            from healthguide.errors import SpeechUnavailableError

            raise SpeechUnavailableError("no speech engine")

    async def start(self, payload: Any) -> None:
        if self.fail_start is not None:
            raise self.fail_start
        self._active += 1
        self.max_active = max(self.max_active, self._active)
        self.started.append(payload)

    def stop(self) -> None:
        self.stop_calls += 1
        self._active = 0

    def close(self) -> None:
        self.closed = True
        self.stop()

    def finish(self) -> None:
        self._active = 0
        self._emit_end()

    def fail(self, exc: BaseException) -> None:
        self._active = 0
        self._emit_error(exc)


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()
