"""Tests for the remote and local speech orchestrators."""

import httpx
import pytest

from healthguide.catalog import DEFAULT_VOICE
from healthguide.config import SPEECH_KEY_PLACEHOLDER, Settings
from healthguide.errors import (
    MSG_LOCAL_FAILED,
    MSG_LOCAL_UNAVAILABLE,
    MSG_NO_TEXT,
    MSG_PLAYBACK_FAILED,
    MSG_SPEECH_AUTH,
    MSG_SPEECH_FAILED,
    MSG_SPEECH_NOT_CONFIGURED,
    MSG_SPEECH_QUOTA,
    MSG_SPEECH_RATE_LIMIT,
    PlaybackError,
    PlaybackUnavailableError,
)
from healthguide.orchestrator import LocalSpeechOrchestrator, RemoteSpeechOrchestrator, SpeechOrchestrator
from healthguide.playback import Utterance

from .conftest import FakeBackend


def _remote(state, settings, client, backend):
    return RemoteSpeechOrchestrator(state, settings, client, backend)


# ============================================================================
# Remote synthesis + playback
# ============================================================================


class TestRemotePreconditions:
    async def test_empty_text(self, state, live_settings, http_handler, make_client, backend):
        handler = http_handler()
        orch = _remote(state, live_settings, make_client(handler), backend)

        await orch.speak("", "lug")

        assert state.error == MSG_NO_TEXT
        assert handler.requests == []

    @pytest.mark.parametrize("key", [None, "", SPEECH_KEY_PLACEHOLDER])
    async def test_not_configured(self, state, http_handler, make_client, backend, key):
        handler = http_handler()
        orch = _remote(state, Settings(speech_api_key=key), make_client(handler), backend)

        await orch.speak("Hello", "lug")

        assert state.error == MSG_SPEECH_NOT_CONFIGURED
        assert handler.requests == []
        assert backend.started == []
        assert state.is_generating_audio is False


class TestRemotePlayback:
    async def test_plays_audio(self, state, live_settings, http_handler, make_client, backend):
        handler = http_handler(httpx.Response(200, content=b"mp3"))
        state.error = "stale"
        orch = _remote(state, live_settings, make_client(handler), backend)

        await orch.speak("Hello", "nyn")

        assert backend.started == [b"mp3"]
        assert state.is_playing is True
        assert state.is_generating_audio is False
        assert state.error is None
        assert str(handler.requests[0].url).endswith("/EXAVITQu4vr4xnSDxMaL")
        assert handler.last_json["model_id"] == "eleven_multilingual_v2"

    async def test_unmapped_language_uses_default_voice(self, state, live_settings, http_handler, make_client, backend):
        handler = http_handler(httpx.Response(200, content=b"mp3"))
        orch = _remote(state, live_settings, make_client(handler), backend)

        await orch.speak("Hello", "")

        assert str(handler.requests[0].url).endswith("/" + DEFAULT_VOICE)

    async def test_new_session_stops_previous(self, state, live_settings, http_handler, make_client, backend):
        handler = http_handler(httpx.Response(200, content=b"mp3"))
        orch = _remote(state, live_settings, make_client(handler), backend)

        await orch.speak("one", "lug")
        stops_before = backend.stop_calls
        await orch.speak("two", "lug")

        assert backend.stop_calls == stops_before + 1
        assert backend.max_active == 1
        assert len(backend.started) == 2

    async def test_end_clears_playing(self, state, live_settings, http_handler, make_client, backend):
        orch = _remote(state, live_settings, make_client(http_handler(httpx.Response(200, content=b"a"))), backend)
        await orch.speak("Hello", "lug")

        backend.finish()

        assert state.is_playing is False
        assert state.error is None

    async def test_playback_error_reported(self, state, live_settings, http_handler, make_client, backend):
        orch = _remote(state, live_settings, make_client(http_handler(httpx.Response(200, content=b"a"))), backend)
        await orch.speak("Hello", "lug")

        backend.fail(PlaybackError("player exited 1"))

        assert state.is_playing is False
        assert state.error == MSG_PLAYBACK_FAILED

    async def test_no_player(self, state, live_settings, http_handler, make_client):
        backend = FakeBackend(fail_start=PlaybackUnavailableError("no player"))
        orch = _remote(state, live_settings, make_client(http_handler(httpx.Response(200, content=b"a"))), backend)

        await orch.speak("Hello", "lug")

        assert state.error == MSG_PLAYBACK_FAILED
        assert state.is_playing is False

    @pytest.mark.parametrize(
        "status,body,message",
        [
            (401, "Unauthorized", MSG_SPEECH_AUTH),
            (429, "too_many_concurrent_requests", MSG_SPEECH_RATE_LIMIT),
            (400, '{"detail":{"status":"quota_exceeded"}}', MSG_SPEECH_QUOTA),
            (500, "internal", MSG_SPEECH_FAILED),
        ],
    )
    async def test_provider_errors(self, state, live_settings, http_handler, make_client, backend, status, body, message):
        orch = _remote(state, live_settings, make_client(http_handler(httpx.Response(status, text=body))), backend)

        await orch.speak("Hello", "lug")

        assert state.error == message
        assert state.is_playing is False
        assert state.is_generating_audio is False
        assert backend.started == []

    async def test_network_error(self, state, live_settings, http_handler, make_client, backend):
        orch = _remote(state, live_settings, make_client(http_handler(exc=httpx.ConnectError("down"))), backend)

        await orch.speak("Hello", "lug")

        assert state.error == MSG_SPEECH_FAILED


class TestStop:
    async def test_stop_without_session(self, state, live_settings, http_handler, make_client, backend):
        orch = _remote(state, live_settings, make_client(http_handler()), backend)

        orch.stop()
        orch.stop()

        assert state.is_playing is False

    async def test_stop_halts_playback(self, state, live_settings, http_handler, make_client, backend):
        orch = _remote(state, live_settings, make_client(http_handler(httpx.Response(200, content=b"a"))), backend)
        await orch.speak("Hello", "lug")

        orch.stop()

        assert state.is_playing is False
        assert backend.is_active is False

    def test_base_needs_variant(self, state, backend):
        with pytest.raises(TypeError):
            SpeechOrchestrator(state, Settings(), backend)


# ============================================================================
# Local synthesis
# ============================================================================


class TestLocalSpeech:
    async def test_speaks_with_locale_and_rate(self, state, backend):
        settings = Settings(speech_locales={"lug": "sw-KE"}, speech_rate=0.8)
        orch = LocalSpeechOrchestrator(state, settings, backend)

        await orch.speak("Habari", "lug")

        assert backend.started == [Utterance(text="Habari", locale="sw-KE", rate=0.8)]
        assert state.is_playing is True

    async def test_unmapped_language_uses_default_locale(self, state, backend):
        orch = LocalSpeechOrchestrator(state, Settings(default_locale="en-US"), backend)

        await orch.speak("Hello", "xx")

        assert backend.started[0].locale == "en-US"

    async def test_unavailable(self, state):
        backend = FakeBackend(available=False)
        orch = LocalSpeechOrchestrator(state, Settings(), backend)

        await orch.speak("Hello", "lug")

        assert state.error == MSG_LOCAL_UNAVAILABLE
        assert backend.started == []

    async def test_empty_text(self, state, backend):
        orch = LocalSpeechOrchestrator(state, Settings(), backend)

        await orch.speak("", "lug")

        assert state.error == MSG_NO_TEXT

    async def test_cancels_current_utterance(self, state, backend):
        orch = LocalSpeechOrchestrator(state, Settings(), backend)

        await orch.speak("one", "lug")
        await orch.speak("two", "lug")

        assert backend.max_active == 1
        assert [u.text for u in backend.started] == ["one", "two"]

    async def test_error_callback(self, state, backend):
        orch = LocalSpeechOrchestrator(state, Settings(), backend)
        await orch.speak("Hello", "lug")

        backend.fail(RuntimeError("engine crashed"))

        assert state.is_playing is False
        assert state.error == MSG_LOCAL_FAILED

    async def test_end_callback(self, state, backend):
        orch = LocalSpeechOrchestrator(state, Settings(), backend)
        await orch.speak("Hello", "lug")

        backend.finish()

        assert state.is_playing is False

    async def test_stop_is_idempotent(self, state, backend):
        orch = LocalSpeechOrchestrator(state, Settings(), backend)

        orch.stop()
        await orch.speak("Hello", "lug")
        orch.stop()
        orch.stop()

        assert state.is_playing is False
        assert backend.is_active is False
