"""Tests for GuideState transitions and the HealthGuide component."""

import httpx
import pytest

from healthguide.config import Settings
from healthguide.errors import MSG_SPEECH_NOT_CONFIGURED, ValidationError
from healthguide.orchestrator import (
    GuideState,
    HealthGuide,
    LocalSpeechOrchestrator,
    RemoteSpeechOrchestrator,
)

from .conftest import FakeBackend


class TestGuideState:
    def test_initial(self):
        state = GuideState()
        assert state.selected_language == ""
        assert state.translated_text == ""
        assert state.error is None

    def test_selection_keeps_translation(self):
        state = GuideState(translated_text="done")
        state.select_language("lug")
        state.select_topic("hygiene")
        assert state.translated_text == "done"
        assert (state.selected_language, state.selected_topic) == ("lug", "hygiene")

    def test_unknown_selection(self):
        state = GuideState()
        with pytest.raises(ValidationError):
            state.select_language("en")
        with pytest.raises(ValidationError):
            state.select_topic("flu")
        assert state.selected_language == ""

    def test_dismiss_error_only_clears_error(self):
        state = GuideState(selected_language="lug", selected_topic="malaria", translated_text="t", error="bad")
        state.dismiss_error()
        assert state.error is None
        assert state.translated_text == "t"
        assert state.selected_language == "lug"
        assert state.selected_topic == "malaria"


@pytest.fixture
async def guide(demo_settings, http_handler, make_client):
    handler = http_handler()
    guide = HealthGuide(demo_settings, client=make_client(handler), backend=FakeBackend())
    guide.handler = handler
    yield guide
    await guide.aclose()


class TestHealthGuide:
    async def test_demo_flow(self, guide):
        guide.select_language("lug")
        guide.select_topic("malaria")

        text = await guide.translate()

        assert text.startswith("[Demo Translation to Luganda]")
        assert guide.handler.requests == []

    async def test_speak_without_key(self, guide):
        guide.select_language("lug")
        guide.select_topic("malaria")
        await guide.translate()

        await guide.speak()

        assert guide.state.error == MSG_SPEECH_NOT_CONFIGURED
        text = guide.state.translated_text
        guide.dismiss_error()
        assert guide.state.error is None
        assert guide.state.translated_text == text

    async def test_toggle_audio(self, live_settings, http_handler, make_client):
        backend = FakeBackend()
        client = make_client(http_handler(httpx.Response(200, content=b"mp3")))
        async with HealthGuide(live_settings, client=client, backend=backend) as guide:
            guide.state.translated_text = "Omusujja"
            guide.state.selected_language = "lug"

            await guide.toggle_audio()
            assert guide.state.is_playing
            assert guide.audio_label == "Stop Audio"

            await guide.toggle_audio()
            assert not guide.state.is_playing
            assert guide.audio_label == "Listen with AI Voice"
        assert backend.closed

    def test_speech_mode_selects_orchestrator(self, http_handler):
        client = httpx.AsyncClient(transport=httpx.MockTransport(http_handler()))
        remote = HealthGuide(Settings(), client=client, backend=FakeBackend())
        local = HealthGuide(Settings(speech_mode="local"), client=client, backend=FakeBackend())
        assert isinstance(remote.speech, RemoteSpeechOrchestrator)
        assert isinstance(local.speech, LocalSpeechOrchestrator)

    async def test_owned_client_closed(self, demo_settings):
        guide = HealthGuide(demo_settings, backend=FakeBackend())
        await guide.aclose()
        assert guide.client.is_closed

    async def test_stop_when_idle(self, guide):
        guide.stop()
        assert not guide.state.is_playing


class TestLabels:
    async def test_translate_label(self, guide):
        assert guide.translate_label == "Translate to Selected Language"
        assert not guide.can_translate
        guide.select_language("nyn")
        assert guide.translate_label == "Translate to Runyankole"
        guide.select_topic("nutrition")
        assert guide.can_translate
        guide.state.is_translating = True
        assert guide.translate_label == "Translating..."
        assert not guide.can_translate

    async def test_audio_label(self, guide):
        assert guide.audio_label == "Listen with AI Voice"
        guide.state.is_generating_audio = True
        assert guide.audio_label == "Generating Audio..."
