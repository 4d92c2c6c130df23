"""
Orchestration module for healthguide package.

Holds the UI state and the translation / speech orchestrators that drive
the provider calls. All mutation happens on the event loop thread; provider
failures end up as one message in GuideState.error and are never raised.
"""

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, Optional

import httpx

from .catalog import (
    demo_translation,
    fallback_translation,
    get_language,
    get_topic,
    language_name,
    voice_for,
)
from .config import Settings
from .errors import (
    MSG_NO_TEXT,
    MSG_PLAYBACK_FAILED,
    MSG_SELECTION_REQUIRED,
    MSG_SPEECH_NOT_CONFIGURED,
    HealthGuideError,
    ValidationError,
    classify_local_speech_error,
    classify_speech_error,
    classify_translation_error,
)
from .model import request_translation, synthesize_speech
from .playback import PlayerProcessBackend, Pyttsx3Backend, SpeechBackend, Utterance

logger = logging.getLogger(__name__)


@dataclass
class GuideState:
    selected_language: str = ""
    selected_topic: str = ""
    translated_text: str = ""
    is_translating: bool = False
    is_generating_audio: bool = False
    is_playing: bool = False
    error: Optional[str] = None

    def select_language(self, code: str) -> None:
        """Select a language; the current translation is left untouched."""
        get_language(code)
        self.selected_language = code

    def select_topic(self, key: str) -> None:
        """Select a topic; the current translation is left untouched."""
        get_topic(key)
        self.selected_topic = key

    def dismiss_error(self) -> None:
        self.error = None

    def fail(self, message: str) -> None:
        self.error = message

    def begin_translation(self) -> None:
        self.is_translating = True
        self.error = None
        self.translated_text = ""

    def finish_translation(self, text: str, error: Optional[str] = None) -> None:
        self.translated_text = text
        if error:
            self.error = error
        self.is_translating = False


# ----------------------------
# Translation
# ----------------------------
class TranslationOrchestrator:
    """Runs one translation attempt at a time, degrading to demo text on failure."""

    def __init__(
        self,
        state: GuideState,
        settings: Settings,
        client: httpx.AsyncClient,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.state = state
        self.settings = settings
        self.client = client
        self._sleep = sleep

    async def translate(self, language: str, topic: str) -> Optional[str]:
        """
        Translate a topic's English text into the given language.

        Args:
            language: Language code
            topic: Health topic key

        Returns:
            The stored text (translation or demo/fallback), or None when the
            attempt was rejected before starting.
        """
        state = self.state
        if state.is_translating:
            logger.debug("Translation already in progress; ignoring request")
            return None
        if not language or not topic:
            state.fail(MSG_SELECTION_REQUIRED)
            return None
        try:
            lang_name = get_language(language).name
            english_text = get_topic(topic).content
        except ValidationError as exc:
            state.fail(str(exc))
            return None

        state.begin_translation()
        try:
            if not self.settings.translation_configured:
                logger.info("No translation token configured; producing demo translation")
                await self._sleep(self.settings.demo_delay)
                state.finish_translation(demo_translation(lang_name, english_text))
            else:
                text = await request_translation(
                    self.client,
                    self.settings.translate_url,
                    self.settings.translation_token,
                    language,
                    english_text,
                )
                state.finish_translation(text)
        except (HealthGuideError, httpx.HTTPError) as exc:
            logger.error("Translation error: %s", exc)
            _, message = classify_translation_error(exc)
            state.finish_translation(fallback_translation(lang_name, english_text), message)
        finally:
            state.is_translating = False
        return state.translated_text


# ----------------------------
# Speech
# ----------------------------
class SpeechOrchestrator(ABC):
    """Common session handling for both speech variants."""

    def __init__(self, state: GuideState, settings: Settings, backend: SpeechBackend):
        self.state = state
        self.settings = settings
        self.backend = backend
        backend.on_end = self._on_end
        backend.on_error = self._on_error

    @abstractmethod
    async def speak(self, text: str, language_code: str) -> None:
        """Start narrating text in the given language."""

    def stop(self) -> None:
        """Halt the current session; safe to call when nothing is playing."""
        self.backend.stop()
        self.state.is_playing = False

    def close(self) -> None:
        self.backend.close()
        self.state.is_playing = False

    def _on_end(self) -> None:
        self.state.is_playing = False

    @abstractmethod
    def _on_error(self, exc: BaseException) -> None:
        """Record a playback failure reported by the backend."""


class RemoteSpeechOrchestrator(SpeechOrchestrator):
    """Synthesizes audio with ElevenLabs and plays it through the backend."""

    def __init__(
        self,
        state: GuideState,
        settings: Settings,
        client: httpx.AsyncClient,
        backend: SpeechBackend,
    ):
        super().__init__(state, settings, backend)
        self.client = client

    async def speak(self, text: str, language_code: str) -> None:
        state = self.state
        if state.is_generating_audio:
            logger.debug("Audio generation already in progress; ignoring request")
            return
        if not text:
            state.fail(MSG_NO_TEXT)
            return
        if not self.settings.speech_configured:
            state.fail(MSG_SPEECH_NOT_CONFIGURED)
            return

        state.is_generating_audio = True
        state.error = None
        try:
            if self.backend.is_active:
                logger.info("Stopping current audio before starting a new session")
            self.stop()
            audio = await synthesize_speech(
                self.client,
                self.settings.tts_url,
                self.settings.speech_api_key,
                text,
                voice_for(language_code),
                self.settings.tts_model,
            )
            await self.backend.start(audio)
            state.is_playing = True
        except (HealthGuideError, httpx.HTTPError) as exc:
            logger.error("Audio generation error: %s", exc)
            _, message = classify_speech_error(exc)
            state.is_playing = False
            state.fail(message)
        finally:
            state.is_generating_audio = False

    def _on_error(self, exc: BaseException) -> None:
        logger.error("Audio playback error: %s", exc)
        self.state.is_playing = False
        self.state.fail(MSG_PLAYBACK_FAILED)


class LocalSpeechOrchestrator(SpeechOrchestrator):
    """Speaks text with the platform's own speech engine."""

    async def speak(self, text: str, language_code: str) -> None:
        state = self.state
        if not text:
            state.fail(MSG_NO_TEXT)
            return
        try:
            self.backend.ensure_available()
            self.stop()
            utterance = Utterance(
                text=text,
                locale=self.settings.locale_for(language_code),
                rate=self.settings.speech_rate,
            )
            state.error = None
            await self.backend.start(utterance)
            state.is_playing = True
        except HealthGuideError as exc:
            logger.error("Speech synthesis error: %s", exc)
            _, message = classify_local_speech_error(exc)
            state.is_playing = False
            state.fail(message)

    def _on_error(self, exc: BaseException) -> None:
        logger.error("Speech synthesis error: %s", exc)
        _, message = classify_local_speech_error(exc)
        self.state.is_playing = False
        self.state.fail(message)


# ----------------------------
# Component
# ----------------------------
class HealthGuide:
    """
    The health guide component: one state object plus its orchestrators.

    Usage:
        async with HealthGuide(Settings.from_env()) as guide:
            guide.select_language("lug")
            guide.select_topic("malaria")
            await guide.translate()
            await guide.speak()
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        client: Optional[httpx.AsyncClient] = None,
        backend: Optional[SpeechBackend] = None,
    ):
        self.settings = settings or Settings.from_env()
        self.state = GuideState()
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=self.settings.http_timeout)
        self.translator = TranslationOrchestrator(self.state, self.settings, self.client)
        if self.settings.speech_mode == "local":
            self.speech: SpeechOrchestrator = LocalSpeechOrchestrator(
                self.state, self.settings, backend or Pyttsx3Backend()
            )
        else:
            self.speech = RemoteSpeechOrchestrator(
                self.state, self.settings, self.client, backend or PlayerProcessBackend()
            )

    async def __aenter__(self) -> "HealthGuide":
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    # Selection and error state
    def select_language(self, code: str) -> None:
        self.state.select_language(code)

    def select_topic(self, key: str) -> None:
        self.state.select_topic(key)

    def dismiss_error(self) -> None:
        self.state.dismiss_error()

    # Actions
    async def translate(self) -> Optional[str]:
        return await self.translator.translate(
            self.state.selected_language, self.state.selected_topic
        )

    async def speak(self) -> None:
        await self.speech.speak(self.state.translated_text, self.state.selected_language)

    def stop(self) -> None:
        self.speech.stop()

    async def toggle_audio(self) -> None:
        if self.state.is_playing:
            self.stop()
        else:
            await self.speak()

    async def aclose(self) -> None:
        self.speech.close()
        if self._owns_client:
            await self.client.aclose()

    # Derived labels
    @property
    def can_translate(self) -> bool:
        s = self.state
        return not s.is_translating and bool(s.selected_language) and bool(s.selected_topic)

    @property
    def translate_label(self) -> str:
        if self.state.is_translating:
            return "Translating..."
        name = language_name(self.state.selected_language) or "Selected Language"
        return f"Translate to {name}"

    @property
    def audio_label(self) -> str:
        if self.state.is_generating_audio:
            return "Generating Audio..."
        if self.state.is_playing:
            return "Stop Audio"
        return "Listen with AI Voice"
