"""
Error types and classification for healthguide package.

Every failure the orchestrators catch is reduced to an ErrorKind and one
user-facing message; the detailed exception is only logged.
"""

from enum import Enum
from typing import Optional, Tuple

import regex as re


class HealthGuideError(Exception):
    """Base class for all healthguide errors."""


class ConfigError(HealthGuideError):
    """Invalid configuration value."""


class ValidationError(HealthGuideError):
    """Input rejected before any network activity."""


class ProviderError(HealthGuideError):
    """Non-success HTTP response from a translation or speech provider."""

    def __init__(self, provider: str, status_code: int, detail: str = ""):
        self.provider = provider
        self.status_code = status_code
        self.detail = detail
        super().__init__(f"{provider} API error ({status_code}): {detail}")


class MissingTranslationError(HealthGuideError):
    """Provider answered successfully but no translated text was found."""

    def __init__(self, message: str = "No translation received from API"):
        super().__init__(message)


class PlaybackError(HealthGuideError):
    """Audio playback failed after it was started."""


class PlaybackUnavailableError(PlaybackError):
    """No usable audio player on this system."""


class SpeechUnavailableError(HealthGuideError):
    """Local speech synthesis is not available on this system."""


class ErrorKind(str, Enum):
    AUTH = "auth"
    RATE_LIMITED = "rate_limited"
    QUOTA = "quota"
    CONNECTIVITY = "connectivity"
    PLAYBACK = "playback"
    UNAVAILABLE = "unavailable"
    VALIDATION = "validation"


# ----------------------------
# User-facing messages
# ----------------------------
MSG_SELECTION_REQUIRED = "Please select both a language and a health topic"
MSG_NO_TEXT = "No text to convert to speech"
MSG_SPEECH_NOT_CONFIGURED = (
    "ElevenLabs API key not configured. This is a demo - in production, "
    "configure your API key to enable text-to-speech."
)

MSG_TRANSLATION_AUTH = "Authentication failed. Please check the API credentials."
MSG_TRANSLATION_RATE_LIMIT = "Too many requests. Please wait a moment and try again."
MSG_TRANSLATION_FAILED = (
    "Translation failed. Please check your internet connection and try again."
)

MSG_SPEECH_AUTH = "Invalid ElevenLabs API key. Please check your credentials."
MSG_SPEECH_RATE_LIMIT = "Too many requests. Please wait and try again."
MSG_SPEECH_QUOTA = "ElevenLabs quota exceeded. Please try again later."
MSG_SPEECH_FAILED = "Failed to generate audio. Please try again."
MSG_PLAYBACK_FAILED = "Failed to play audio. Please try again."

MSG_LOCAL_UNAVAILABLE = "Speech synthesis is not available on this system."
MSG_LOCAL_FAILED = "Speech playback failed. Please try again."

_QUOTA_PATTERN = re.compile(r"quota|limit", re.IGNORECASE)


def _status_of(exc: BaseException) -> Optional[int]:
    return exc.status_code if isinstance(exc, ProviderError) else None


def classify_translation_error(exc: BaseException) -> Tuple[ErrorKind, str]:
    """Map a translation failure to (kind, user message)."""
    status = _status_of(exc)
    if status in (401, 403):
        return ErrorKind.AUTH, MSG_TRANSLATION_AUTH
    if status == 429:
        return ErrorKind.RATE_LIMITED, MSG_TRANSLATION_RATE_LIMIT
    return ErrorKind.CONNECTIVITY, MSG_TRANSLATION_FAILED


def classify_speech_error(exc: BaseException) -> Tuple[ErrorKind, str]:
    """Map a remote speech failure to (kind, user message).

    Order matters: an explicit 429 wins over a quota mention in the body,
    since rate-limit responses usually mention a "limit" as well.
    """
    if isinstance(exc, PlaybackError):
        return ErrorKind.PLAYBACK, MSG_PLAYBACK_FAILED
    status = _status_of(exc)
    if status == 401:
        return ErrorKind.AUTH, MSG_SPEECH_AUTH
    if status == 429:
        return ErrorKind.RATE_LIMITED, MSG_SPEECH_RATE_LIMIT
    if isinstance(exc, ProviderError) and _QUOTA_PATTERN.search(exc.detail or ""):
        return ErrorKind.QUOTA, MSG_SPEECH_QUOTA
    return ErrorKind.CONNECTIVITY, MSG_SPEECH_FAILED


def classify_local_speech_error(exc: BaseException) -> Tuple[ErrorKind, str]:
    """Map a local synthesis failure to (kind, user message)."""
    if isinstance(exc, SpeechUnavailableError):
        return ErrorKind.UNAVAILABLE, MSG_LOCAL_UNAVAILABLE
    return ErrorKind.PLAYBACK, MSG_LOCAL_FAILED
