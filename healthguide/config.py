"""
Configuration module for healthguide package.

Settings are read from the environment (populated from .env by the CLI).
Missing or placeholder credentials switch the matching feature into demo
mode instead of failing.
"""

import os
from dataclasses import dataclass, field, replace
from types import MappingProxyType
from typing import Dict, Mapping, Optional

from .catalog import DEFAULT_LOCALE, SPEECH_LOCALES
from .errors import ConfigError

TRANSLATION_TOKEN_PLACEHOLDER = "your-sunbird-api-token-here"
SPEECH_KEY_PLACEHOLDER = "your-elevenlabs-api-key-here"

DEFAULT_TRANSLATE_URL = "https://api.sunbird.ai/tasks/nllb_translate"
DEFAULT_TTS_URL = "https://api.elevenlabs.io/v1/text-to-speech"
DEFAULT_TTS_MODEL = "eleven_multilingual_v2"

SPEECH_MODES = ["remote", "local"]
LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _configured(value: Optional[str], placeholder: str) -> bool:
    return bool(value) and value != placeholder


def _float_env(env: Mapping[str, str], name: str, default: float) -> float:
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = float(raw)
    except ValueError:
        raise ConfigError(f"{name} must be a number, got {raw!r}") from None
    if value < 0:
        raise ConfigError(f"{name} must not be negative, got {raw!r}")
    return value


def parse_locales(raw: str) -> Dict[str, str]:
    """Parse 'lug=sw-KE,ach=en-GB' into a mapping."""
    locales = {}
    for item in raw.split(","):
        item = item.strip()
        if not item:
            continue
        code, sep, locale = item.partition("=")
        if not sep or not code.strip() or not locale.strip():
            raise ConfigError(f"Invalid locale mapping entry: {item!r}")
        locales[code.strip()] = locale.strip()
    return locales


@dataclass(frozen=True)
class Settings:
    translation_token: Optional[str] = None
    speech_api_key: Optional[str] = None
    translate_url: str = DEFAULT_TRANSLATE_URL
    tts_url: str = DEFAULT_TTS_URL
    tts_model: str = DEFAULT_TTS_MODEL
    demo_delay: float = 2.0
    http_timeout: float = 30.0
    speech_mode: str = "remote"
    speech_rate: float = 0.8
    # read-only view, excluded from the hash
    speech_locales: Mapping[str, str] = field(default_factory=lambda: dict(SPEECH_LOCALES), hash=False)
    default_locale: str = DEFAULT_LOCALE
    log_level: str = "WARNING"

    def __post_init__(self):
        # copy so later changes to the caller's dict do not leak in
        object.__setattr__(self, "speech_locales", MappingProxyType(dict(self.speech_locales)))

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        """Build settings from environment variables."""
        env = os.environ if environ is None else environ

        speech_mode = env.get("HEALTHGUIDE_SPEECH_MODE", "remote").strip().lower()
        if speech_mode not in SPEECH_MODES:
            raise ConfigError(
                f"HEALTHGUIDE_SPEECH_MODE must be one of {SPEECH_MODES}, got {speech_mode!r}"
            )

        log_level = env.get("HEALTHGUIDE_LOG_LEVEL", "WARNING").strip().upper()
        if log_level not in LOG_LEVELS:
            raise ConfigError(f"HEALTHGUIDE_LOG_LEVEL must be one of {LOG_LEVELS}, got {log_level!r}")

        locales = dict(SPEECH_LOCALES)
        if env.get("HEALTHGUIDE_SPEECH_LOCALES"):
            locales.update(parse_locales(env["HEALTHGUIDE_SPEECH_LOCALES"]))

        return cls(
            translation_token=env.get("SUNBIRD_AUTH_TOKEN"),
            speech_api_key=env.get("ELEVENLABS_API_KEY"),
            translate_url=env.get("SUNBIRD_TRANSLATE_URL", DEFAULT_TRANSLATE_URL),
            tts_url=env.get("ELEVENLABS_TTS_URL", DEFAULT_TTS_URL),
            tts_model=env.get("ELEVENLABS_MODEL_ID", DEFAULT_TTS_MODEL),
            demo_delay=_float_env(env, "HEALTHGUIDE_DEMO_DELAY", 2.0),
            http_timeout=_float_env(env, "HEALTHGUIDE_HTTP_TIMEOUT", 30.0),
            speech_mode=speech_mode,
            speech_rate=_float_env(env, "HEALTHGUIDE_SPEECH_RATE", 0.8),
            speech_locales=locales,
            default_locale=env.get("HEALTHGUIDE_DEFAULT_LOCALE", DEFAULT_LOCALE),
            log_level=log_level,
        )

    def with_overrides(self, **changes) -> "Settings":
        """Return a copy with non-None overrides applied (used for CLI flags)."""
        return replace(self, **{k: v for k, v in changes.items() if v is not None})

    @property
    def translation_configured(self) -> bool:
        return _configured(self.translation_token, TRANSLATION_TOKEN_PLACEHOLDER)

    @property
    def speech_configured(self) -> bool:
        return _configured(self.speech_api_key, SPEECH_KEY_PLACEHOLDER)

    def locale_for(self, code: str) -> str:
        return self.speech_locales.get(code, self.default_locale)
