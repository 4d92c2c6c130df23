"""
Model module for healthguide package.

Contains the provider calls: Sunbird translation and ElevenLabs speech
synthesis, plus decoding of the translation response.
"""

import logging
from typing import Any, Dict, Optional, Sequence, Tuple

import httpx

from .catalog import SOURCE_LANGUAGE
from .errors import MissingTranslationError, ProviderError

logger = logging.getLogger(__name__)

# ----------------------------
# Constants
# ----------------------------
# Ordered candidates for the translated text; first non-empty match wins.
TRANSLATION_FIELDS: Sequence[Tuple[str, ...]] = (
    ("output", "translated_text"),
    ("text",),
    ("translation",),
    ("result",),
)

VOICE_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.0,
    "use_speaker_boost": True,
}


# ----------------------------
# Translation
# ----------------------------
def _lookup(payload: Any, path: Tuple[str, ...]) -> Any:
    node = payload
    for key in path:
        if not isinstance(node, dict):
            return None
        node = node.get(key)
    return node


def extract_translation(payload: Any, fields: Sequence[Tuple[str, ...]] = TRANSLATION_FIELDS) -> str:
    """
    Pull the translated text out of a provider response.

    Args:
        payload: Decoded JSON body
        fields: Ordered key paths to probe

    Returns:
        The first non-empty string found

    Raises:
        MissingTranslationError: If none of the fields holds text
    """
    for path in fields:
        value = _lookup(payload, path)
        if isinstance(value, str) and value:
            return value
    raise MissingTranslationError()


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        body = {}
    message = body.get("message") if isinstance(body, dict) else None
    return message or response.reason_phrase


async def request_translation(
    client: httpx.AsyncClient,
    url: str,
    token: str,
    target_language: str,
    text: str,
) -> str:
    """
    Translate English text with the Sunbird NLLB endpoint.

    Args:
        client: Shared HTTP client
        url: Translation endpoint
        token: Bearer token
        target_language: Target language code (e.g. 'lug')
        text: English source text

    Returns:
        Translated text

    Raises:
        ProviderError: On a non-success HTTP status
        MissingTranslationError: If the response carries no translation
        httpx.HTTPError: On transport failures
    """
    response = await client.post(
        url,
        headers={
            "accept": "application/json",
            "Content-Type": "application/json",
            "Authorization": f"Bearer {token}",
        },
        json={
            "source_language": SOURCE_LANGUAGE,
            "target_language": target_language,
            "text": text,
        },
    )
    if not response.is_success:
        raise ProviderError("Translation", response.status_code, _error_message(response))

    try:
        data = response.json()
    except ValueError:
        raise MissingTranslationError() from None
    return extract_translation(data)


# ----------------------------
# Speech synthesis
# ----------------------------
async def synthesize_speech(
    client: httpx.AsyncClient,
    url: str,
    api_key: str,
    text: str,
    voice_id: str,
    model_id: str,
    voice_settings: Optional[Dict[str, Any]] = None,
) -> bytes:
    """
    Synthesize text to speech using the ElevenLabs API.

    Args:
        client: Shared HTTP client
        url: Base text-to-speech endpoint (voice id is appended)
        api_key: ElevenLabs API key
        text: Text to synthesize
        voice_id: ElevenLabs voice identifier
        model_id: Synthesis model
        voice_settings: Overrides for the fixed voice settings

    Returns:
        Raw audio bytes (MPEG)
    """
    response = await client.post(
        f"{url.rstrip('/')}/{voice_id}",
        headers={
            "Accept": "audio/mpeg",
            "Content-Type": "application/json",
            "xi-api-key": api_key,
        },
        json={
            "text": text,
            "model_id": model_id,
            "voice_settings": voice_settings or VOICE_SETTINGS,
        },
    )
    if not response.is_success:
        raise ProviderError("ElevenLabs", response.status_code, response.text)

    logger.debug("Received %d bytes of audio for voice %s", len(response.content), voice_id)
    return response.content
