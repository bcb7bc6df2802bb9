"""Request validation and voice settings resolution."""

import logging
from collections.abc import Awaitable, Callable

from .errors import ValidationError
from .models import SynthesisRequest, Voice, VoiceSettings

logger = logging.getLogger(__name__)

MAX_TEXT_LENGTH = 5000

DefaultSettingsFetcher = Callable[[], Awaitable[VoiceSettings]]


def validate_text(text: str) -> str:
    """Check text against the service limits.

    Args:
        text: Text to synthesize

    Returns:
        The text, unchanged

    Raises:
        ValidationError: If text is not a string, is empty, or is longer
            than MAX_TEXT_LENGTH
    """
    if not isinstance(text, str):
        raise ValidationError(f"Text must be a string, got {type(text).__name__}")
    if not text.strip():
        raise ValidationError("Text cannot be empty")
    if len(text) > MAX_TEXT_LENGTH:
        raise ValidationError(
            f"Text cannot exceed {MAX_TEXT_LENGTH} characters, got {len(text)}"
        )
    return text


def as_voice(voice: Voice | str) -> Voice:
    """Accept either a Voice or a bare voice ID."""
    if isinstance(voice, Voice):
        return voice
    try:
        return Voice(voice_id=voice)
    except ValueError as e:
        raise ValidationError(str(e)) from e


def requested_settings(
    override: VoiceSettings | None, voice: Voice
) -> VoiceSettings | None:
    """Return the settings known without I/O, or None if only the service knows.

    This is what the caller asked for, and what the cache key is built from.
    """
    return override if override is not None else voice.settings


async def resolve_voice_settings(
    override: VoiceSettings | None,
    voice: Voice,
    fetch_default: DefaultSettingsFetcher,
) -> VoiceSettings:
    """Return the first available settings in precedence order.

    Order: explicit override, the voice's stored settings, then the
    service-wide default. Only the last tier performs I/O.
    """
    if override is not None:
        logger.debug("Using explicit voice settings override")
        return override
    if voice.settings is not None:
        logger.debug(f"Using stored settings for voice {voice.voice_id}")
        return voice.settings
    logger.debug("No settings supplied, fetching service default")
    return await fetch_default()


async def build_request(
    text: str,
    voice: Voice | str,
    override: VoiceSettings | None,
    fetch_default: DefaultSettingsFetcher,
) -> SynthesisRequest:
    """Validate input and resolve effective settings into a request.

    Raises:
        ValidationError: If text or voice are invalid
    """
    validate_text(text)
    voice = as_voice(voice)
    settings = await resolve_voice_settings(override, voice, fetch_default)
    return SynthesisRequest(
        text=text, voice_id=voice.voice_id, voice_settings=settings
    )
