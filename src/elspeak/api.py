"""High-level API for elspeak library usage."""

from collections.abc import AsyncIterator
from pathlib import Path

from .tts.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, TTSClient
from .tts.errors import NotSupportedError
from .tts.models import Voice, VoiceSettings
from .tts.pipeline import TTSPipeline
from .tts.request import validate_text


async def synthesize(
    text: str,
    voice: Voice | str,
    settings: VoiceSettings | None = None,
    save_directory: str | Path | None = None,
    api_key: str | None = None,
    base_url: str = DEFAULT_BASE_URL,
    timeout: float = DEFAULT_TIMEOUT,
    lookup_voice: bool = True,
) -> Path:
    """Synthesize text to a cached MP3 and return its path.

    Args:
        text: Text to speak (1-5000 characters)
        voice: Voice, or ElevenLabs voice ID
        settings: Optional settings overriding the voice's own
        save_directory: Cache root (defaults to the current directory)
        api_key: ElevenLabs API key (defaults to ELEVENLABS_API_KEY)
        base_url: ElevenLabs API root
        timeout: Per-request timeout in seconds
        lookup_voice: On a cache miss, fetch a bare voice ID's stored
            settings when no override is given

    Returns:
        Path to <save_directory>/ElevenLabs/TextToSpeech/<key>.mp3

    Raises:
        ValidationError: If text is empty or too long
        TTSAuthError: If API key is not configured
        TTSAPIError: If a voice or settings lookup fails
        SynthesisError: If the service rejects the synthesis request
        OSError: If the artifact cannot be written
    """
    validate_text(text)

    async with TTSClient(api_key=api_key, base_url=base_url, timeout=timeout) as client:
        pipeline = TTSPipeline(
            client, save_directory=save_directory, lookup_voice=lookup_voice
        )
        return await pipeline.synthesize(text, voice, settings)


async def stream_synthesize(
    text: str,
    voice: Voice | str,
    settings: VoiceSettings | None = None,
) -> AsyncIterator[bytes]:
    """Stream synthesized audio. Not supported yet.

    Raises:
        NotSupportedError: Always
    """
    raise NotSupportedError("Streaming synthesis is not supported")
