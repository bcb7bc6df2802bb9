"""TTS (Text-to-Speech) package for elspeak.

This package provides cached text-to-speech using the ElevenLabs API.
"""

from .client import TTSClient
from .errors import (
    ArtifactExistsError,
    NotSupportedError,
    SynthesisError,
    TTSAPIError,
    TTSAuthError,
    TTSError,
    ValidationError,
)
from .models import SynthesisRequest, Voice, VoiceSettings

__all__ = [
    "ArtifactExistsError",
    "NotSupportedError",
    "SynthesisError",
    "SynthesisRequest",
    "TTSAPIError",
    "TTSAuthError",
    "TTSClient",
    "TTSError",
    "ValidationError",
    "Voice",
    "VoiceSettings",
]
