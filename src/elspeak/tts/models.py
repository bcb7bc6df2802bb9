"""TTS data models with validation."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True)
class VoiceSettings:
    """Voice generation settings sent with every synthesis request.

    Args:
        stability: Voice stability (0.0-1.0)
        similarity_boost: Voice similarity boost (0.0-1.0)
        style: Voice style exaggeration (0.0-1.0)
        use_speaker_boost: Whether to use speaker boost
    """

    stability: float
    similarity_boost: float
    style: float = 0.0
    use_speaker_boost: bool = True

    def __post_init__(self) -> None:
        """Normalize numeric types and validate voice settings."""
        # Equal settings must serialize identically, so 1 and 1.0 converge
        object.__setattr__(self, "stability", float(self.stability))
        object.__setattr__(self, "similarity_boost", float(self.similarity_boost))
        object.__setattr__(self, "style", float(self.style))
        object.__setattr__(self, "use_speaker_boost", bool(self.use_speaker_boost))

        if not 0.0 <= self.stability <= 1.0:
            raise ValueError("stability must be between 0.0 and 1.0")
        if not 0.0 <= self.similarity_boost <= 1.0:
            raise ValueError("similarity_boost must be between 0.0 and 1.0")
        if not 0.0 <= self.style <= 1.0:
            raise ValueError("style must be between 0.0 and 1.0")

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON form used by the ElevenLabs API."""
        return {
            "stability": self.stability,
            "similarity_boost": self.similarity_boost,
            "style": self.style,
            "use_speaker_boost": self.use_speaker_boost,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "VoiceSettings":
        """Build settings from an API payload, ignoring unknown keys.

        Raises:
            ValueError: If a required field is missing or out of range
        """
        for field in ("stability", "similarity_boost"):
            if data.get(field) is None:
                raise ValueError(f"voice settings missing field: {field}")
        return cls(
            stability=data["stability"],
            similarity_boost=data["similarity_boost"],
            style=data.get("style") or 0.0,
            use_speaker_boost=data.get("use_speaker_boost", True),
        )


@dataclass(frozen=True)
class Voice:
    """A voice and, when known, its stored default settings.

    Args:
        voice_id: Unique identifier for the voice
        name: Optional human-readable name of the voice
        settings: Optional stored settings for this voice
    """

    voice_id: str
    name: str | None = None
    settings: VoiceSettings | None = None

    def __post_init__(self) -> None:
        """Validate voice information."""
        if not self.voice_id or not self.voice_id.strip():
            raise ValueError("voice_id cannot be empty")


@dataclass(frozen=True)
class SynthesisRequest:
    """A validated request with its effective voice settings.

    Build instances through :func:`elspeak.tts.request.build_request`,
    which enforces the text length limit before anything else happens.
    """

    text: str
    voice_id: str
    voice_settings: VoiceSettings
