"""Deterministic cache keys for synthesized artifacts."""

import hashlib
import json
import uuid
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..tts.models import VoiceSettings


def derive_cache_key(
    text: str, voice_id: str, settings: "VoiceSettings | None" = None
) -> str:
    """Generate a stable artifact name from what the caller asked for.

    Text, voice and settings all feed the hash, so the same text spoken by
    two voices, or with two settings, gets two artifacts. ``settings`` is
    the override or the voice's stored settings; None stands for "whatever
    the service resolves", which keeps the key computable without a network
    call. The SHA-256 digest is folded into a UUID string to keep filenames
    short.

    Args:
        text: Validated text
        voice_id: Voice identifier
        settings: Locally known settings, or None

    Returns:
        UUID-formatted key, identical across runs and processes
    """
    canonical = json.dumps(
        {
            "text": text,
            "voice_id": voice_id,
            "voice_settings": settings.to_dict() if settings is not None else None,
        },
        ensure_ascii=False,
        sort_keys=True,
        separators=(",", ":"),
    )
    digest = hashlib.sha256(canonical.encode("utf-8")).digest()
    return str(uuid.UUID(bytes=digest[:16]))
