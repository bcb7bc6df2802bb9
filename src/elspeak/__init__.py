"""elspeak - cached ElevenLabs text-to-speech."""

__version__ = "0.1.0"
__all__ = ["TTSPipeline", "stream_synthesize", "synthesize"]


def __getattr__(name: str):  # type: ignore[no-untyped-def]
    if name in ("synthesize", "stream_synthesize"):
        from . import api

        return getattr(api, name)
    if name == "TTSPipeline":
        from .tts.pipeline import TTSPipeline

        return TTSPipeline
    raise AttributeError(f"module 'elspeak' has no attribute {name!r}")
