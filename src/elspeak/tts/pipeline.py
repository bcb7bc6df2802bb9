"""TTS pipeline orchestrator for elspeak.

Coordinates request building, cache key derivation, the artifact store and
the ElevenLabs client into one sequential flow:

    validate -> cache check -> resolve settings -> request -> persist -> path

The cache key is built from what the caller supplied (text, voice, and the
override or stored settings), so a cache hit never touches the network.

Every network and disk step is an await point, so cancelling the task that
runs ``synthesize`` aborts whichever step is in flight and leaves no partial
artifact behind.
"""

import logging
from collections.abc import AsyncIterator
from pathlib import Path
from typing import ClassVar

from ..cache.keys import derive_cache_key
from ..cache.store import ArtifactStore
from .client import TTSClient
from .errors import ArtifactExistsError, NotSupportedError
from .models import Voice, VoiceSettings
from .request import as_voice, build_request, requested_settings, validate_text

logger = logging.getLogger(__name__)


class TTSPipeline:
    """Orchestrates text-to-speech synthesis with on-disk caching.

    Example:
        async with TTSClient() as client:
            pipeline = TTSPipeline(client, save_directory="/tmp/audio")
            path = await pipeline.synthesize("Deploy complete", "21m00Tcm4TlvDq8ikWAM")
            # /tmp/audio/ElevenLabs/TextToSpeech/<key>.mp3

    Concurrent calls that resolve to the same cache key are not serialized;
    if two of them miss the cache, both download and the second to publish
    returns the first one's artifact.
    """

    supports_streaming: ClassVar[bool] = False

    def __init__(
        self,
        client: TTSClient,
        save_directory: Path | str | None = None,
        lookup_voice: bool = False,
    ) -> None:
        """Initialize pipeline.

        Args:
            client: ElevenLabs client used for synthesis and default settings
            save_directory: Root for the artifact cache. None means the
                current working directory at call time.
            lookup_voice: On a cache miss, fetch a bare voice's stored
                settings before falling back to the account default
        """
        self.client = client
        self.save_directory = Path(save_directory) if save_directory else None
        self.lookup_voice = lookup_voice

    def store_for(self, save_directory: Path | str | None = None) -> ArtifactStore:
        """Return the artifact store for a per-call or pipeline-wide root."""
        root = save_directory or self.save_directory or Path.cwd()
        return ArtifactStore(root)

    async def synthesize(
        self,
        text: str,
        voice: Voice | str,
        settings: VoiceSettings | None = None,
        save_directory: Path | str | None = None,
    ) -> Path:
        """Return the path to a cached MP3 of text spoken by voice.

        Args:
            text: Text to synthesize (1-5000 characters)
            voice: Voice, or bare voice ID with no stored settings
            settings: Optional override for the voice's settings
            save_directory: Optional root overriding the pipeline's

        Returns:
            Path to a complete artifact

        Raises:
            ValidationError: If text or voice are invalid (before any I/O)
            SynthesisError: If the service rejects the request
            TTSAPIError: If a voice or default settings lookup fails
            OSError: If the artifact cannot be written
        """
        validate_text(text)
        voice = as_voice(voice)
        requested = requested_settings(settings, voice)
        logger.debug(f"Validated request ({len(text)} chars) for {voice.voice_id}")

        store = self.store_for(save_directory)
        store.ensure_directory()
        key = derive_cache_key(text, voice.voice_id, requested)
        path = store.path_for(key)

        if store.exists(key):
            logger.debug(f"Cache hit: {path}")
            return path

        logger.debug(f"Cache miss for {key}, resolving settings")
        if self.lookup_voice and requested is None:
            voice = await self.client.get_voice(voice.voice_id)
        request = await build_request(
            text, voice, settings, self.client.get_default_voice_settings
        )

        logger.debug(f"Requesting synthesis for {key}")
        try:
            async with self.client.stream_speech(request) as chunks:
                logger.debug(f"Persisting audio stream to {path}")
                return await store.write(key, chunks)
        except ArtifactExistsError:
            if not store.exists(key):
                raise
            logger.debug(f"Another writer stored {key} first, reusing it")
            return path

    async def stream_synthesize(
        self,
        text: str,
        voice: Voice | str,
        settings: VoiceSettings | None = None,
    ) -> AsyncIterator[bytes]:
        """Stream synthesized audio without caching. Not supported yet.

        Check ``supports_streaming`` to branch without catching.

        Raises:
            NotSupportedError: Always, before any side effect
        """
        raise NotSupportedError("Streaming synthesis is not supported")
