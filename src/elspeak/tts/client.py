"""TTS client for ElevenLabs API integration."""

import contextlib
import json
import logging
import os
from collections.abc import AsyncIterator, Iterator
from typing import Any

import httpx
from elevenlabs import VoiceSettings as ElevenLabsVoiceSettings
from elevenlabs.client import AsyncElevenLabs
from elevenlabs.core.api_error import ApiError
from elevenlabs.core.jsonable_encoder import jsonable_encoder

from .errors import SynthesisError, TTSAPIError, TTSAuthError
from .models import SynthesisRequest, Voice, VoiceSettings

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.elevenlabs.io"
DEFAULT_TIMEOUT = 60.0
DEFAULT_OUTPUT_FORMAT = "mp3_44100_128"


def _body_text(body: Any) -> str | None:
    """Render an SDK error body (parsed JSON, model or text) as a string."""
    if body is None or isinstance(body, str):
        return body
    return json.dumps(jsonable_encoder(body), ensure_ascii=False)


class TTSClient:
    """Client for ElevenLabs text-to-speech API.

    Wraps the async ElevenLabs SDK for the synthesis call and the two voice
    lookups the pipeline needs. Use as an async context manager, or call
    :meth:`aclose` when done.

    Example:
        async with TTSClient() as client:
            async with client.stream_speech(request) as chunks:
                async for chunk in chunks:
                    ...
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str = DEFAULT_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize TTS client.

        Args:
            api_key: ElevenLabs API key. If not provided, reads from
                    ELEVENLABS_API_KEY environment variable.
            base_url: Service root, without the /v1 version prefix
            timeout: Per-request timeout in seconds
            http_client: Optional pre-built httpx client handed to the SDK.
                    The caller keeps ownership and must close it.

        Raises:
            TTSAuthError: If API key is not provided or the SDK client
                cannot be created.
        """
        self._api_key = api_key or os.getenv("ELEVENLABS_API_KEY")
        if not self._api_key:
            raise TTSAuthError(
                "ElevenLabs API key not found. Set ELEVENLABS_API_KEY environment "
                "variable or provide api_key parameter."
            )

        self.base_url = base_url.rstrip("/")
        self._owns_client = http_client is None
        self._http_client = http_client or httpx.AsyncClient(timeout=timeout)

        try:
            self._client = AsyncElevenLabs(
                api_key=self._api_key,
                base_url=self.base_url,
                timeout=timeout,
                httpx_client=self._http_client,
            )
        except Exception as e:
            raise TTSAuthError(f"Failed to initialize ElevenLabs client: {e}") from e

        # Cache for default settings to avoid repeated API calls
        self._default_settings_cache: VoiceSettings | None = None

    async def __aenter__(self) -> "TTSClient":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._http_client.aclose()

    @contextlib.asynccontextmanager
    async def stream_speech(
        self, request: SynthesisRequest
    ) -> AsyncIterator[AsyncIterator[bytes]]:
        """Submit a synthesis request and expose the audio as a byte stream.

        The request is sent when the stream is first read. The yielded
        iterator is single-pass and only valid inside the ``async with``
        block; the response is closed on every exit path. Nothing is retried.

        Args:
            request: Validated request with effective settings

        Yields:
            Async iterator over MP3 chunks

        Raises:
            SynthesisError: While iterating, on a non-2xx status (with
                status_code and body) or a transport failure
        """
        chunks = self._convert(request)
        try:
            yield chunks
        finally:
            await chunks.aclose()

    async def _convert(self, request: SynthesisRequest) -> AsyncIterator[bytes]:
        logger.debug(
            f"Requesting speech for voice {request.voice_id} "
            f"({len(request.text)} chars)"
        )
        try:
            audio = self._client.text_to_speech.convert(
                request.voice_id,
                text=request.text,
                voice_settings=ElevenLabsVoiceSettings(
                    **request.voice_settings.to_dict()
                ),
                output_format=DEFAULT_OUTPUT_FORMAT,
                request_options={"max_retries": 0},
            )
            async with contextlib.aclosing(audio):
                async for chunk in audio:
                    yield chunk
        except ApiError as e:
            body = _body_text(e.body)
            raise SynthesisError(
                f"Text-to-speech request failed with status {e.status_code}: {body}",
                status_code=e.status_code,
                body=body,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise SynthesisError(
                f"Text-to-speech request failed: {e}", original_error=e
            ) from e

    async def get_voice(self, voice_id: str) -> Voice:
        """Fetch a voice together with its stored settings.

        Raises:
            TTSAPIError: If the lookup fails
        """
        logger.debug(f"Looking up voice {voice_id}")
        with self._api_errors(f"Voice lookup for {voice_id}"):
            voice = await self._client.voices.get(voice_id)
            stored = voice.settings
            return Voice(
                voice_id=voice.voice_id or voice_id,
                name=voice.name,
                settings=VoiceSettings.from_dict(stored.dict()) if stored else None,
            )

    async def get_default_voice_settings(self) -> VoiceSettings:
        """Fetch the account-wide default voice settings.

        Results are cached after first call to avoid repeated API requests.

        Raises:
            TTSAPIError: If the lookup fails
        """
        if self._default_settings_cache is not None:
            return self._default_settings_cache

        logger.debug("Fetching default voice settings")
        with self._api_errors("Default voice settings lookup"):
            data = await self._client.voices.settings.get_default()
            settings = VoiceSettings.from_dict(data.dict())

        self._default_settings_cache = settings
        return settings

    @contextlib.contextmanager
    def _api_errors(self, action: str) -> Iterator[None]:
        """Translate SDK and transport failures into TTSAPIError."""
        try:
            yield
        except ApiError as e:
            body = _body_text(e.body)
            raise TTSAPIError(
                f"{action} failed with status {e.status_code}: {body}",
                status_code=e.status_code,
                body=body,
                original_error=e,
            ) from e
        except httpx.HTTPError as e:
            raise TTSAPIError(f"{action} failed: {e}", original_error=e) from e
        except ValueError as e:
            raise TTSAPIError(
                f"{action} returned invalid data: {e}", original_error=e
            ) from e
