"""Pytest configuration and fixtures for elspeak tests."""

import asyncio
import json
import sys
from collections.abc import AsyncIterator
from pathlib import Path
from typing import Any

import httpx
import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from elspeak.tts.client import TTSClient

AUDIO_BYTES = b"ID3\x04\x00\x00\x00\x00\x00\x00" + b"\xff\xfb" * 2048

DEFAULT_SETTINGS = {
    "stability": 0.5,
    "similarity_boost": 0.75,
    "style": 0.0,
    "use_speaker_boost": True,
}


class GatedStream(httpx.AsyncByteStream):
    """Audio stream that sends one chunk, then waits until released."""

    def __init__(self, first_chunk: bytes, rest: bytes) -> None:
        self.first_chunk = first_chunk
        self.rest = rest
        self.first_chunk_sent = asyncio.Event()
        self.release = asyncio.Event()
        self.closed = False

    async def __aiter__(self) -> AsyncIterator[bytes]:
        yield self.first_chunk
        self.first_chunk_sent.set()
        await self.release.wait()
        yield self.rest

    async def aclose(self) -> None:
        self.closed = True


class FakeElevenLabs:
    """Scriptable stand-in for the ElevenLabs HTTP API.

    Counts calls per endpoint and records every request so tests can
    inspect URLs, headers and JSON bodies.
    """

    def __init__(self) -> None:
        self.audio = AUDIO_BYTES
        self.tts_status = 200
        self.tts_error_body: dict[str, Any] = {
            "detail": {"status": "invalid_request", "message": "bad voice"}
        }
        self.default_settings: dict[str, Any] = dict(DEFAULT_SETTINGS)
        self.voice_settings: dict[str, Any] | None = None
        self.stream: GatedStream | None = None
        self.hold_synthesis_until: int | None = None

        self.requests: list[httpx.Request] = []
        self.synthesis_calls = 0
        self.default_settings_calls = 0
        self.voice_calls = 0
        self._arrived: asyncio.Event | None = None

    def gate_stream(self) -> GatedStream:
        """Serve audio as one chunk, then block until released."""
        self.stream = GatedStream(self.audio[:512], self.audio[512:])
        return self.stream

    def synthesis_payloads(self) -> list[dict[str, Any]]:
        return [
            json.loads(r.content)
            for r in self.requests
            if r.method == "POST"
        ]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path

        if request.method == "POST" and path.startswith("/v1/text-to-speech/"):
            self.synthesis_calls += 1
            if self.hold_synthesis_until is not None:
                # Hold every caller until the expected number have arrived
                if self._arrived is None:
                    self._arrived = asyncio.Event()
                if self.synthesis_calls >= self.hold_synthesis_until:
                    self._arrived.set()
                await self._arrived.wait()
            if self.tts_status != 200:
                return httpx.Response(self.tts_status, json=self.tts_error_body)
            if self.stream is not None:
                return httpx.Response(
                    200, headers={"content-type": "audio/mpeg"}, stream=self.stream
                )
            return httpx.Response(
                200, headers={"content-type": "audio/mpeg"}, content=self.audio
            )

        if path == "/v1/voices/settings/default":
            self.default_settings_calls += 1
            return httpx.Response(200, json=self.default_settings)

        if path.startswith("/v1/voices/"):
            self.voice_calls += 1
            voice_id = path.rsplit("/", 1)[-1]
            if voice_id == "missing":
                return httpx.Response(404, json={"detail": "voice_not_found"})
            return httpx.Response(
                200,
                json={
                    "voice_id": voice_id,
                    "name": "Rachel",
                    "settings": self.voice_settings,
                },
            )

        return httpx.Response(404, json={"detail": "not found"})

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))

    def tts_client(self) -> TTSClient:
        return TTSClient(
            api_key="test_key",
            base_url="https://api.elevenlabs.io",
            http_client=self.http_client(),
        )


@pytest.fixture
def fake_service() -> FakeElevenLabs:
    """Fresh fake ElevenLabs service per test."""
    return FakeElevenLabs()


@pytest.fixture
def tts_client(fake_service: FakeElevenLabs) -> TTSClient:
    """TTSClient wired to the fake service."""
    return fake_service.tts_client()
