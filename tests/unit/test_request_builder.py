"""Unit tests for request validation and voice settings resolution."""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent.parent / "src"))

from elspeak.tts.errors import TTSAPIError, ValidationError
from elspeak.tts.models import Voice, VoiceSettings
from elspeak.tts.request import (
    MAX_TEXT_LENGTH,
    as_voice,
    build_request,
    requested_settings,
    resolve_voice_settings,
    validate_text,
)

OVERRIDE = VoiceSettings(stability=0.1, similarity_boost=0.2)
STORED = VoiceSettings(stability=0.3, similarity_boost=0.4)
REMOTE = VoiceSettings(stability=0.5, similarity_boost=0.6)


class TestValidateText:
    """Test text precondition checks."""

    def test_text_at_limit_accepted(self) -> None:
        """Test that exactly MAX_TEXT_LENGTH characters is allowed."""
        text = "a" * MAX_TEXT_LENGTH
        assert validate_text(text) == text

    def test_text_over_limit_rejected(self) -> None:
        """Test that one character over the limit raises ValidationError."""
        with pytest.raises(ValidationError, match="cannot exceed 5000 characters"):
            validate_text("a" * (MAX_TEXT_LENGTH + 1))

    def test_empty_text_rejected(self) -> None:
        """Test that empty text raises ValidationError."""
        with pytest.raises(ValidationError, match="Text cannot be empty"):
            validate_text("")

    def test_whitespace_text_rejected(self) -> None:
        """Test that whitespace-only text raises ValidationError."""
        with pytest.raises(ValidationError, match="Text cannot be empty"):
            validate_text("  \n\t ")

    def test_non_string_text_rejected(self) -> None:
        """Test that None is reported as a validation failure, not a TypeError."""
        with pytest.raises(ValidationError, match="must be a string, got NoneType"):
            validate_text(None)  # type: ignore[arg-type]

    def test_validation_error_is_value_error(self) -> None:
        """Test that callers catching ValueError still see validation failures."""
        with pytest.raises(ValueError):
            validate_text("")


class TestAsVoice:
    """Test voice argument normalization."""

    def test_voice_passes_through(self) -> None:
        voice = Voice(voice_id="v1", settings=STORED)
        assert as_voice(voice) is voice

    def test_string_becomes_voice_without_settings(self) -> None:
        voice = as_voice("v1")
        assert voice == Voice(voice_id="v1")

    def test_empty_string_raises_validation_error(self) -> None:
        with pytest.raises(ValidationError, match="voice_id cannot be empty"):
            as_voice("")


class TestRequestedSettings:
    """Test the settings known without any I/O."""

    def test_override_preferred(self) -> None:
        voice = Voice(voice_id="v1", settings=STORED)
        assert requested_settings(OVERRIDE, voice) is OVERRIDE

    def test_stored_settings_used_without_override(self) -> None:
        voice = Voice(voice_id="v1", settings=STORED)
        assert requested_settings(None, voice) is STORED

    def test_none_when_only_service_knows(self) -> None:
        assert requested_settings(None, Voice(voice_id="v1")) is None


class TestResolveVoiceSettings:
    """Test settings precedence: override, then stored, then remote."""

    @pytest.mark.asyncio
    async def test_override_wins_over_everything(self) -> None:
        """Test explicit override is used and nothing is fetched."""
        fetch_default = AsyncMock(return_value=REMOTE)

        settings = await resolve_voice_settings(
            OVERRIDE, Voice(voice_id="v1", settings=STORED), fetch_default
        )

        assert settings == OVERRIDE
        fetch_default.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_stored_settings_used_without_override(self) -> None:
        """Test the voice's stored settings are used when no override is given."""
        fetch_default = AsyncMock(return_value=REMOTE)

        settings = await resolve_voice_settings(
            None, Voice(voice_id="v1", settings=STORED), fetch_default
        )

        assert settings == STORED
        fetch_default.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_remote_default_fetched_last(self) -> None:
        """Test the remote default is fetched once when nothing else is set."""
        fetch_default = AsyncMock(return_value=REMOTE)

        settings = await resolve_voice_settings(
            None, Voice(voice_id="v1"), fetch_default
        )

        assert settings == REMOTE
        fetch_default.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_remote_failure_propagates(self) -> None:
        """Test that a failing default lookup surfaces unchanged."""
        fetch_default = AsyncMock(side_effect=TTSAPIError("boom", status_code=500))

        with pytest.raises(TTSAPIError, match="boom"):
            await resolve_voice_settings(None, Voice(voice_id="v1"), fetch_default)


class TestBuildRequest:
    """Test request construction."""

    @pytest.mark.asyncio
    async def test_builds_request_with_effective_settings(self) -> None:
        """Test the request carries text, voice ID and resolved settings."""
        fetch_default = AsyncMock(return_value=REMOTE)

        request = await build_request("Hello", "v1", None, fetch_default)

        assert request.text == "Hello"
        assert request.voice_id == "v1"
        assert request.voice_settings == REMOTE

    @pytest.mark.asyncio
    async def test_too_long_text_fails_before_fetching_defaults(self) -> None:
        """Test validation happens before any settings lookup."""
        fetch_default = AsyncMock(return_value=REMOTE)

        with pytest.raises(ValidationError):
            await build_request("x" * 5001, "v1", None, fetch_default)

        fetch_default.assert_not_awaited()
