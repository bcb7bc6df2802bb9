"""Typer CLI definition for elspeak."""

import asyncio
import logging
import sys
from pathlib import Path

import typer

from .api import synthesize
from .config import load_config
from .tts.errors import SynthesisError, TTSAPIError, TTSAuthError, ValidationError
from .tts.models import VoiceSettings

app = typer.Typer(help="Convert text to cached speech using ElevenLabs voices")


def process_text_input(text: str | None) -> str:
    """Process text input and return the text to synthesize.

    Args:
        text: Optional text input from CLI argument

    Returns:
        The text to synthesize

    Raises:
        ValueError: If no text is provided
    """
    if text is None:
        raise ValueError("No text provided")

    return text


def build_settings_override(
    stability: float | None,
    similarity_boost: float | None,
    style: float | None,
    speaker_boost: bool,
) -> VoiceSettings | None:
    """Build explicit voice settings from CLI flags.

    Returns None when neither stability nor similarity boost is given, so
    the voice's stored or the account default settings apply.

    Raises:
        ValueError: If only one of stability/similarity boost is given,
            or a value is out of range
    """
    if stability is None and similarity_boost is None:
        if style is not None:
            raise ValueError("--style requires --stability and --similarity-boost")
        return None
    if stability is None or similarity_boost is None:
        raise ValueError(
            "--stability and --similarity-boost must be given together"
        )
    return VoiceSettings(
        stability=stability,
        similarity_boost=similarity_boost,
        style=style if style is not None else 0.0,
        use_speaker_boost=speaker_boost,
    )


def _fail(message: str, error: Exception, debug: bool) -> typer.Exit:
    if debug:
        typer.echo(f"Debug - {message}: {error!r}", err=True)
    else:
        typer.echo(f"Error: {error}", err=True)
    return typer.Exit(1)


@app.command()
def speak(
    text: str | None = typer.Argument(None, help="Text to convert to speech"),
    file: Path | None = typer.Option(None, "-f", "--file", help="Read text from file"),
    voice: str | None = typer.Option(
        None, "-v", "--voice", help="Voice ID (from config if omitted)"
    ),
    save_dir: Path | None = typer.Option(
        None,
        "-d",
        "--save-dir",
        help="Cache root directory (from config, else current directory)",
    ),
    stability: float | None = typer.Option(
        None, "--stability", help="Voice stability override (0.0-1.0)"
    ),
    similarity_boost: float | None = typer.Option(
        None, "--similarity-boost", help="Similarity boost override (0.0-1.0)"
    ),
    style: float | None = typer.Option(
        None, "--style", help="Style exaggeration override (0.0-1.0)"
    ),
    speaker_boost: bool = typer.Option(
        True, "--speaker-boost/--no-speaker-boost", help="Use speaker boost"
    ),
    no_voice_lookup: bool = typer.Option(
        False,
        "--no-voice-lookup",
        help="Skip fetching the voice's stored settings",
    ),
    debug: bool = typer.Option(
        False, "--debug", help="Show verbose error messages and cache activity"
    ),
) -> None:
    """Synthesize text and print the path of the cached MP3."""
    # Configure logging for debug mode
    if debug:
        logging.basicConfig(
            level=logging.DEBUG,
            format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        )

    # Get text from argument, file, or stdin (in priority order)
    if text is None:
        if file:
            try:
                text = file.read_text()
            except FileNotFoundError as e:
                raise _fail("File not found", e, debug) from None
            except PermissionError as e:
                raise _fail("Permission denied", e, debug) from None
            except UnicodeDecodeError as e:
                raise _fail("Decode error", e, debug) from None
        elif not sys.stdin.isatty():
            text = sys.stdin.read().strip()

    try:
        input_text = process_text_input(text)
        override = build_settings_override(
            stability, similarity_boost, style, speaker_boost
        )
    except ValueError as e:
        raise _fail("Input error", e, debug) from None

    config = load_config()
    save_directory = save_dir or config.cache.directory

    try:
        path = asyncio.run(
            synthesize(
                input_text,
                voice or config.tts.voice,
                settings=override,
                save_directory=save_directory,
                base_url=config.api.base_url,
                timeout=config.api.timeout,
                lookup_voice=not no_voice_lookup,
            )
        )
    except ValidationError as e:
        raise _fail("Validation error", e, debug) from None
    except TTSAuthError as e:
        raise _fail("Authentication error", e, debug) from None
    except SynthesisError as e:
        raise _fail(f"Synthesis error (status {e.status_code})", e, debug) from None
    except TTSAPIError as e:
        raise _fail("TTS API error", e, debug) from None
    except OSError as e:
        raise _fail("File system error", e, debug) from None

    typer.echo(str(path))
