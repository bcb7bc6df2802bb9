"""Configuration management for elspeak.

Loads configuration from ~/.config/elspeak/config.toml.
Priority chain: CLI flags > env vars > config file.
"""

import os
import sys
import tomllib
from dataclasses import dataclass
from pathlib import Path

from .tts.client import DEFAULT_BASE_URL, DEFAULT_TIMEOUT

CONFIG_DIR = Path.home() / ".config" / "elspeak"
CONFIG_PATH = CONFIG_DIR / "config.toml"

DEFAULT_CONFIG = f"""\
# elspeak configuration

[api]
# ElevenLabs API root
base_url = "{DEFAULT_BASE_URL}"

# Request timeout in seconds
timeout = {DEFAULT_TIMEOUT}

[tts]
# Default voice ID (Rachel)
voice = "21m00Tcm4TlvDq8ikWAM"

[cache]
# Root for cached audio; files go under <directory>/ElevenLabs/TextToSpeech.
# Empty means the current working directory.
directory = ""

# The API key is read from the environment, not this file:
#   ELEVENLABS_API_KEY
"""


@dataclass(frozen=True)
class APIConfig:
    """ElevenLabs API configuration."""

    base_url: str
    timeout: float


@dataclass(frozen=True)
class TTSConfig:
    """Voice configuration."""

    voice: str


@dataclass(frozen=True)
class CacheConfig:
    """Artifact cache configuration."""

    directory: Path | None


@dataclass(frozen=True)
class ElspeakConfig:
    """Top-level elspeak configuration."""

    api: APIConfig
    tts: TTSConfig
    cache: CacheConfig


_cached_config: ElspeakConfig | None = None


def generate_config() -> Path:
    """Generate default config file at ~/.config/elspeak/config.toml."""
    CONFIG_DIR.mkdir(parents=True, exist_ok=True)
    CONFIG_PATH.write_text(DEFAULT_CONFIG)
    return CONFIG_PATH


def load_config() -> ElspeakConfig:
    """Load configuration from config file with env var overrides.

    On first run, generates the config file and exits so the user
    can review it before proceeding.

    Returns:
        Loaded and validated ElspeakConfig.

    Raises:
        SystemExit: If config is missing (after generating) or invalid.
    """
    global _cached_config
    if _cached_config is not None:
        return _cached_config

    if not CONFIG_PATH.exists():
        path = generate_config()
        print(
            f"No config found. Generated {path}; review it and run again.",
            file=sys.stderr,
        )
        raise SystemExit(1)

    with open(CONFIG_PATH, "rb") as f:
        data = tomllib.load(f)

    api = data.get("api", {})
    tts = data.get("tts", {})
    cache = data.get("cache", {})

    # Validate required fields
    missing = []
    if "base_url" not in api:
        missing.append("api.base_url")
    if "voice" not in tts:
        missing.append("tts.voice")

    if missing:
        print(
            f"Missing required config values: {', '.join(missing)}",
            file=sys.stderr,
        )
        print(f"Edit {CONFIG_PATH} or delete it to regenerate.", file=sys.stderr)
        raise SystemExit(1)

    # Env vars override config file values
    directory = os.getenv("ELSPEAK_SAVE_DIR", cache.get("directory", ""))

    _cached_config = ElspeakConfig(
        api=APIConfig(
            base_url=os.getenv("ELSPEAK_BASE_URL", api["base_url"]),
            timeout=float(api.get("timeout", DEFAULT_TIMEOUT)),
        ),
        tts=TTSConfig(
            voice=os.getenv("ELSPEAK_VOICE", tts["voice"]),
        ),
        cache=CacheConfig(
            directory=Path(directory).expanduser() if directory else None,
        ),
    )

    return _cached_config
