"""
Config module for transcript2audio package.

Loads secrets from the environment (and a local .env file) and the speaker to
voice mapping from a TOML file.
"""

import os
import tomllib
from pathlib import Path
from typing import Dict, Mapping

from dotenv import load_dotenv

from .errors import ConfigurationError

ANTHROPIC_API_KEY = "ANTHROPIC_API_KEY"
OPENAI_API_KEY = "OPENAI_API_KEY"
ELEVENLABS_API_KEY = "ELEVENLABS_API_KEY"


def load_environment() -> None:
    """Load a .env file from the working directory without overriding the environment."""
    load_dotenv()


def require_secret(name: str) -> str:
    """Return the environment variable name, or raise ConfigurationError if unset."""
    value = os.getenv(name)
    if not value:
        raise ConfigurationError(
            f"Missing {name} (set it in your environment or .env)."
        )
    return value


def load_voice_config(path: Path) -> Dict[str, str]:
    """
    Read the [voices] table of a TOML file.

    Args:
        path: TOML file mapping speaker labels to voice identifiers

    Returns:
        Mapping from speaker label to voice identifier
    """
    try:
        raw = Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ConfigurationError(f"Failed to read voice config file: {path}") from exc

    try:
        document = tomllib.loads(raw)
    except tomllib.TOMLDecodeError as exc:
        raise ConfigurationError(f"Failed to parse voice config TOML: {path}") from exc

    voices = document.get("voices")
    if not isinstance(voices, dict):
        raise ConfigurationError(f"Voice config {path} has no [voices] table")
    return validate_voices(voices)


def validate_voices(voices: Mapping[str, object]) -> Dict[str, str]:
    bad = sorted(label for label, voice_id in voices.items() if not isinstance(voice_id, str))
    if bad:
        raise ConfigurationError(
            "Voice identifiers must be strings; check: " + ", ".join(bad)
        )
    return dict(voices)
