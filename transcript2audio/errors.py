"""
Errors module for transcript2audio package.

Every fatal condition of a run is a subclass of Transcript2AudioError. The CLI
reports the message together with the chain of underlying causes and exits
with the class's exit code.
"""

from typing import List


class Transcript2AudioError(Exception):
    """Base class for all fatal transcript2audio errors."""

    exit_code = 1


class ConfigurationError(Transcript2AudioError):
    """Missing secret, missing voice mapping or unreadable configuration."""

    exit_code = 3


class TranscriptParseError(Transcript2AudioError):
    """The transcript (or the model's rendition of it) could not be parsed."""

    exit_code = 4


class RemoteServiceError(Transcript2AudioError):
    """A remote API call failed: no response, or a non-success status."""

    exit_code = 5


class SynthesisError(RemoteServiceError):
    """Text-to-speech for a single utterance failed."""


def error_chain(exc: BaseException) -> List[str]:
    """Return the message of exc followed by the messages of its causes."""
    messages = []
    seen = set()
    current = exc
    while current is not None and id(current) not in seen:
        seen.add(id(current))
        messages.append(str(current) or type(current).__name__)
        current = current.__cause__
    return messages
