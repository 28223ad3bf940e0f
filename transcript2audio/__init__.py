"""
transcript2audio - Conversation transcripts to per-utterance audio files.

A CLI utility that parses a "Speaker: words" transcript (optionally with help
from a language model), caches the parsed conversation by content hash, and
synthesizes one MP3 per utterance with a text-to-speech service.
"""

__version__ = "0.1.0"

from .conversation import Conversation, Utterance
from .cache import TranscriptCache, compute_transcript_hash
from .parsers import get_parser, parse_naive
from .synthesis import get_synthesizer
from .pipeline import output_path_for, run_pipeline
from .cli import main

__all__ = [
    "Conversation",
    "Utterance",
    "TranscriptCache",
    "compute_transcript_hash",
    "get_parser",
    "parse_naive",
    "get_synthesizer",
    "output_path_for",
    "run_pipeline",
    "main",
]
