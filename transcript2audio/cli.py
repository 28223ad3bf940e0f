"""
CLI module for transcript2audio package.

Contains command-line argument parsing and main application logic.
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

from .cache import TranscriptCache
from .config import load_environment, load_voice_config
from .errors import Transcript2AudioError, error_chain
from .parsers import PARSER_MODES, get_parser
from .pipeline import PipelineResult, run_pipeline
from .synthesis import TTS_PROVIDERS, get_synthesizer
from .ui import print_error


# ----------------------------
# CLI setup
# ----------------------------
def create_parser() -> argparse.ArgumentParser:
    """Create and configure the argument parser."""
    parser = argparse.ArgumentParser(
        prog="transcript2audio",
        description="Convert a conversation transcript read from stdin into one audio file per utterance.",
    )
    parser.add_argument("-o", "--output-prefix", required=True, type=Path,
                        help="Directory that receives the numbered audio files.")
    parser.add_argument("-c", "--config", required=True, type=Path,
                        help="TOML file with a [voices] table mapping speakers to voice IDs.")
    parser.add_argument("-m", "--mode", default="naive", choices=PARSER_MODES,
                        help="Transcription mode (default: naive).")
    parser.add_argument("--tts-provider", default="elevenlabs", choices=TTS_PROVIDERS,
                        help="Text-to-speech service (default: elevenlabs).")
    parser.add_argument("--text-model",
                        help="Text model for the assisted modes "
                             "(defaults: $ANTHROPIC_MODEL / $OPENAI_TEXT_MODEL).")
    parser.add_argument("--cache-dir", type=Path,
                        help="Override the transcript cache directory.")
    return parser


async def _run(args: argparse.Namespace, transcript: bytes) -> PipelineResult:
    voices = load_voice_config(args.config)
    return await run_pipeline(
        transcript,
        parser=get_parser(args.mode, args.text_model),
        cache=TranscriptCache(args.cache_dir),
        synthesizer=get_synthesizer(args.tts_provider),
        voices=voices,
        output_prefix=args.output_prefix,
    )


# ----------------------------
# Main application logic
# ----------------------------
def main(argv: Optional[List[str]] = None) -> None:
    """Main entry point for the transcript2audio CLI application."""
    load_environment()

    parser = create_parser()
    args = parser.parse_args(argv)

    transcript = sys.stdin.buffer.read()

    try:
        asyncio.run(_run(args, transcript))
    except Transcript2AudioError as exc:
        print_error(error_chain(exc))
        sys.exit(exc.exit_code)
