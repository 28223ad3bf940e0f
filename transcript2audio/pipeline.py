"""
Pipeline module for transcript2audio package.

Runs a transcript through the cache, the parser and the synthesizer, writing
one numbered MP3 per utterance under the output prefix.
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Mapping, Optional

from rich.console import Console
from rich.markup import escape

from .cache import TranscriptCache, compute_transcript_hash
from .conversation import Conversation
from .errors import ConfigurationError, TranscriptParseError
from .parsers import TranscriptParser
from .synthesis import AUDIO_FORMAT, Synthesizer
from .ui import console as default_console
from .ui import progress_context


@dataclass
class PipelineResult:
    total: int
    generated: List[Path] = field(default_factory=list)
    skipped: List[Path] = field(default_factory=list)


def output_path_for(output_prefix: Path, index: int, total: int) -> Path:
    """Path of the 1-based index-th file, zero-padded to the width of total."""
    width = len(str(total))
    return Path(output_prefix) / f"{index:0{width}d}.{AUDIO_FORMAT}"


def already_generated(path: Path) -> bool:
    try:
        return path.stat().st_size > 0
    except OSError:
        return False


async def load_conversation(
    transcript: bytes,
    parser: TranscriptParser,
    cache: TranscriptCache,
    out: Console,
) -> Conversation:
    """Return the cached Conversation for transcript, parsing and caching it on a miss."""
    cache_key = compute_transcript_hash(transcript)

    cached = cache.get(cache_key)
    if cached is not None:
        out.print("Using cached transcription")
        return cached

    try:
        text = transcript.decode("utf-8")
    except UnicodeDecodeError as exc:
        raise TranscriptParseError("Transcript is not valid UTF-8") from exc

    out.print("Transcribing…")
    conversation = await parser.produce(text)
    out.print("Transcribed.")

    cache.put(cache_key, conversation)
    return conversation


async def run_pipeline(
    transcript: bytes,
    *,
    parser: TranscriptParser,
    cache: TranscriptCache,
    synthesizer: Synthesizer,
    voices: Mapping[str, str],
    output_prefix: Path,
    out: Optional[Console] = None,
) -> PipelineResult:
    """
    Generate audio for every utterance of transcript, in order.

    Files that already exist with a non-zero size are left alone, so an
    interrupted run can be resumed. Any failure aborts the run; files written
    before it stay in place.
    """
    out = out or default_console
    conversation = await load_conversation(transcript, parser, cache, out)

    output_prefix = Path(output_prefix)
    try:
        output_prefix.mkdir(parents=True, exist_ok=True)
    except OSError as exc:
        raise ConfigurationError(f"Failed to create output directory {output_prefix}") from exc

    total = len(conversation)
    result = PipelineResult(total=total)

    out.print("Generating audio…")
    with progress_context(total=total, out=out) as progress:
        task = progress.add_task("Generating audio…", total=total)
        for index, utterance in enumerate(conversation, start=1):
            file_path = output_path_for(output_prefix, index, total)

            if already_generated(file_path):
                progress.console.print(f"{file_path} exists, skipping.", markup=False)
                result.skipped.append(file_path)
                progress.advance(task)
                continue

            voice_id = voices.get(utterance.voice)
            if voice_id is None:
                raise ConfigurationError(
                    f"No voice ID found for voice '{utterance.voice}' in config file"
                )

            progress.update(
                task,
                description=f"Utterance {index}/{total} (voice: {escape(utterance.voice)})…",
            )
            await synthesizer.synthesize(utterance, voice_id, file_path)
            result.generated.append(file_path)
            progress.advance(task)

    out.print(f"Successfully generated {total} audio files.")
    return result
