"""
Parsers module for transcript2audio package.

Turns raw transcript text into a Conversation. Three interchangeable
strategies share one capability, ``await parser.produce(raw_text)``:

- ``naive``: one ``Speaker: words`` pair per non-blank line
- ``anthropic``: the transcript is restructured by a Claude model
- ``openai``: the same, through an OpenAI chat model
"""

import json
import os
from typing import Callable, Dict, Optional, Protocol

import anthropic
import openai
import regex as re
from anthropic import AsyncAnthropic
from openai import AsyncOpenAI

from .config import ANTHROPIC_API_KEY, OPENAI_API_KEY, require_secret
from .conversation import Conversation, Utterance
from .errors import ConfigurationError, RemoteServiceError, TranscriptParseError

# ----------------------------
# Constants and catalogs
# ----------------------------
SEPARATOR = ": "

DEFAULT_ANTHROPIC_MODEL = "claude-sonnet-4-20250514"
DEFAULT_OPENAI_TEXT_MODEL = "gpt-5-mini"
MAX_OUTPUT_TOKENS = 16_384

PARSER_MODES = ["naive", "anthropic", "openai"]

_LEADING_FENCE = re.compile(r"\A(?:```json)+")
_TRAILING_FENCE = re.compile(r"(?:```)+\Z")

SYSTEM_PROMPT = (
    "You convert raw conversation transcripts into structured JSON. "
    "Return only the JSON object, no commentary and no extra text."
)

USER_PROMPT_TEMPLATE = """\
Each line of the transcript below has the form "Speaker: message".

Produce a JSON object with exactly this structure:
{{
    "interjections": [
        {{
            "voice": "name of the speaker",
            "words": "what the speaker says, without the speaker name"
        }}
    ]
}}

Rules:
- "voice" is everything before the first colon on the line
- "words" is everything after the first colon and the space that follows it
- keep the interjections in the same order as the transcript
- return ONLY the JSON object

Transcript:
{transcript}"""


class TranscriptParser(Protocol):
    """Anything that can turn raw transcript text into a Conversation."""

    name: str

    async def produce(self, raw_text: str) -> Conversation: ...


# ----------------------------
# Naive parsing
# ----------------------------
def parse_line(line: str) -> Utterance:
    """Split a single stripped ``Speaker: words`` line on the first separator."""
    voice, sep, words = line.partition(SEPARATOR)
    if not sep:
        raise TranscriptParseError(f"Line does not start with a voice labelling: `{line}`")
    return Utterance(voice=voice, words=words.strip())


def parse_naive(raw_text: str) -> Conversation:
    """Parse every non-blank line; the first malformed line fails the whole transcript."""
    utterances = [
        parse_line(stripped)
        for stripped in (line.strip() for line in raw_text.split("\n"))
        if stripped
    ]
    return Conversation(tuple(utterances))


class NaiveParser:
    name = "naive"

    async def produce(self, raw_text: str) -> Conversation:
        return parse_naive(raw_text)


# ----------------------------
# Model-assisted parsing
# ----------------------------
def build_prompt(transcript: str) -> str:
    return USER_PROMPT_TEMPLATE.format(transcript=transcript)


def strip_code_fence(text: str) -> str:
    """Remove surrounding whitespace and optional ```json ... ``` markers."""
    text = _LEADING_FENCE.sub("", text.strip())
    text = _TRAILING_FENCE.sub("", text)
    return text.strip()


def conversation_from_model_output(raw_output: str, service: str) -> Conversation:
    """
    Decode the model's answer into a Conversation.

    Raises:
        TranscriptParseError: carrying the cleaned text when it is not the expected JSON
    """
    cleaned = strip_code_fence(raw_output)
    try:
        return Conversation.from_dict(json.loads(cleaned))
    except ValueError as exc:
        raise TranscriptParseError(
            f"Failed to parse JSON response from {service} from: `{cleaned}`"
        ) from exc


class AnthropicParser:
    """Restructure the transcript with the Anthropic Messages API."""

    name = "anthropic"

    def __init__(self, client: AsyncAnthropic, model: str = DEFAULT_ANTHROPIC_MODEL):
        self.client = client
        self.model = model

    async def produce(self, raw_text: str) -> Conversation:
        try:
            response = await self.client.messages.create(
                model=self.model,
                max_tokens=MAX_OUTPUT_TOKENS,
                system=SYSTEM_PROMPT,
                messages=[{"role": "user", "content": build_prompt(raw_text)}],
            )
        except anthropic.APIStatusError as exc:
            raise RemoteServiceError(f"Anthropic API error (status {exc.status_code})") from exc
        except anthropic.APIError as exc:
            raise RemoteServiceError("Failed to send request to Anthropic API") from exc

        texts = [block.text for block in response.content if getattr(block, "type", "text") == "text"]
        if not texts:
            raise RemoteServiceError("No content in Anthropic response")
        return conversation_from_model_output(texts[0], "Anthropic")


class OpenAIParser:
    """Restructure the transcript with an OpenAI chat model."""

    name = "openai"

    def __init__(self, client: AsyncOpenAI, model: str = DEFAULT_OPENAI_TEXT_MODEL):
        self.client = client
        self.model = model

    async def produce(self, raw_text: str) -> Conversation:
        try:
            chat = await self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": SYSTEM_PROMPT},
                    {"role": "user", "content": build_prompt(raw_text)},
                ],
            )
        except openai.APIStatusError as exc:
            raise RemoteServiceError(f"OpenAI API error (status {exc.status_code})") from exc
        except openai.APIError as exc:
            raise RemoteServiceError("Failed to send request to OpenAI API") from exc

        content = chat.choices[0].message.content if chat.choices else None
        if not content:
            raise RemoteServiceError("No content in OpenAI response")
        return conversation_from_model_output(content, "OpenAI")


# ----------------------------
# Strategy selection
# ----------------------------
def _make_naive(model: Optional[str]) -> TranscriptParser:
    return NaiveParser()


def _make_anthropic(model: Optional[str]) -> TranscriptParser:
    client = AsyncAnthropic(api_key=require_secret(ANTHROPIC_API_KEY), max_retries=0)
    return AnthropicParser(client, model or os.getenv("ANTHROPIC_MODEL", DEFAULT_ANTHROPIC_MODEL))


def _make_openai(model: Optional[str]) -> TranscriptParser:
    client = AsyncOpenAI(api_key=require_secret(OPENAI_API_KEY), max_retries=0)
    return OpenAIParser(client, model or os.getenv("OPENAI_TEXT_MODEL", DEFAULT_OPENAI_TEXT_MODEL))


_FACTORIES: Dict[str, Callable[[Optional[str]], TranscriptParser]] = {
    "naive": _make_naive,
    "anthropic": _make_anthropic,
    "openai": _make_openai,
}


def get_parser(mode: str, model: Optional[str] = None) -> TranscriptParser:
    """
    Build the parser strategy called mode.

    Args:
        mode: one of PARSER_MODES
        model: text model override for the assisted strategies
    """
    try:
        factory = _FACTORIES[mode]
    except KeyError:
        raise ConfigurationError(
            f"Unknown transcription mode '{mode}' (expected one of: {', '.join(PARSER_MODES)})"
        ) from None
    return factory(model)
