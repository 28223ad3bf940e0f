"""
Synthesis module for transcript2audio package.

Contains the text-to-speech providers. Each one streams the audio for a single
utterance straight into its destination file.
"""

import os
from contextlib import contextmanager
from pathlib import Path
from typing import AsyncIterator, BinaryIO, Iterator, Optional, Protocol

import httpx
import openai
from openai import AsyncOpenAI

from .config import ELEVENLABS_API_KEY, OPENAI_API_KEY, require_secret
from .conversation import Utterance
from .errors import ConfigurationError, SynthesisError

# ----------------------------
# Constants and catalogs
# ----------------------------
ELEVENLABS_URL = "https://api.elevenlabs.io/v1/text-to-speech/{voice_id}"
ELEVENLABS_MODEL_ID = "eleven_multilingual_v2"
ELEVENLABS_VOICE_SETTINGS = {"stability": 0.5, "similarity_boost": 0.5}

OPENAI_TTS_MODEL = "tts-1-hd"
AUDIO_FORMAT = "mp3"

TTS_PROVIDERS = ["elevenlabs", "openai"]

# The endpoint answers only once the whole utterance is synthesized.
SYNTHESIS_TIMEOUT = httpx.Timeout(600.0, connect=5.0)


class Synthesizer(Protocol):
    """Anything that can render one utterance into an audio file."""

    name: str

    async def synthesize(self, utterance: Utterance, voice_id: str, destination: Path) -> None: ...


# ----------------------------
# Streaming to disk
# ----------------------------
@contextmanager
def _open_destination(destination: Path) -> Iterator[BinaryIO]:
    try:
        fh = open(destination, "wb")
    except OSError as exc:
        raise SynthesisError(f"Failed to create output file {destination}") from exc
    try:
        yield fh
        try:
            fh.flush()
            os.fsync(fh.fileno())
        except OSError as exc:
            raise SynthesisError(f"Failed to flush {destination}") from exc
    finally:
        try:
            fh.close()
        except OSError:
            # Only reachable after a write or flush failure that is already being raised.
            pass


async def stream_to_file(chunks: AsyncIterator[bytes], destination: Path, service: str) -> None:
    """Write chunks to destination as they arrive, then flush to disk."""
    with _open_destination(destination) as fh:
        try:
            async for chunk in chunks:
                try:
                    fh.write(chunk)
                except OSError as exc:
                    raise SynthesisError(f"Failed to write chunk to {destination}") from exc
        except (httpx.HTTPError, httpx.StreamError, openai.APIError) as exc:
            raise SynthesisError(f"Failed to read chunk from {service} response") from exc


# ----------------------------
# ElevenLabs
# ----------------------------
class ElevenLabsSynthesizer:
    """Text-to-speech through the ElevenLabs streaming endpoint."""

    name = "elevenlabs"

    def __init__(self, client: Optional[httpx.AsyncClient] = None):
        self.client = client

    async def synthesize(self, utterance: Utterance, voice_id: str, destination: Path) -> None:
        # The key is looked up per call, so a missing key only fails once audio is needed.
        api_key = require_secret(ELEVENLABS_API_KEY)
        if self.client is not None:
            await self._synthesize(self.client, api_key, utterance, voice_id, destination)
            return
        async with httpx.AsyncClient(timeout=SYNTHESIS_TIMEOUT) as client:
            await self._synthesize(client, api_key, utterance, voice_id, destination)

    async def _synthesize(
        self,
        client: httpx.AsyncClient,
        api_key: str,
        utterance: Utterance,
        voice_id: str,
        destination: Path,
    ) -> None:
        payload = {
            "text": utterance.words,
            "model_id": ELEVENLABS_MODEL_ID,
            "voice_settings": dict(ELEVENLABS_VOICE_SETTINGS),
        }
        request = client.build_request(
            "POST",
            ELEVENLABS_URL.format(voice_id=voice_id),
            headers={"xi-api-key": api_key},
            json=payload,
        )
        try:
            response = await client.send(request, stream=True)
        except httpx.HTTPError as exc:
            raise SynthesisError("Failed to send request to ElevenLabs API") from exc

        try:
            try:
                response.raise_for_status()
            except httpx.HTTPStatusError as exc:
                raise SynthesisError(
                    f"ElevenLabs API error (status {response.status_code}) for voice '{voice_id}'"
                ) from exc
            await stream_to_file(response.aiter_bytes(), destination, "ElevenLabs")
        finally:
            await response.aclose()


# ----------------------------
# OpenAI
# ----------------------------
class OpenAISynthesizer:
    """Text-to-speech through OpenAI; voice identifiers are OpenAI voice names."""

    name = "openai"

    def __init__(self, client: Optional[AsyncOpenAI] = None, tts_model: str = OPENAI_TTS_MODEL):
        self.client = client
        self.tts_model = tts_model

    async def synthesize(self, utterance: Utterance, voice_id: str, destination: Path) -> None:
        if self.client is not None:
            await self._synthesize(self.client, utterance, voice_id, destination)
            return
        api_key = require_secret(OPENAI_API_KEY)
        async with AsyncOpenAI(api_key=api_key, max_retries=0) as client:
            await self._synthesize(client, utterance, voice_id, destination)

    async def _synthesize(
        self, client: AsyncOpenAI, utterance: Utterance, voice_id: str, destination: Path
    ) -> None:
        tts_params = {
            "model": self.tts_model,
            "voice": voice_id,
            "input": utterance.words,
            "response_format": AUDIO_FORMAT,
        }
        try:
            async with client.audio.speech.with_streaming_response.create(**tts_params) as response:
                await stream_to_file(response.iter_bytes(), destination, "OpenAI")
        except openai.APIStatusError as exc:
            raise SynthesisError(
                f"OpenAI API error (status {exc.status_code}) for voice '{voice_id}'"
            ) from exc
        except openai.APIError as exc:
            raise SynthesisError("Failed to send request to OpenAI API") from exc


def get_synthesizer(provider: str) -> Synthesizer:
    if provider == "elevenlabs":
        return ElevenLabsSynthesizer()
    if provider == "openai":
        return OpenAISynthesizer()
    raise ConfigurationError(
        f"Unknown TTS provider '{provider}' (expected one of: {', '.join(TTS_PROVIDERS)})"
    )
