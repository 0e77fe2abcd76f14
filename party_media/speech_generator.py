"""
Narrator voice: Gemini TTS returns raw 16-bit PCM, which we wrap in a WAV
container so browsers can play and download it.
"""

import io
import re
import wave

from google.genai import types

from . import config
from .gemini_client import GenerationError, block_reason, find_inline_data

DEFAULT_SAMPLE_RATE = 24000
WAV_HEADER_SIZE = 44

_RATE_RE = re.compile(r"rate=(\d+)")


def pcm_to_wav(pcm: bytes, sample_rate: int = DEFAULT_SAMPLE_RATE, channels: int = 1, sample_width: int = 2) -> bytes:
    buffer = io.BytesIO()
    with wave.open(buffer, "wb") as wav_file:
        wav_file.setnchannels(channels)
        wav_file.setsampwidth(sample_width)
        wav_file.setframerate(sample_rate)
        wav_file.writeframes(pcm)
    return buffer.getvalue()


def sample_rate_from_mime(mime_type: str) -> int:
    """audio/L16;codec=pcm;rate=24000 -> 24000"""
    match = _RATE_RE.search(mime_type or "")
    return int(match.group(1)) if match else DEFAULT_SAMPLE_RATE


def build_narration_prompt(script: str) -> str:
    return f"Leia com a voz animada de um locutor de festa, em português do Brasil: {script}"


async def generate_speech(client, script: str) -> bytes:
    script = (script or "").strip()
    if not script:
        raise ValueError("O roteiro do narrador está vazio.")

    print(f"\n[SPEECH] Generating narrator audio ({len(script)} chars, voice {config.TTS_VOICE})...")

    response = await client.aio.models.generate_content(
        model=config.TTS_MODEL,
        contents=build_narration_prompt(script),
        config=types.GenerateContentConfig(
            response_modalities=["AUDIO"],
            speech_config=types.SpeechConfig(
                voice_config=types.VoiceConfig(
                    prebuilt_voice_config=types.PrebuiltVoiceConfig(voice_name=config.TTS_VOICE),
                )
            ),
        ),
    )

    inline = find_inline_data(response)
    if inline is None:
        raise GenerationError(f"Speech generation failed. Reason: {block_reason(response)}")

    pcm, mime_type = inline
    wav = pcm_to_wav(pcm, sample_rate=sample_rate_from_mime(mime_type))
    print(f"✓ Audio ready: {len(wav)} bytes")
    return wav
