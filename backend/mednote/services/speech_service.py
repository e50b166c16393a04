# backend/mednote/services/speech_service.py

import re
import tempfile
from pathlib import Path
from typing import Optional

import openai
from openai import AsyncOpenAI

from mednote.core.config import Settings
from mednote.core.errors import ClientError, UpstreamError
from mednote.core.logging import get_logger

logger = get_logger(__name__)

ALLOWED_AUDIO_TYPES = frozenset([
    "audio/webm",
    "audio/webm;codecs=opus",
    "audio/wav",
    "audio/wave",
    "audio/x-wav",
    "audio/mp3",
    "audio/mpeg",
    "audio/mp4",
    "audio/m4a",
    "audio/x-m4a",
])

DEFAULT_FILENAME = "audio.webm"
_SAFE_SUFFIX = re.compile(r"\.[A-Za-z0-9]{1,10}")


def safe_audio_filename(filename: Optional[str]) -> str:
    """Reduce a client-supplied name to ``audio<ext>``; only the extension is kept."""
    suffix = Path(filename or "").suffix
    if _SAFE_SUFFIX.fullmatch(suffix):
        return f"audio{suffix.lower()}"
    return DEFAULT_FILENAME


class SpeechService:
    """
    Speech-to-text through the OpenAI transcription endpoint.

    The provider infers the audio format from the file extension, so the payload
    is written as ``audio<ext>`` inside a per-call temporary directory that is
    removed on every exit path.
    """

    def __init__(self, client: AsyncOpenAI, settings: Settings, temp_dir: Optional[str] = None):
        self._client = client
        self._settings = settings
        self._temp_dir = temp_dir

    def validate(self, audio: bytes, content_type: Optional[str] = None) -> None:
        if not audio:
            raise ClientError("Audio file is required")
        if len(audio) > self._settings.MAX_AUDIO_BYTES:
            raise ClientError(
                "Audio file too large",
                {"size": len(audio), "max_size": self._settings.MAX_AUDIO_BYTES},
            )
        if content_type and content_type.lower() not in ALLOWED_AUDIO_TYPES:
            raise ClientError(
                f"Unsupported audio format ({content_type}). Use WebM, WAV, MP3 or M4A.",
                {"content_type": content_type},
            )

    async def transcribe(
        self,
        audio: bytes,
        filename: str = DEFAULT_FILENAME,
        content_type: Optional[str] = None,
    ) -> str:
        self.validate(audio, content_type)
        logger.info(f"Transcribing {filename!r} ({len(audio)} bytes)")

        with tempfile.TemporaryDirectory(prefix="mednote-", dir=self._temp_dir) as workdir:
            audio_path = Path(workdir) / safe_audio_filename(filename)
            audio_path.write_bytes(audio)
            try:
                with audio_path.open("rb") as audio_file:
                    transcript = await self._client.audio.transcriptions.create(
                        model=self._settings.TRANSCRIPTION_MODEL,
                        file=audio_file,
                        response_format="text",
                        timeout=self._settings.TRANSCRIPTION_TIMEOUT,
                    )
            except openai.APIError as e:
                logger.error(f"Transcription failed: {type(e).__name__}: {e}")
                raise UpstreamError.from_provider(e, audio=True) from e

        # response_format="text" yields a plain string
        text = transcript if isinstance(transcript, str) else getattr(transcript, "text", "")
        return (text or "").strip()
