from __future__ import annotations

import logging
import os
from pathlib import Path

import requests

from .config import API_KEY_ENV, DEFAULT_BASE_URL
from .errors import TranscriptionError

logger = logging.getLogger(__name__)


class OpenAITranscriber:
    """Client for the OpenAI-compatible ``/audio/transcriptions`` endpoint."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "whisper-1",
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 300,
    ) -> None:
        self.api_key = api_key or os.getenv(API_KEY_ENV)
        if not self.api_key:
            raise RuntimeError(f"{API_KEY_ENV} is not set")

        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    def transcribe(self, audio_path: Path | str) -> str:
        path = Path(audio_path)
        if not path.is_file():
            raise TranscriptionError(f"Audio file not found: {path}")

        headers = {"Authorization": f"Bearer {self.api_key}"}
        data = {"model": self.model, "response_format": "json"}

        logger.debug("Uploading %s to %s/audio/transcriptions", path, self.base_url)
        try:
            with path.open("rb") as handle:
                response = requests.post(
                    f"{self.base_url}/audio/transcriptions",
                    headers=headers,
                    data=data,
                    files={"file": (path.name, handle)},
                    timeout=self.timeout,
                )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise TranscriptionError(f"Transcription request failed: {exc}") from exc
        except OSError as exc:
            raise TranscriptionError(f"Failed to open audio file {path}: {exc}") from exc

        try:
            text = response.json()["text"]
        except (ValueError, KeyError, TypeError) as exc:
            raise TranscriptionError("Unexpected transcription response payload") from exc

        if not isinstance(text, str):
            raise TranscriptionError("Transcription response text is not a string")

        return text

    def transcribe_to_file(self, audio_path: Path | str, output_path: Path | str) -> Path:
        """Transcribe ``audio_path`` and write the text to ``output_path``."""

        text = self.transcribe(audio_path)
        target = Path(output_path)
        try:
            target.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise TranscriptionError(f"Failed to write transcript {target}: {exc}") from exc
        logger.debug("Wrote %d characters of transcript to %s", len(text), target)
        return target
