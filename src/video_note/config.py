from __future__ import annotations

import json
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = "config.json"
DEFAULT_BASE_URL = "https://api.openai.com/v1"
DEFAULT_TIMEOUT = 300
API_KEY_ENV = "OPENAI_API_KEY"


@dataclass(frozen=True)
class Config:
    """Settings shared by the transcriber and the summarizer."""

    api_key: str
    model: str
    transcription_model: str | None = None
    base_url: str = DEFAULT_BASE_URL
    timeout: int = DEFAULT_TIMEOUT

    @property
    def asr_model(self) -> str:
        return self.transcription_model or self.model


def load_config(path: Path | str = DEFAULT_CONFIG_PATH) -> Config:
    """Load ``path`` as JSON and build a :class:`Config`.

    The file must hold ``openai_api_key`` and ``model``. The key may be left
    empty when ``OPENAI_API_KEY`` is exported instead.
    """

    config_path = Path(path)
    try:
        raw = config_path.read_text(encoding="utf-8")
    except FileNotFoundError as exc:
        raise ConfigError(f"config file not found: {config_path}") from exc
    except OSError as exc:
        raise ConfigError(f"failed to read config file {config_path}: {exc}") from exc

    try:
        data: Any = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ConfigError(f"failed to parse config file {config_path}: {exc}") from exc

    if not isinstance(data, dict):
        raise ConfigError(f"config file {config_path} must contain a JSON object")

    api_key = data.get("openai_api_key") or os.getenv(API_KEY_ENV)
    if not api_key:
        raise ConfigError("OpenAI API key must not be empty")

    model = data.get("model")
    if not isinstance(model, str) or not model.strip():
        raise ConfigError("model must be set in the config file")

    transcription_model = data.get("transcription_model")
    if transcription_model is not None and not isinstance(transcription_model, str):
        raise ConfigError("transcription_model must be a string")

    timeout = data.get("timeout", DEFAULT_TIMEOUT)
    if not isinstance(timeout, int) or isinstance(timeout, bool) or timeout <= 0:
        raise ConfigError("timeout must be a positive integer")

    config = Config(
        api_key=str(api_key),
        model=model.strip(),
        transcription_model=(transcription_model or "").strip() or None,
        base_url=str(data.get("base_url") or DEFAULT_BASE_URL).rstrip("/"),
        timeout=timeout,
    )
    logger.debug("Loaded config from %s (model=%s)", config_path, config.model)
    return config
