from __future__ import annotations

import logging
import math
import os
import threading
import time
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import Any

import requests

from .chunking import DEFAULT_CHUNK_SIZE, split_text_into_chunks
from .config import API_KEY_ENV, DEFAULT_BASE_URL
from .errors import SummarizationError

logger = logging.getLogger(__name__)

MIN_RATIO = 0.1
MAX_RATIO = 0.5
DEFAULT_RATIO = 0.2

SUMMARY_SEPARATOR = "\n\n--- end of part ---\n\n"

PROMPT_TEMPLATE = (
    "Write detailed notes summarizing the following video transcript, "
    "keeping the key information and important details:\n\n"
    "Content:\n"
    "{text}\n\n"
    "Produce a concise but informative summary of roughly {percent} of the original length."
)


def clamp_ratio(ratio: float) -> float:
    """Force ``ratio`` into ``[MIN_RATIO, MAX_RATIO]``."""

    if math.isnan(ratio):
        raise ValueError("summary ratio must be a number, got nan")
    return min(max(ratio, MIN_RATIO), MAX_RATIO)


def validate_ratio(ratio: float) -> float:
    if not MIN_RATIO <= ratio <= MAX_RATIO:
        raise ValueError(f"summary ratio must be between {MIN_RATIO} and {MAX_RATIO}, got {ratio}")
    return ratio


def build_prompt(text: str, ratio: float) -> str:
    return PROMPT_TEMPLATE.format(text=text, percent=f"{ratio * 100:.0f}%")


def max_tokens_for(text: str, ratio: float) -> int:
    """Rough output budget: the chunk's character count scaled by ``ratio`` and 1.5."""

    return int(len(text) * ratio * 1.5)


class _FragmentCollector:
    """Thread-safe store for per-chunk summaries keyed by chunk index."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._fragments: dict[int, str] = {}

    def add(self, index: int, fragment: str) -> None:
        with self._lock:
            self._fragments[index] = fragment

    def ordered(self) -> list[str]:
        with self._lock:
            return [self._fragments[index] for index in sorted(self._fragments)]


class ChatSummarizer:
    """Chunked summarizer backed by an OpenAI-compatible chat-completion endpoint."""

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str = "gpt-4o-mini",
        base_url: str = DEFAULT_BASE_URL,
        timeout: int = 120,
        temperature: float = 0.3,
        stagger_seconds: float = 2.0,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
    ) -> None:
        self.api_key = api_key or os.getenv(API_KEY_ENV)
        if not self.api_key:
            raise RuntimeError(f"{API_KEY_ENV} is not set")

        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.temperature = temperature
        self.stagger_seconds = stagger_seconds
        self.chunk_size = chunk_size

    def summarize_chunk(self, text: str, ratio: float) -> str:
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": [
                {"role": "user", "content": build_prompt(text, ratio)},
            ],
            "temperature": self.temperature,
            "max_tokens": max_tokens_for(text, ratio),
        }

        headers = {
            "Authorization": f"Bearer {self.api_key}",
            "Content-Type": "application/json",
        }

        try:
            response = requests.post(
                f"{self.base_url}/chat/completions",
                headers=headers,
                json=payload,
                timeout=self.timeout,
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise SummarizationError(f"Summarization request failed: {exc}") from exc

        try:
            data = response.json()
            content = data["choices"][0]["message"]["content"]
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise SummarizationError("Unexpected summarization response payload") from exc

        if not isinstance(content, str):
            raise SummarizationError("Summarization response content is not text")

        return content

    def summarize(self, text: str, ratio: float = DEFAULT_RATIO) -> str:
        """Summarize ``text`` chunk by chunk and join the fragments.

        Every chunk gets its own worker thread; chunk ``i`` waits
        ``i * stagger_seconds`` before sending its request. The first failure
        observed is raised immediately; workers still in flight are left to
        finish in the background and their results are discarded.
        """

        chunks = split_text_into_chunks(text, self.chunk_size)
        if not chunks:
            return ""

        logger.info("Summarizing %d chunk(s) at ratio %.2f", len(chunks), ratio)
        collector = _FragmentCollector()

        executor = ThreadPoolExecutor(max_workers=len(chunks))
        futures = {
            executor.submit(self._summarize_part, index, chunk, ratio, collector): index
            for index, chunk in enumerate(chunks)
        }
        try:
            for future in as_completed(futures):
                index = futures[future]
                try:
                    future.result()
                except SummarizationError as exc:
                    logger.error("Part %d/%d failed: %s", index + 1, len(chunks), exc)
                    raise
        finally:
            executor.shutdown(wait=False)

        return SUMMARY_SEPARATOR.join(collector.ordered())

    def summarize_file(
        self,
        input_path: Path | str,
        output_path: Path | str,
        ratio: float = DEFAULT_RATIO,
    ) -> Path:
        """Read a transcript, summarize it and write the notes to ``output_path``."""

        source = Path(input_path)
        try:
            transcript = source.read_text(encoding="utf-8")
        except OSError as exc:
            raise SummarizationError(f"Failed to read transcript {source}: {exc}") from exc

        summary = self.summarize(transcript, ratio)

        target = Path(output_path)
        try:
            target.write_text(summary, encoding="utf-8")
        except OSError as exc:
            raise SummarizationError(f"Failed to write summary {target}: {exc}") from exc
        return target

    def _summarize_part(
        self,
        index: int,
        chunk: str,
        ratio: float,
        collector: _FragmentCollector,
    ) -> None:
        delay = index * self.stagger_seconds
        if delay > 0:
            time.sleep(delay)

        logger.debug("Sending part %d (%d characters)", index + 1, len(chunk))
        try:
            fragment = self.summarize_chunk(chunk, ratio)
        except SummarizationError as exc:
            raise SummarizationError(f"summary of part {index + 1} failed: {exc}") from exc

        collector.add(index, fragment)
        logger.info("Finished part %d", index + 1)
