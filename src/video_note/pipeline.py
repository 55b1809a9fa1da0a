from __future__ import annotations

import logging
from pathlib import Path
from tempfile import TemporaryDirectory
from typing import Optional

from .audio import extract_audio
from .config import Config
from .errors import PipelineError, VideoNoteError
from .summarizer import DEFAULT_RATIO, ChatSummarizer, clamp_ratio, validate_ratio
from .transcriber import OpenAITranscriber

logger = logging.getLogger(__name__)

STAGE_EXTRACT = "extract audio"
STAGE_TRANSCRIBE = "transcribe audio"
STAGE_SUMMARIZE = "summarize transcript"


def default_output_path(input_path: Path | str, suffix: str = ".txt") -> Path:
    """Swap the extension of ``input_path`` for ``suffix``.

    ``video.mp4`` becomes ``video.txt``; ``transcript.txt`` with
    ``suffix=".summary.txt"`` becomes ``transcript.summary.txt``.
    """

    source = Path(input_path)
    return source.with_name(source.stem + suffix)


def _build_transcriber(config: Optional[Config]) -> OpenAITranscriber:
    if config is None:
        return OpenAITranscriber()
    return OpenAITranscriber(
        api_key=config.api_key,
        model=config.asr_model,
        base_url=config.base_url,
        timeout=config.timeout,
    )


def _build_summarizer(config: Optional[Config]) -> ChatSummarizer:
    if config is None:
        return ChatSummarizer()
    return ChatSummarizer(
        api_key=config.api_key,
        model=config.model,
        base_url=config.base_url,
        timeout=config.timeout,
    )


def transcribe_audio(
    audio_path: Path | str,
    output_path: Path | str | None = None,
    *,
    config: Optional[Config] = None,
    transcriber: Optional[OpenAITranscriber] = None,
) -> Path:
    target = Path(output_path) if output_path else default_output_path(audio_path)
    asr = transcriber if transcriber is not None else _build_transcriber(config)

    logger.info("Transcribing audio...")
    try:
        asr.transcribe_to_file(audio_path, target)
    except VideoNoteError as exc:
        raise PipelineError(STAGE_TRANSCRIBE, exc) from exc
    return target


def summarize_transcript(
    transcript_path: Path | str,
    output_path: Path | str | None = None,
    *,
    ratio: float = DEFAULT_RATIO,
    config: Optional[Config] = None,
    summarizer: Optional[ChatSummarizer] = None,
) -> Path:
    """Summarize an existing transcript file, rejecting out-of-range ratios."""

    validate_ratio(ratio)
    target = Path(output_path) if output_path else default_output_path(transcript_path, ".summary.txt")
    return _summarize(transcript_path, target, ratio, config, summarizer)


def generate_notes(
    video_path: Path | str,
    output_path: Path | str | None = None,
    *,
    ratio: float = DEFAULT_RATIO,
    config: Optional[Config] = None,
    transcriber: Optional[OpenAITranscriber] = None,
    summarizer: Optional[ChatSummarizer] = None,
) -> Path:
    """Run extract, transcribe and summarize on ``video_path``.

    Intermediate files live in a temporary directory that is removed whether
    or not the run succeeds. ``ratio`` is clamped rather than validated.
    """

    video = Path(video_path)
    target = Path(output_path) if output_path else default_output_path(video)
    ratio = clamp_ratio(ratio)

    with TemporaryDirectory(prefix="video-note-") as tmpdir:
        workdir = Path(tmpdir)
        audio_path = workdir / "audio.mp3"
        transcript_path = workdir / "transcript.txt"

        logger.info("Extracting audio from %s...", video)
        try:
            extract_audio(video, audio_path)
        except VideoNoteError as exc:
            raise PipelineError(STAGE_EXTRACT, exc) from exc

        transcribe_audio(audio_path, transcript_path, config=config, transcriber=transcriber)
        _summarize(transcript_path, target, ratio, config, summarizer)

    return target


def _summarize(
    transcript_path: Path | str,
    target: Path,
    ratio: float,
    config: Optional[Config],
    summarizer: Optional[ChatSummarizer],
) -> Path:
    llm = summarizer if summarizer is not None else _build_summarizer(config)

    logger.info("Generating summary notes...")
    try:
        llm.summarize_file(transcript_path, target, ratio)
    except VideoNoteError as exc:
        raise PipelineError(STAGE_SUMMARIZE, exc) from exc
    return target
