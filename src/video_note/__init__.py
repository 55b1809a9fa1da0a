"""Turn videos into summary notes: extract audio, transcribe, summarize."""

from .audio import extract_audio
from .chunking import split_text_into_chunks
from .config import Config, load_config
from .errors import (
    AudioExtractionError,
    ConfigError,
    PipelineError,
    SummarizationError,
    TranscriptionError,
    VideoNoteError,
)
from .pipeline import default_output_path, generate_notes, summarize_transcript, transcribe_audio
from .summarizer import ChatSummarizer, clamp_ratio, validate_ratio
from .transcriber import OpenAITranscriber

__all__ = [
    "AudioExtractionError",
    "ChatSummarizer",
    "Config",
    "ConfigError",
    "OpenAITranscriber",
    "PipelineError",
    "SummarizationError",
    "TranscriptionError",
    "VideoNoteError",
    "clamp_ratio",
    "default_output_path",
    "extract_audio",
    "generate_notes",
    "load_config",
    "split_text_into_chunks",
    "summarize_transcript",
    "transcribe_audio",
    "validate_ratio",
]
