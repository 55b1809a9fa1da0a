from __future__ import annotations


class VideoNoteError(RuntimeError):
    """Base class for every failure raised by video_note."""


class ConfigError(VideoNoteError):
    """Raised when the configuration file cannot be loaded."""


class AudioExtractionError(VideoNoteError):
    """Raised when ffmpeg fails to produce the audio track."""


class TranscriptionError(VideoNoteError):
    """Raised when the speech-to-text request fails."""


class SummarizationError(VideoNoteError):
    """Raised when a chat-completion request fails."""


class PipelineError(VideoNoteError):
    """Wraps a stage failure with a human-readable stage label."""

    def __init__(self, stage: str, cause: BaseException) -> None:
        self.stage = stage
        self.cause = cause
        super().__init__(f"{stage}: {cause}")
