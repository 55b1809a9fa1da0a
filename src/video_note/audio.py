from __future__ import annotations

import logging
import shutil
import subprocess
from pathlib import Path

from .errors import AudioExtractionError

logger = logging.getLogger(__name__)

FFMPEG = "ffmpeg"


def extract_audio(
    input_video: Path | str,
    output_path: Path | str | None = None,
    *,
    audio_codec: str = "libmp3lame",
) -> Path:
    """Strip the video stream from ``input_video`` and encode its audio.

    Args:
        input_video: Path to the source video file.
        output_path: Optional target path for the extracted audio. Defaults to the
            same stem as ``input_video`` with a ``.mp3`` suffix.
        audio_codec: Encoder passed to ffmpeg's ``-acodec``.

    Returns:
        Path to the extracted audio file.
    """

    input_path = Path(input_video)
    if not input_path.is_file():
        raise AudioExtractionError(f"Video file does not exist: {input_path}")

    target = input_path.with_suffix(".mp3") if output_path is None else Path(output_path)

    if shutil.which(FFMPEG) is None:
        raise AudioExtractionError("ffmpeg was not found on PATH")

    command = [
        FFMPEG,
        "-y",
        "-i",
        str(input_path),
        "-vn",
        "-acodec",
        audio_codec,
        str(target),
    ]

    logger.debug("Running %s", " ".join(command))
    try:
        subprocess.run(
            command,
            check=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
        )
    except subprocess.CalledProcessError as exc:
        output = exc.output.decode("utf-8", errors="replace") if exc.output else ""
        raise AudioExtractionError(
            f"ffmpeg exited with status {exc.returncode}\noutput: {output.strip()}"
        ) from exc

    return target
