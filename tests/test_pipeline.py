from __future__ import annotations

import importlib.util
import json
import logging
from pathlib import Path
from unittest.mock import MagicMock

import pytest

from video_note.config import Config

CONFIG = Config(api_key="sk-test", model="gpt-test")


def _load_cli():
    script_path = Path(__file__).resolve().parent.parent / "scripts" / "video_note.py"
    spec = importlib.util.spec_from_file_location("video_note_cli", script_path)
    assert spec is not None and spec.loader is not None
    cli = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(cli)  # type: ignore[assignment]
    return cli


def _fake_transcriber(text: str = "transcribed text") -> MagicMock:
    transcriber = MagicMock()

    def transcribe_to_file(audio_path: Path, output_path: Path) -> Path:
        Path(output_path).write_text(text, encoding="utf-8")
        return Path(output_path)

    transcriber.transcribe_to_file.side_effect = transcribe_to_file
    return transcriber


def test_default_output_path_for_generate_and_transcribe() -> None:
    from video_note.pipeline import default_output_path

    assert default_output_path("video.mp4") == Path("video.txt")
    assert default_output_path(Path("clips/talk.final.mov")) == Path("clips/talk.final.txt")


def test_default_output_path_for_summarize() -> None:
    from video_note.pipeline import default_output_path

    assert default_output_path("transcript.txt", ".summary.txt") == Path("transcript.summary.txt")


def test_generate_runs_end_to_end(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from video_note import pipeline

    seen: dict[str, Path] = {}

    def fake_extract(video: Path, audio: Path) -> Path:
        seen["workdir"] = Path(audio).parent
        Path(audio).write_bytes(b"audio")
        return Path(audio)

    monkeypatch.setattr("video_note.pipeline.extract_audio", fake_extract)

    transcriber = _fake_transcriber()
    summarizer = MagicMock()

    def summarize_file(source: Path, target: Path, ratio: float) -> Path:
        assert Path(source).read_text(encoding="utf-8") == "transcribed text"
        Path(target).write_text("# Notes", encoding="utf-8")
        return Path(target)

    summarizer.summarize_file.side_effect = summarize_file

    video = tmp_path / "input.mp4"
    result = pipeline.generate_notes(video, transcriber=transcriber, summarizer=summarizer)

    assert result == tmp_path / "input.txt"
    assert result.read_text(encoding="utf-8") == "# Notes"
    audio_arg = transcriber.transcribe_to_file.call_args[0][0]
    assert Path(audio_arg).name == "audio.mp3"
    assert not seen["workdir"].exists()


def test_generate_clamps_ratio(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from video_note import pipeline

    monkeypatch.setattr("video_note.pipeline.extract_audio", lambda video, audio: Path(audio))
    summarizer = MagicMock()

    pipeline.generate_notes(
        tmp_path / "input.mp4",
        tmp_path / "notes.txt",
        ratio=0.9,
        transcriber=_fake_transcriber(),
        summarizer=summarizer,
    )

    assert summarizer.summarize_file.call_args[0][2] == 0.5


def test_generate_wraps_extraction_failure_and_cleans_up(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from video_note import pipeline
    from video_note.errors import AudioExtractionError, PipelineError

    seen: dict[str, Path] = {}

    def failing_extract(video: Path, audio: Path) -> Path:
        seen["workdir"] = Path(audio).parent
        raise AudioExtractionError("ffmpeg exited with status 1")

    monkeypatch.setattr("video_note.pipeline.extract_audio", failing_extract)
    transcriber = _fake_transcriber()

    with pytest.raises(PipelineError) as excinfo:
        pipeline.generate_notes(tmp_path / "input.mp4", transcriber=transcriber, summarizer=MagicMock())

    assert excinfo.value.stage == "extract audio"
    assert str(excinfo.value).startswith("extract audio: ")
    transcriber.transcribe_to_file.assert_not_called()
    assert not seen["workdir"].exists()


def test_generate_builds_clients_from_config(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from video_note import pipeline

    monkeypatch.setattr("video_note.pipeline.extract_audio", lambda video, audio: Path(audio))
    created: dict[str, dict] = {}

    class StubTranscriber:
        def __init__(self, **kwargs) -> None:
            created["transcriber"] = kwargs

        def transcribe_to_file(self, audio_path: Path, output_path: Path) -> Path:
            Path(output_path).write_text("text", encoding="utf-8")
            return Path(output_path)

    class StubSummarizer:
        def __init__(self, **kwargs) -> None:
            created["summarizer"] = kwargs

        def summarize_file(self, source: Path, target: Path, ratio: float) -> Path:
            Path(target).write_text("notes", encoding="utf-8")
            return Path(target)

    monkeypatch.setattr("video_note.pipeline.OpenAITranscriber", StubTranscriber)
    monkeypatch.setattr("video_note.pipeline.ChatSummarizer", StubSummarizer)

    config = Config(api_key="sk-test", model="gpt-test", transcription_model="whisper-1")
    pipeline.generate_notes(tmp_path / "input.mp4", config=config)

    assert created["transcriber"]["api_key"] == "sk-test"
    assert created["transcriber"]["model"] == "whisper-1"
    assert created["summarizer"]["model"] == "gpt-test"


def test_transcribe_audio_wraps_failures(tmp_path: Path) -> None:
    from video_note import pipeline
    from video_note.errors import PipelineError, TranscriptionError

    transcriber = MagicMock()
    transcriber.transcribe_to_file.side_effect = TranscriptionError("Transcription request failed: 500")

    with pytest.raises(PipelineError, match="transcribe audio: Transcription request failed"):
        pipeline.transcribe_audio(tmp_path / "audio.mp3", transcriber=transcriber)


def test_transcribe_audio_defaults_output_next_to_input(tmp_path: Path) -> None:
    from video_note import pipeline

    transcriber = _fake_transcriber()

    result = pipeline.transcribe_audio(tmp_path / "talk.mp3", transcriber=transcriber)

    assert result == tmp_path / "talk.txt"


def test_summarize_transcript_rejects_out_of_range_ratio(tmp_path: Path) -> None:
    from video_note import pipeline

    summarizer = MagicMock()

    with pytest.raises(ValueError):
        pipeline.summarize_transcript(tmp_path / "transcript.txt", ratio=0.6, summarizer=summarizer)

    summarizer.summarize_file.assert_not_called()


def test_summarize_transcript_defaults_output(tmp_path: Path) -> None:
    from video_note import pipeline

    summarizer = MagicMock()
    source = tmp_path / "transcript.txt"

    result = pipeline.summarize_transcript(source, ratio=0.25, summarizer=summarizer)

    assert result == tmp_path / "transcript.summary.txt"
    summarizer.summarize_file.assert_called_once_with(source, tmp_path / "transcript.summary.txt", 0.25)


def test_cli_parses_go_style_flags() -> None:
    cli = _load_cli()

    args = cli.parse_args(["-config", "my.json", "generate", "-i", "video.mp4", "-ratio", "0.3"])

    assert args.config == "my.json"
    assert args.command == "generate"
    assert args.input == "video.mp4"
    assert args.output is None
    assert args.ratio == 0.3


def test_cli_requires_input_flag(capsys: pytest.CaptureFixture[str]) -> None:
    cli = _load_cli()

    with pytest.raises(SystemExit) as excinfo:
        cli.parse_args(["summarize"])

    assert excinfo.value.code == 2


def test_cli_summarize_rejects_bad_ratio(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    cli = _load_cli()
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"openai_api_key": "sk-test", "model": "gpt-test"}))
    transcript = tmp_path / "transcript.txt"
    transcript.write_text("text")

    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as excinfo:
        cli.main(["-config", str(config_path), "summarize", "-i", str(transcript), "-ratio", "0.9"])

    assert excinfo.value.code == 1
    assert "summary ratio must be between" in caplog.text


def test_cli_exits_when_config_missing(tmp_path: Path, caplog: pytest.LogCaptureFixture) -> None:
    cli = _load_cli()

    with caplog.at_level(logging.ERROR), pytest.raises(SystemExit) as excinfo:
        cli.main(["-config", str(tmp_path / "absent.json"), "transcribe", "-i", "audio.mp3"])

    assert excinfo.value.code == 1
    assert "Failed to load config" in caplog.text


def test_cli_generate_passes_config_and_ratio(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    cli = _load_cli()
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"openai_api_key": "sk-test", "model": "gpt-test"}))
    captured: dict = {}

    def fake_generate(video, output, *, ratio, config):
        captured.update(video=video, output=output, ratio=ratio, config=config)
        return Path("video.txt")

    monkeypatch.setattr(cli, "generate_notes", fake_generate)

    cli.main(["-config", str(config_path), "generate", "-i", "video.mp4", "-o", "notes.txt", "-ratio", "0.7"])

    assert captured["video"] == "video.mp4"
    assert captured["output"] == "notes.txt"
    assert captured["ratio"] == 0.7
    assert captured["config"] == CONFIG


def test_summarize_transcript_labels_write_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    from video_note import pipeline
    from video_note.errors import PipelineError
    from video_note.summarizer import ChatSummarizer

    response = MagicMock()
    response.json.return_value = {"choices": [{"message": {"content": "# Notes"}}]}
    response.raise_for_status.return_value = None
    monkeypatch.setattr("video_note.summarizer.requests.post", lambda *args, **kwargs: response)

    source = tmp_path / "transcript.txt"
    source.write_text("some transcript text", encoding="utf-8")

    with pytest.raises(PipelineError) as excinfo:
        pipeline.summarize_transcript(
            source,
            tmp_path / "missing" / "out.txt",
            ratio=0.2,
            summarizer=ChatSummarizer(api_key="token"),
        )

    assert excinfo.value.stage == "summarize transcript"


def test_summarize_transcript_rejects_nan_ratio(tmp_path: Path) -> None:
    from video_note import pipeline

    summarizer = MagicMock()

    with pytest.raises(ValueError):
        pipeline.summarize_transcript(tmp_path / "transcript.txt", ratio=float("nan"), summarizer=summarizer)

    summarizer.summarize_file.assert_not_called()
