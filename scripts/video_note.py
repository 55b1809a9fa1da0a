import argparse
import logging
import sys
from pathlib import Path
from typing import Callable

from video_note import (
	ConfigError,
	VideoNoteError,
	generate_notes,
	load_config,
	summarize_transcript,
	transcribe_audio,
)
from video_note.config import Config, DEFAULT_CONFIG_PATH
from video_note.summarizer import DEFAULT_RATIO, MAX_RATIO, MIN_RATIO

logger = logging.getLogger("video_note.cli")

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
	parser = argparse.ArgumentParser(
		prog="video-note",
		description="Generate summary notes from a video: extract audio, transcribe it, summarize it.",
	)
	parser.add_argument(
		"-config",
		"--config",
		dest="config",
		default=DEFAULT_CONFIG_PATH,
		help="Path to the JSON config file",
	)
	parser.add_argument(
		"-v",
		"--verbose",
		dest="verbose",
		action="store_true",
		help="Enable debug logging",
	)
	subparsers = parser.add_subparsers(dest="command", metavar="{generate,transcribe,summarize}")
	subparsers.required = True

	generate = subparsers.add_parser("generate", help="Generate notes from a video")
	generate.add_argument("-i", "--input", dest="input", required=True, help="Path to the input video file")
	generate.add_argument(
		"-o",
		"--output",
		dest="output",
		help="Path to the output notes file (defaults to the video name with .txt)",
	)
	generate.add_argument(
		"-ratio",
		"--ratio",
		dest="ratio",
		type=float,
		default=DEFAULT_RATIO,
		help=f"Summary ratio ({MIN_RATIO}-{MAX_RATIO}), clamped into range",
	)

	transcribe = subparsers.add_parser("transcribe", help="Transcribe an audio file to text")
	transcribe.add_argument("-i", "--input", dest="input", required=True, help="Path to the input audio file")
	transcribe.add_argument(
		"-o",
		"--output",
		dest="output",
		help="Path to the output transcript file (defaults to the audio name with .txt)",
	)

	summarize = subparsers.add_parser("summarize", help="Summarize a transcript into notes")
	summarize.add_argument("-i", "--input", dest="input", required=True, help="Path to the input text file")
	summarize.add_argument(
		"-o",
		"--output",
		dest="output",
		help="Path to the output summary file (defaults to <input>.summary.txt)",
	)
	summarize.add_argument(
		"-ratio",
		"--ratio",
		dest="ratio",
		type=float,
		default=DEFAULT_RATIO,
		help=f"Summary ratio, must be within {MIN_RATIO}-{MAX_RATIO}",
	)
	return parser.parse_args(argv)


def run_generate(args: argparse.Namespace, config: Config) -> Path:
	output = generate_notes(args.input, args.output, ratio=args.ratio, config=config)
	logger.info("Notes written to %s", output)
	return output


def run_transcribe(args: argparse.Namespace, config: Config) -> Path:
	output = transcribe_audio(args.input, args.output, config=config)
	logger.info("Transcript written to %s", output)
	return output


def run_summarize(args: argparse.Namespace, config: Config) -> Path:
	output = summarize_transcript(args.input, args.output, ratio=args.ratio, config=config)
	logger.info("Summary written to %s", output)
	return output


COMMANDS: dict[str, Callable[[argparse.Namespace, Config], Path]] = {
	"generate": run_generate,
	"transcribe": run_transcribe,
	"summarize": run_summarize,
}


def main(argv: list[str] | None = None) -> None:
	args = parse_args(argv)
	logging.basicConfig(level=logging.DEBUG if args.verbose else logging.INFO, format=LOG_FORMAT)

	try:
		config = load_config(args.config)
	except ConfigError as exc:
		logger.error("Failed to load config: %s", exc)
		sys.exit(1)

	try:
		COMMANDS[args.command](args, config)
	except (VideoNoteError, ValueError, OSError) as exc:
		logger.error("%s failed: %s", args.command, exc)
		sys.exit(1)


if __name__ == "__main__":
	main()
