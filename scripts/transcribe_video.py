import argparse
import sys
from pathlib import Path
from tempfile import TemporaryDirectory
from urllib.parse import urlparse

import yt_dlp
from video_transcriber import (
	TranscriberError,
	TranscriptNotFoundError,
	TranscriptStore,
	load_settings,
	process_video,
	save_settings,
	summarize_transcript,
)
from video_transcriber.config import SUPPORTED_PROVIDERS, Settings
from video_transcriber.logging_config import setup_logging

_BOOLEAN_SETTINGS = {"enable_speaker_diarization"}


def parse_args() -> argparse.Namespace:
	parser = argparse.ArgumentParser(description="Transcribe videos with speaker labels and summarize them.")
	parser.add_argument("--log-level", dest="log_level", default="INFO", help="Logging level (DEBUG, INFO, ...)")
	parser.add_argument("--data-dir", dest="data_dir", help="Directory holding stored transcripts")
	parser.add_argument("--config", dest="config", help="Path to the settings JSON file")
	subparsers = parser.add_subparsers(dest="command", required=True)

	transcribe = subparsers.add_parser("transcribe", help="Transcribe a video file or URL")
	transcribe.add_argument("video", help="Path to the input video file or a video URL")
	transcribe.add_argument(
		"--diarize",
		action=argparse.BooleanOptionalAction,
		dest="diarize",
		default=None,
		help="Label the transcript by speaker (defaults to the saved setting)",
	)
	transcribe.add_argument("--summarize", action="store_true", help="Also generate a summary")
	transcribe.add_argument("--provider", choices=SUPPORTED_PROVIDERS, help="LLM provider for the summary")

	summarize = subparsers.add_parser("summarize", help="Summarize a stored transcript")
	summarize.add_argument("id", help="Transcript id")
	summarize.add_argument("--provider", choices=SUPPORTED_PROVIDERS, help="LLM provider for the summary")

	subparsers.add_parser("history", help="List stored transcripts, newest first")

	show = subparsers.add_parser("show", help="Print a stored transcript")
	show.add_argument("id", help="Transcript id")

	settings = subparsers.add_parser("settings", help="Show or update saved settings")
	settings.add_argument(
		"--set",
		dest="assignments",
		action="append",
		default=[],
		metavar="KEY=VALUE",
		help="Update one setting; may be repeated",
	)
	return parser.parse_args()


def is_url(value: str) -> bool:
	parsed = urlparse(value)
	return parsed.scheme in {"http", "https"} and bool(parsed.netloc)


def download_video(video_url: str, output_dir: Path) -> Path:
	options = {
		"outtmpl": str(output_dir / "%(title).200s.%(ext)s"),
		"quiet": True,
		"no_warnings": True,
		"retries": 5,
	}
	with yt_dlp.YoutubeDL(options) as downloader:
		info = downloader.extract_info(video_url, download=True)
		filepath = downloader.prepare_filename(info)
	return Path(filepath)


def apply_assignments(settings: Settings, assignments: list) -> Settings:
	for assignment in assignments:
		key, sep, value = assignment.partition("=")
		if not sep or not hasattr(settings, key):
			raise SystemExit(f"Unknown setting assignment: {assignment}")
		if key in _BOOLEAN_SETTINGS:
			setattr(settings, key, value.strip().lower() in {"1", "true", "yes", "on"})
		else:
			setattr(settings, key, value)
	return Settings(**vars(settings))


def run_transcribe(args: argparse.Namespace, settings: Settings, store: TranscriptStore) -> None:
	options = {
		"settings": settings,
		"store": store,
		"diarization_enabled": args.diarize,
		"summarize": args.summarize,
		"provider": args.provider,
	}

	if is_url(args.video):
		with TemporaryDirectory() as tmpdir:
			result = process_video(download_video(args.video, Path(tmpdir)), **options)
	else:
		video_path = Path(args.video)
		if not video_path.exists():
			raise FileNotFoundError(f"Video file does not exist: {video_path}")
		result = process_video(video_path, **options)

	print(f"Transcript id: {result['id']}\n")
	print(result["transcript"])
	if result.get("summary"):
		print("\n--- Summary ---\n")
		print(result["summary"])
	if result.get("summarizer_error"):
		print(f"\nSummary failed: {result['summarizer_error']}", file=sys.stderr)


def main() -> None:
	args = parse_args()
	setup_logging(args.log_level)

	settings = load_settings(args.config)
	store = TranscriptStore(args.data_dir)

	try:
		if args.command == "transcribe":
			run_transcribe(args, settings, store)
		elif args.command == "summarize":
			print(summarize_transcript(args.id, args.provider, settings=settings, store=store))
		elif args.command == "history":
			for item in store.list_history():
				marker = "*" if item.has_summary else " "
				print(f"{marker} {item.id}  {item.timestamp}  {item.file_name}")
		elif args.command == "show":
			record = store.get_transcript(args.id)
			if record is None:
				raise SystemExit(f"Transcription with ID {args.id} not found")
			print(record.text)
			if record.summary:
				print(f"\n--- Summary ({record.summary_provider}) ---\n")
				print(record.summary)
		elif args.command == "settings":
			if args.assignments:
				settings = load_settings(args.config, use_env=False)
				settings = apply_assignments(settings, args.assignments)
				save_settings(settings, args.config)
			for key, value in vars(settings).items():
				if key.endswith("api_key") and value:
					value = "********"
				print(f"{key} = {value}")
	except (TranscriberError, TranscriptNotFoundError) as exc:
		raise SystemExit(f"Error: {exc}") from exc


if __name__ == "__main__":
	main()
