from __future__ import annotations

import logging
import secrets
import subprocess
import tempfile
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator

from .errors import ExtractionError

logger = logging.getLogger(__name__)

FFMPEG_MISSING_MESSAGE = (
    "Failed to extract audio from video. Make sure ffmpeg is installed on your system."
)


def scratch_audio_path(audio_format: str = "mp3", directory: Path | str | None = None) -> Path:
    """Return a fresh, collision-resistant path for an extracted audio track."""

    base = Path(directory) if directory is not None else Path(tempfile.gettempdir())
    return base / f"audio-{secrets.token_hex(16)}.{audio_format.lower()}"


def extract_audio(
    input_video: Path | str,
    output_path: Path | str | None = None,
    *,
    audio_format: str = "mp3",
    audio_quality: int = 0,
    ffmpeg_binary: str = "ffmpeg",
) -> Path:
    """Extract a mono audio track from ``input_video``.

    Args:
        input_video: Path to the source video file. Its container format is not
            checked here; ffmpeg rejects anything it cannot read.
        output_path: Optional target path for the extracted audio. Defaults to a
            randomized file in the system temp directory.
        audio_format: Extension of the produced file. ``mp3`` is encoded with
            libmp3lame at variable quality ``audio_quality``.

    Returns:
        Path to the extracted audio file.
    """

    input_path = Path(input_video)
    normalized_format = audio_format.lower()
    target = Path(output_path) if output_path is not None else scratch_audio_path(normalized_format)

    command = [
        ffmpeg_binary,
        "-y",
        "-i",
        str(input_path),
        "-vn",
        "-map",
        "a",
        "-ac",
        "1",
    ]

    if normalized_format in {"mp3", "mpeg"}:
        command.extend(["-acodec", "libmp3lame", "-q:a", str(audio_quality)])
    elif normalized_format == "wav":
        command.extend(["-acodec", "pcm_s16le"])
    else:
        command.extend(["-acodec", normalized_format])

    command.append(str(target))

    logger.info("Extracting audio from %s", input_path.name)
    try:
        subprocess.run(command, check=True, stdout=subprocess.DEVNULL, stderr=subprocess.DEVNULL)
    except (FileNotFoundError, subprocess.CalledProcessError) as exc:
        logger.error("ffmpeg failed for %s: %s", input_path, exc)
        if output_path is None:
            target.unlink(missing_ok=True)
        raise ExtractionError(FFMPEG_MISSING_MESSAGE) from exc

    return target


@contextmanager
def scratch_audio(input_video: Path | str, **extract_kwargs) -> Iterator[Path]:
    """Yield an extracted audio track that is removed when the block exits."""

    audio_path = extract_audio(input_video, **extract_kwargs)
    try:
        yield audio_path
    finally:
        audio_path.unlink(missing_ok=True)
        logger.debug("Removed scratch audio %s", audio_path)
