from __future__ import annotations

from enum import Enum
from typing import Optional, Sequence

from .hf_client import TranscriptChunk, Transcription
from .segments import SpeakerSegment, speaker_at

NO_SPEAKER_INFO_PREFIX = "[No speaker information available]\n"
DIARIZATION_FAILED_PREFIX = "[Speaker diarization failed]\n"


class AssemblyMode(str, Enum):
    """How the final transcript text is produced for one pipeline run."""

    PLAIN = "plain"
    DIARIZED = "diarized"
    NO_TIMESTAMPS = "no_timestamps"
    DIARIZATION_FAILED = "diarization_failed"


def speaker_marker(speaker_id: str) -> str:
    return f"\n\n[Speaker {speaker_id}]: "


def select_mode(
    diarization_enabled: bool,
    transcription: Optional[Transcription],
    *,
    diarization_failed: bool = False,
) -> AssemblyMode:
    if not diarization_enabled:
        return AssemblyMode.PLAIN
    if diarization_failed:
        return AssemblyMode.DIARIZATION_FAILED
    if transcription is None or not transcription.chunks:
        return AssemblyMode.NO_TIMESTAMPS
    return AssemblyMode.DIARIZED


def assemble(chunks: Sequence[TranscriptChunk], segments: Optional[Sequence[SpeakerSegment]]) -> str:
    """Join chunk texts, inserting a speaker marker whenever the speaker changes.

    Without ``segments`` the chunk texts are simply joined with spaces.
    """

    ordered = sorted(chunks, key=lambda chunk: chunk.start_time)
    texts = [(chunk, chunk.text.strip()) for chunk in ordered]

    if segments is None:
        return " ".join(text for _, text in texts if text).strip()

    parts: list[str] = []
    current_speaker: str | None = None
    for chunk, text in texts:
        if not text:
            continue
        speaker = speaker_at(segments, chunk.start_time)
        if speaker != current_speaker:
            current_speaker = speaker
            parts.append(speaker_marker(speaker))
        parts.append(f"{text} ")

    return "".join(parts).strip()


def render(
    mode: AssemblyMode,
    transcription: Transcription,
    segments: Optional[Sequence[SpeakerSegment]] = None,
) -> str:
    """Produce the transcript text for ``mode``.

    For ``DIARIZATION_FAILED`` the caller passes the plain, non-chunked
    transcription it fetched after the diarizer failed.
    """

    if mode is AssemblyMode.DIARIZED:
        return assemble(transcription.chunks or (), segments if segments is not None else [])
    if mode is AssemblyMode.NO_TIMESTAMPS:
        return f"{NO_SPEAKER_INFO_PREFIX}{transcription.text}"
    if mode is AssemblyMode.DIARIZATION_FAILED:
        return f"{DIARIZATION_FAILED_PREFIX}{transcription.text}"
    return transcription.text
