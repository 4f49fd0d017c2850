from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Optional

from .assembler import AssemblyMode, render, select_mode
from .audio import scratch_audio
from .config import Settings, load_settings
from .errors import AuthError, SummaryError, TranscriptNotFoundError
from .hf_client import HuggingFaceASRClient, HuggingFaceDiarizationClient
from .segments import SpeakerSegment, build_segments
from .storage import TranscriptStore
from .summarizer import generate_summary

logger = logging.getLogger(__name__)


def transcribe_video(
    video_path: Path | str,
    diarization_enabled: bool = True,
    *,
    api_key: str | None = None,
    asr_client: Optional[HuggingFaceASRClient] = None,
    diarization_client: Optional[HuggingFaceDiarizationClient] = None,
) -> str:
    """Transcribe ``video_path`` and, when enabled, label the text by speaker.

    Extraction, authentication and recognition failures propagate. A failing
    diarizer never does: the result degrades to an unlabeled transcript that
    starts with a notice. The extracted audio is deleted on every path.
    """

    video = Path(video_path)
    if asr_client is None:
        asr_client = HuggingFaceASRClient(api_key=api_key)
        if not asr_client.api_key:
            raise AuthError("HuggingFace API key is not set")

    with scratch_audio(video) as audio_path:
        audio = audio_path.read_bytes()

        if not diarization_enabled:
            transcription = asr_client.transcribe(audio, chunked=False)
            logger.info("Transcribed %s without diarization", video.name)
            return render(AssemblyMode.PLAIN, transcription)

        if diarization_client is None:
            diarization_client = HuggingFaceDiarizationClient(api_key=asr_client.api_key)

        transcription = asr_client.transcribe(audio, chunked=True)

        segments: list[SpeakerSegment] | None = None
        diarization_failed = False
        try:
            segments = build_segments(diarization_client.diarize(audio))
        except Exception as exc:  # noqa: BLE001 - a diarizer failure must never lose the transcript
            logger.warning(
                "Speaker diarization failed, falling back to standard transcription: %s", exc, exc_info=True
            )
            segments = None
            diarization_failed = True
        else:
            logger.info("Diarization produced %d speaker segments", len(segments))

        mode = select_mode(True, transcription, diarization_failed=diarization_failed)
        if mode is AssemblyMode.DIARIZATION_FAILED:
            transcription = asr_client.transcribe(audio, chunked=False)

        logger.info("Assembling transcript for %s in %s mode", video.name, mode.value)
        return render(mode, transcription, segments)


def summarize_transcript(
    transcript_id: str,
    provider: str | None = None,
    *,
    settings: Settings,
    store: TranscriptStore,
    summarizer: Any | None = None,
) -> str:
    """Summarize a stored transcript and attach the summary to its record."""

    record = store.get_transcript(transcript_id)
    if record is None:
        raise TranscriptNotFoundError(f"Transcription with ID {transcript_id} not found")

    if summarizer is None:
        summary, used_provider = generate_summary(record.text, provider, settings=settings)
    else:
        summary, used_provider = summarizer.summarize(record.text), summarizer.provider

    store.save_summary(transcript_id, summary, used_provider)
    return summary


def process_video(
    video_path: Path | str,
    *,
    settings: Optional[Settings] = None,
    store: Optional[TranscriptStore] = None,
    diarization_enabled: bool | None = None,
    summarize: bool = False,
    provider: str | None = None,
    asr_client: Optional[HuggingFaceASRClient] = None,
    diarization_client: Optional[HuggingFaceDiarizationClient] = None,
    summarizer: Any | None = None,
) -> dict[str, Any]:
    """Run the end-to-end pipeline from video to stored transcript and summary."""

    settings = settings if settings is not None else load_settings()
    store = store if store is not None else TranscriptStore()
    if diarization_enabled is None:
        diarization_enabled = settings.enable_speaker_diarization

    video = Path(video_path)
    transcript = transcribe_video(
        video,
        diarization_enabled,
        api_key=settings.huggingface_api_key,
        asr_client=asr_client,
        diarization_client=diarization_client,
    )
    transcript_id = store.save_transcript(str(video), transcript)

    result: dict[str, Any] = {
        "id": transcript_id,
        "transcript": transcript,
        "summary": None,
    }

    if summarize or summarizer is not None:
        try:
            result["summary"] = summarize_transcript(
                transcript_id,
                provider,
                settings=settings,
                store=store,
                summarizer=summarizer,
            )
        except SummaryError as exc:
            # The transcript is already stored; report the failure alongside it.
            logger.error("Summary generation failed: %s", exc)
            result["summarizer_error"] = str(exc) or exc.__class__.__name__

    return result
