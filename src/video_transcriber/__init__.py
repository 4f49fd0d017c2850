"""Video transcription with speaker diarization and LLM summaries."""

from .assembler import AssemblyMode, assemble
from .audio import extract_audio
from .config import Settings, load_settings, save_settings
from .errors import (
    AuthError,
    DiarizationError,
    ExtractionError,
    RecognitionError,
    SummaryError,
    TranscriberError,
    TranscriptNotFoundError,
)
from .hf_client import HuggingFaceASRClient, HuggingFaceDiarizationClient, TranscriptChunk, Transcription
from .pipeline import process_video, summarize_transcript, transcribe_video
from .segments import UNKNOWN_SPEAKER, SpeakerSegment, build_segments, speaker_at
from .storage import TranscriptRecord, TranscriptStore, TranscriptSummary
from .summarizer import ClaudeSummarizer, OllamaSummarizer, OpenAISummarizer, generate_summary

__all__ = [
    "AssemblyMode",
    "AuthError",
    "ClaudeSummarizer",
    "DiarizationError",
    "ExtractionError",
    "HuggingFaceASRClient",
    "HuggingFaceDiarizationClient",
    "OllamaSummarizer",
    "OpenAISummarizer",
    "RecognitionError",
    "Settings",
    "SpeakerSegment",
    "SummaryError",
    "TranscriberError",
    "TranscriptChunk",
    "TranscriptNotFoundError",
    "TranscriptRecord",
    "TranscriptStore",
    "TranscriptSummary",
    "Transcription",
    "UNKNOWN_SPEAKER",
    "assemble",
    "build_segments",
    "extract_audio",
    "generate_summary",
    "load_settings",
    "process_video",
    "save_settings",
    "speaker_at",
    "summarize_transcript",
    "transcribe_video",
]
