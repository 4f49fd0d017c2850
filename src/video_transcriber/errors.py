from __future__ import annotations


class TranscriberError(RuntimeError):
    """Base class for failures raised by the transcription pipeline."""


class ExtractionError(TranscriberError):
    """Raised when ffmpeg is unavailable or cannot read the input video."""


class AuthError(TranscriberError):
    """Raised when a remote call is attempted without an API key."""


class RecognitionError(TranscriberError):
    """Raised when the speech recognition endpoint fails."""


class DiarizationError(TranscriberError):
    """Raised when the speaker diarization endpoint fails."""


class SummaryError(TranscriberError):
    """Raised when an LLM provider cannot produce a summary."""


class TranscriptNotFoundError(KeyError):
    """Raised when the transcript store has no record for an id."""
