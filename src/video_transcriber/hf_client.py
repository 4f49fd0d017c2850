from __future__ import annotations

import base64
import logging
import os
from dataclasses import dataclass
from typing import Any

import requests

from .errors import AuthError, DiarizationError, RecognitionError

logger = logging.getLogger(__name__)

HF_INFERENCE_URL = "https://api-inference.huggingface.co/models"
WHISPER_MODEL = "openai/whisper-large-v3"
DIARIZATION_MODEL = "pyannote/speaker-diarization@2.1"
CHUNK_LENGTH_SECONDS = 30


@dataclass(frozen=True)
class TranscriptChunk:
    text: str
    start_time: float
    end_time: float


@dataclass(frozen=True)
class Transcription:
    text: str
    chunks: tuple[TranscriptChunk, ...] | None = None


class _HuggingFaceClient:
    """Shared plumbing for the Hugging Face inference endpoints."""

    error_class: type[Exception] = RuntimeError
    service_name = "Hugging Face"

    def __init__(
        self,
        *,
        api_key: str | None = None,
        model: str,
        base_url: str = HF_INFERENCE_URL,
        timeout: int = 300,
    ) -> None:
        self.api_key = api_key if api_key is not None else os.getenv("HUGGINGFACE_API_KEY", "")
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/{self.model}"

    def _post(self, audio: bytes, parameters: dict[str, Any] | None = None) -> Any:
        # Checked on every call so a key updated in settings takes effect immediately.
        if not self.api_key:
            raise AuthError("HuggingFace API key is not set")

        headers = {"Authorization": f"Bearer {self.api_key}"}
        try:
            if parameters:
                payload = {
                    "inputs": base64.b64encode(audio).decode("ascii"),
                    "parameters": parameters,
                }
                response = requests.post(self.endpoint, headers=headers, json=payload, timeout=self.timeout)
            else:
                headers["Content-Type"] = "audio/mpeg"
                response = requests.post(self.endpoint, headers=headers, data=audio, timeout=self.timeout)
            response.raise_for_status()
        except requests.RequestException as exc:
            raise self.error_class(f"{self.service_name} request failed: {exc}") from exc

        try:
            return response.json()
        except ValueError as exc:
            raise self.error_class(f"{self.service_name} returned a non-JSON payload") from exc


class HuggingFaceASRClient(_HuggingFaceClient):
    """Speech recognition through the hosted Whisper model."""

    error_class = RecognitionError
    service_name = "Speech recognition"

    def __init__(self, *, api_key: str | None = None, model: str = WHISPER_MODEL, **kwargs: Any) -> None:
        super().__init__(api_key=api_key, model=model, **kwargs)

    def transcribe(self, audio: bytes, *, chunked: bool = False) -> Transcription:
        parameters = None
        if chunked:
            parameters = {"chunk_length_s": CHUNK_LENGTH_SECONDS, "return_timestamps": True}

        logger.info("Requesting transcription from %s (chunked=%s)", self.model, chunked)
        data = self._post(audio, parameters)

        if not isinstance(data, dict) or not isinstance(data.get("text"), str):
            raise RecognitionError("Unexpected speech recognition response payload")

        chunks = self._parse_chunks(data.get("chunks")) if chunked else None
        return Transcription(text=data["text"], chunks=chunks)

    @staticmethod
    def _parse_chunks(raw_chunks: Any) -> tuple[TranscriptChunk, ...] | None:
        """Convert Whisper ``chunks`` into ordered chunks.

        Returns ``None`` when the payload has no chunks or any chunk is missing
        its start time, which callers treat as "no timestamps available".
        """

        if not isinstance(raw_chunks, list) or not raw_chunks:
            return None

        parsed: list[TranscriptChunk] = []
        for item in raw_chunks:
            if not isinstance(item, dict):
                return None
            timestamp = item.get("timestamp")
            if not isinstance(timestamp, (list, tuple)) or not timestamp:
                return None
            start = timestamp[0]
            end = timestamp[1] if len(timestamp) > 1 else None
            if not isinstance(start, (int, float)):
                return None
            # Whisper leaves the final chunk open-ended.
            if not isinstance(end, (int, float)):
                end = start
            parsed.append(TranscriptChunk(text=str(item.get("text", "")), start_time=float(start), end_time=float(end)))

        parsed.sort(key=lambda chunk: chunk.start_time)
        return tuple(parsed)


class HuggingFaceDiarizationClient(_HuggingFaceClient):
    """Speaker diarization through the hosted pyannote pipeline."""

    error_class = DiarizationError
    service_name = "Speaker diarization"

    def __init__(self, *, api_key: str | None = None, model: str = DIARIZATION_MODEL, **kwargs: Any) -> None:
        super().__init__(api_key=api_key, model=model, **kwargs)

    def diarize(self, audio: bytes) -> Any:
        """Return the raw diarization payload; see ``segments.build_segments``."""

        logger.info("Requesting speaker diarization from %s", self.model)
        return self._post(audio)
