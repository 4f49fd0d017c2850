from __future__ import annotations

import json
import logging
import os
import secrets
from dataclasses import asdict, dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Optional

from .errors import TranscriptNotFoundError

logger = logging.getLogger(__name__)

_DATA_ENV = "VIDEO_TRANSCRIBER_DATA_DIR"


@dataclass
class TranscriptRecord:
    id: str
    file_name: str
    timestamp: str
    text: str
    summary: Optional[str] = None
    summary_provider: Optional[str] = None


@dataclass(frozen=True)
class TranscriptSummary:
    id: str
    file_name: str
    timestamp: str
    has_summary: bool


def default_data_dir() -> Path:
    override = os.getenv(_DATA_ENV)
    if override:
        return Path(override)

    base_dir = os.getenv("XDG_DATA_HOME")
    if base_dir:
        base = Path(base_dir)
    else:
        base = Path.home() / ".local" / "share"
    return base / "video_transcriber"


class TranscriptStore:
    """Transcripts as ``transcriptions/<id>.txt`` plus a JSON metadata index."""

    def __init__(self, root_dir: Path | str | None = None) -> None:
        self.root_dir = Path(root_dir) if root_dir is not None else default_data_dir()
        self.transcripts_dir = self.root_dir / "transcriptions"
        self.index_path = self.root_dir / "index.json"
        self.transcripts_dir.mkdir(parents=True, exist_ok=True)

    def save_transcript(self, file_name: str, text: str) -> str:
        transcript_id = secrets.token_hex(16)
        timestamp = datetime.now(timezone.utc).isoformat()

        (self.transcripts_dir / f"{transcript_id}.txt").write_text(text, encoding="utf-8")

        index = self._load_index()
        index[transcript_id] = asdict(
            TranscriptRecord(id=transcript_id, file_name=file_name, timestamp=timestamp, text=text)
        )
        self._write_index(index)
        logger.info("Saved transcript %s for %s", transcript_id, file_name)
        return transcript_id

    def save_summary(self, transcript_id: str, summary: str, provider: str) -> None:
        index = self._load_index()
        if transcript_id not in index:
            raise TranscriptNotFoundError(f"Transcription with ID {transcript_id} not found")

        index[transcript_id]["summary"] = summary
        index[transcript_id]["summary_provider"] = provider
        self._write_index(index)

    def list_history(self) -> list[TranscriptSummary]:
        history = [
            TranscriptSummary(
                id=entry["id"],
                file_name=entry["file_name"],
                timestamp=entry["timestamp"],
                has_summary=bool(entry.get("summary")),
            )
            for entry in self._load_index().values()
        ]
        history.sort(key=lambda item: datetime.fromisoformat(item.timestamp), reverse=True)
        return history

    def get_transcript(self, transcript_id: str) -> TranscriptRecord | None:
        entry = self._load_index().get(transcript_id)
        if entry is None:
            return None
        return TranscriptRecord(**entry)

    def _load_index(self) -> dict[str, dict]:
        try:
            data = json.loads(self.index_path.read_text(encoding="utf-8"))
        except FileNotFoundError:
            return {}
        except json.JSONDecodeError as exc:
            backup = self.index_path.with_suffix(".json.corrupt")
            logger.warning("Index %s is unreadable (%s); moving it to %s", self.index_path, exc, backup)
            self.index_path.replace(backup)
            return {}
        return data if isinstance(data, dict) else {}

    def _write_index(self, index: dict[str, dict]) -> None:
        tmp_path = self.index_path.with_suffix(".json.tmp")
        tmp_path.write_text(json.dumps(index, indent=2, ensure_ascii=False), encoding="utf-8")
        tmp_path.replace(self.index_path)
