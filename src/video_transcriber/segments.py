from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Sequence

logger = logging.getLogger(__name__)

UNKNOWN_SPEAKER = "Unknown"


@dataclass(frozen=True)
class SpeakerSegment:
    start: float
    end: float
    speaker_id: str

    def contains(self, time: float) -> bool:
        return self.start <= time <= self.end


def _as_time(value: Any) -> float | None:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return float(value)


def _parse_descriptor(descriptor: Any) -> SpeakerSegment | None:
    """Parse one diarization descriptor, or return ``None`` to skip it.

    Two shapes are understood: pyannote style, where the span is nested under
    ``segment``, and a flat ``start``/``end``/``speaker`` mapping.
    """

    if not isinstance(descriptor, Mapping):
        return None

    speaker = descriptor.get("speaker")
    if not isinstance(speaker, str) or not speaker:
        return None

    span = descriptor.get("segment")
    if isinstance(span, Mapping):
        start, end = _as_time(span.get("start")), _as_time(span.get("end"))
    elif span is None:
        start, end = _as_time(descriptor.get("start")), _as_time(descriptor.get("end"))
    else:
        return None

    if start is None or end is None:
        return None
    return SpeakerSegment(start=start, end=end, speaker_id=speaker)


def build_segments(raw_output: Any) -> list[SpeakerSegment]:
    """Normalize raw diarization output into segments sorted by start time.

    Descriptors without both a time span and a speaker label are dropped;
    partial output is expected from the remote model.
    """

    if not isinstance(raw_output, Iterable) or isinstance(raw_output, (str, bytes, Mapping)):
        logger.debug("Ignoring diarization payload of type %s", type(raw_output).__name__)
        return []

    segments: list[SpeakerSegment] = []
    skipped = 0
    for descriptor in raw_output:
        segment = _parse_descriptor(descriptor)
        if segment is None:
            skipped += 1
            continue
        segments.append(segment)

    if skipped:
        logger.debug("Skipped %d unparseable diarization descriptors", skipped)

    segments.sort(key=lambda segment: segment.start)
    return segments


def speaker_at(segments: Sequence[SpeakerSegment], time: float) -> str:
    """Return the speaker whose closed interval contains ``time``.

    Overlapping segments resolve to the first match in stored order.
    """

    for segment in segments:
        if segment.contains(time):
            return segment.speaker_id
    return UNKNOWN_SPEAKER
