"""Transcription request options, progress events and results."""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime, timedelta

from pydantic import BaseModel

from offline_scribe.l1_entities.model_catalog import ModelSize
from offline_scribe.l1_entities.transcript import TextSegment


class TranscriptionOptions(BaseModel):
    language: str | None = None  # None → whisper auto-detect
    include_segments: bool = False
    on_segment_detected: Callable[[TextSegment], None] | None = None

    model_config = {'frozen': True}


class TranscriptionProgress(BaseModel):
    """Transient progress event. ``completion_ratio`` is in [0, 1]."""

    completion_ratio: float
    current_phase: str
    partial_text: str | None = None

    model_config = {'frozen': True}

    @property
    def percent_complete(self) -> float:
        return min(max(self.completion_ratio * 100, 0.0), 100.0)


class TranscriptionOutput(BaseModel):
    """Immutable result of a recognition run."""

    full_text: str
    processing_duration: timedelta
    model_used: ModelSize
    completed_at: datetime
    source_media_path: str | None = None
    segments: tuple[TextSegment, ...] | None = None

    model_config = {'frozen': True}
