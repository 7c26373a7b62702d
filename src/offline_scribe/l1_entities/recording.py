"""Microphone recording entities."""

from __future__ import annotations

from datetime import datetime, timedelta

from pydantic import BaseModel

from offline_scribe.l1_entities.audio_constants import CHANNELS, SAMPLE_RATE


class AudioRecordingConfig(BaseModel):
    sample_rate: int = SAMPLE_RATE
    channels: int = CHANNELS
    bits_per_sample: int = 16

    model_config = {'frozen': True}


class AudioRecordingSession(BaseModel):
    """One recording from start to stop. Mutated exactly once, by ``stop()``."""

    session_id: str
    started_at: datetime
    stopped_at: datetime | None = None
    output_file_path: str | None = None

    model_config = {'frozen': True}

    @property
    def duration(self) -> timedelta:
        return (self.stopped_at or datetime.now()) - self.started_at

    def stop(self, when: datetime | None = None) -> AudioRecordingSession:
        return self.model_copy(update={'stopped_at': when or datetime.now()})
