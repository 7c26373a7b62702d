"""Transcript segment entity."""

from __future__ import annotations

from pydantic import BaseModel, Field


def format_wall_time(seconds: float) -> str:
    """Format seconds as HH:MM:SS for display."""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)
    secs = int(seconds % 60)
    return f'{hours:02d}:{minutes:02d}:{secs:02d}'


class TextSegment(BaseModel):
    """A single recognized span of speech."""

    text: str
    start: float = Field(description='Offset in seconds from the start of the audio')
    end: float = Field(description='Offset in seconds from the start of the audio')

    model_config = {'frozen': True}

    @property
    def duration(self) -> float:
        return self.end - self.start
