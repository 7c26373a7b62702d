"""Port: microphone capture to a WAV file."""

from __future__ import annotations

from collections.abc import Callable
from datetime import timedelta
from typing import Protocol

from offline_scribe.l1_entities.recording import AudioRecordingConfig, AudioRecordingSession


class AudioRecorder(Protocol):
    """Records from the default input device into a file."""

    @property
    def is_recording(self) -> bool: ...

    def start(
        self,
        config: AudioRecordingConfig | None = None,
        on_elapsed: Callable[[timedelta], None] | None = None,
    ) -> AudioRecordingSession:
        """Begin capturing. Raises RuntimeError if already recording."""
        ...

    def stop(self) -> str:
        """Finish capturing and return the recorded file path."""
        ...

    def cancel(self) -> None:
        """Abort capturing and discard the file. No-op when idle."""
        ...
