"""Port: speech recognition over a normalized audio file."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from offline_scribe.l1_entities.cancellation import CancellationToken
from offline_scribe.l1_entities.model_catalog import ModelSize
from offline_scribe.l1_entities.transcription import (
    TranscriptionOptions,
    TranscriptionOutput,
    TranscriptionProgress,
)


class RecognitionEngine(Protocol):
    """Produces timed text segments, in start order, from a normalized WAV file."""

    def transcribe(
        self,
        audio_path: str,
        model: ModelSize,
        options: TranscriptionOptions | None = None,
        on_progress: Callable[[TranscriptionProgress], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> TranscriptionOutput:
        """Run inference. Errors propagate unchanged; the caller owns *audio_path*."""
        ...
