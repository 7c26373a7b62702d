"""Port: speech-to-text inference capability."""

from __future__ import annotations

from typing import Protocol

import numpy as np

from offline_scribe.l1_entities.transcript import TextSegment


class Transcriber(Protocol):
    """Abstract inference engine. Zero framework types leak through."""

    def load_model(self, model_path: str) -> None:
        """Load the transcription model from the given path."""
        ...

    def transcribe(self, audio: np.ndarray, language: str | None = None) -> list[TextSegment]:
        """Transcribe a float32 mono 16 kHz buffer. Segment times are buffer-relative."""
        ...

    def close(self) -> None:
        """Release underlying resources."""
        ...
