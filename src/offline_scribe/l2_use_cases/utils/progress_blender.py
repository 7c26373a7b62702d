"""Phase-weighted progress blending with a monotonic guarantee."""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass

from offline_scribe.l1_entities.transcription import TranscriptionProgress


def _clamp(ratio: float) -> float:
    return min(max(ratio, 0.0), 1.0)


@dataclass(frozen=True)
class PhaseBand:
    """A fixed sub-range ``[start, start + width]`` of the overall [0, 1] progress."""

    start: float
    width: float

    def map(self, ratio: float) -> float:
        return self.start + _clamp(ratio) * self.width


class MonotonicProgress:
    """Forwards progress events to *sink*, never letting the ratio move backwards.

    Phase-local ratios from different stages are not guaranteed to be ordered
    relative to each other (or even within a stage), so every emitted ratio is
    clamped to [0, 1] and raised to at least the previous one.
    """

    def __init__(self, sink: Callable[[TranscriptionProgress], None] | None) -> None:
        self._sink = sink
        self._last = 0.0

    @property
    def last_ratio(self) -> float:
        return self._last

    def report(self, ratio: float, phase: str, partial_text: str | None = None) -> None:
        self._last = max(self._last, _clamp(ratio))
        if self._sink is not None:
            self._sink(
                TranscriptionProgress(
                    completion_ratio=self._last,
                    current_phase=phase,
                    partial_text=partial_text,
                )
            )
