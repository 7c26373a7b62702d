"""Tests for phase bands and monotonic progress forwarding."""

from __future__ import annotations

import pytest

from offline_scribe.l1_entities.transcription import TranscriptionProgress
from offline_scribe.l2_use_cases.utils.progress_blender import MonotonicProgress, PhaseBand


class TestPhaseBand:
    def test_maps_into_band(self):
        band = PhaseBand(start=0.2, width=0.8)
        assert band.map(0.0) == pytest.approx(0.2)
        assert band.map(0.5) == pytest.approx(0.6)
        assert band.map(1.0) == pytest.approx(1.0)

    def test_clamps_out_of_range_input(self):
        band = PhaseBand(start=0.0, width=0.2)
        assert band.map(-1.0) == pytest.approx(0.0)
        assert band.map(3.0) == pytest.approx(0.2)


class TestMonotonicProgress:
    def test_never_moves_backwards(self):
        events: list[TranscriptionProgress] = []
        progress = MonotonicProgress(events.append)
        for ratio in (0.1, 0.4, 0.3, 0.5, 0.2):
            progress.report(ratio, 'phase')
        assert [e.completion_ratio for e in events] == [0.1, 0.4, 0.4, 0.5, 0.5]
        assert progress.last_ratio == 0.5

    def test_clamps_to_unit_interval(self):
        events: list[TranscriptionProgress] = []
        progress = MonotonicProgress(events.append)
        progress.report(-0.5, 'a')
        progress.report(1.7, 'b')
        assert [e.completion_ratio for e in events] == [0.0, 1.0]

    def test_carries_phase_and_partial_text(self):
        events: list[TranscriptionProgress] = []
        MonotonicProgress(events.append).report(0.3, 'Transcribing...', 'hello')
        assert events[0].current_phase == 'Transcribing...'
        assert events[0].partial_text == 'hello'

    def test_without_sink_still_tracks(self):
        progress = MonotonicProgress(None)
        progress.report(0.7, 'x')
        assert progress.last_ratio == 0.7
