"""End-to-end pipeline scenarios: real use case and engine, fake inference and ffmpeg."""

from __future__ import annotations

import shutil
import uuid
from collections.abc import Callable
from pathlib import Path

import pytest

from offline_scribe.l1_entities.cancellation import CancellationToken, check_cancelled
from offline_scribe.l1_entities.errors import OperationCancelledError
from offline_scribe.l1_entities.model_catalog import ModelSize
from offline_scribe.l1_entities.transcript import TextSegment
from offline_scribe.l1_entities.transcription import TranscriptionOptions, TranscriptionProgress
from offline_scribe.l2_use_cases.transcribe_media_use_case import PHASE_PREPARING, TranscribeMediaUseCase
from offline_scribe.l3_interface_adapters.gateways.whisper_recognition_engine import WhisperRecognitionEngine
from tests.conftest import FakeModelRepository, FakeTranscriber, write_wav


class CopyingNormalizer:
    """Stands in for ffmpeg when the input is already 16 kHz mono PCM."""

    def __init__(self, temp_dir: Path) -> None:
        self.temp_dir = temp_dir

    def initialize(self, on_progress=None, cancel_token=None) -> None:
        pass

    def extract_audio(
        self,
        source_path: str,
        target_sample_rate: int = 16000,
        target_channels: int = 1,
        on_progress: Callable[[float], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str:
        check_cancelled(cancel_token)
        out = self.temp_dir / f'{uuid.uuid4().hex}.wav'
        shutil.copyfile(source_path, out)
        if on_progress is not None:
            on_progress(1.0)
        return str(out)


WINDOW_SEGMENTS = [
    [TextSegment(text='The quick brown fox', start=0.4, end=2.1), TextSegment(text='jumps', start=2.3, end=3.0)],
    [TextSegment(text='over the lazy dog.', start=0.1, end=1.9)],
]


@pytest.fixture
def temp_dir(tmp_path: Path) -> Path:
    d = tmp_path / 'Temp'
    d.mkdir()
    return d


@pytest.fixture
def ten_second_wav(tmp_path: Path) -> Path:
    return write_wav(tmp_path / 'lecture.wav', 10.0)


def _pipeline(temp_dir: Path, transcriber: FakeTranscriber) -> TranscribeMediaUseCase:
    repo = FakeModelRepository(available={ModelSize.BASE})
    engine = WhisperRecognitionEngine(repo, lambda: transcriber, window_seconds=5.0)
    return TranscribeMediaUseCase(repo, CopyingNormalizer(temp_dir), engine)


class TestTenSecondWav:
    def test_full_text_segments_and_source(self, temp_dir: Path, ten_second_wav: Path):
        use_case = _pipeline(temp_dir, FakeTranscriber(WINDOW_SEGMENTS))
        events: list[TranscriptionProgress] = []

        result = use_case.execute(
            str(ten_second_wav),
            ModelSize.BASE,
            TranscriptionOptions(include_segments=True),
            on_progress=events.append,
        )

        assert result.full_text == 'The quick brown fox\njumps\nover the lazy dog.'
        starts = [s.start for s in result.segments]
        assert starts == sorted(starts)
        assert starts[-1] == pytest.approx(5.1)
        assert result.source_media_path == str(ten_second_wav)
        assert list(temp_dir.iterdir()) == []

        ratios = [e.completion_ratio for e in events]
        assert events[0].current_phase == PHASE_PREPARING
        assert ratios == sorted(ratios)
        assert ratios[-1] == 1.0

    def test_cancel_during_recognition_leaves_no_temp_files(self, temp_dir: Path, ten_second_wav: Path):
        use_case = _pipeline(temp_dir, FakeTranscriber(WINDOW_SEGMENTS))
        token = CancellationToken()

        with pytest.raises(OperationCancelledError):
            use_case.execute(
                str(ten_second_wav),
                ModelSize.BASE,
                TranscriptionOptions(on_segment_detected=lambda s: token.cancel()),
                cancel_token=token,
            )
        assert list(temp_dir.iterdir()) == []
