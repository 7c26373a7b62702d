"""Shared test fixtures and protocol-conforming fakes."""

from __future__ import annotations

import wave
from collections.abc import Callable
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np
import pytest

from offline_scribe.l1_entities.audio_constants import SAMPLE_RATE
from offline_scribe.l1_entities.cancellation import CancellationToken, check_cancelled
from offline_scribe.l1_entities.config import AppConfig
from offline_scribe.l1_entities.errors import ModelUnavailableError
from offline_scribe.l1_entities.model_catalog import MODEL_CATALOG, ModelSize
from offline_scribe.l1_entities.model_descriptor import ModelDescriptor
from offline_scribe.l1_entities.transcript import TextSegment
from offline_scribe.l1_entities.transcription import (
    TranscriptionOptions,
    TranscriptionOutput,
    TranscriptionProgress,
)
from offline_scribe.l4_frameworks_and_drivers.config import build_app_config


def write_wav(
    path: Path,
    seconds: float,
    *,
    sample_rate: int = SAMPLE_RATE,
    channels: int = 1,
    sample_width: int = 2,
) -> Path:
    """Write a silent PCM WAV of the given duration."""
    frames = int(seconds * sample_rate)
    with wave.open(str(path), 'wb') as wf:
        wf.setnchannels(channels)
        wf.setsampwidth(sample_width)
        wf.setframerate(sample_rate)
        wf.writeframes(b'\x00' * frames * channels * sample_width)
    return path


# --- Protocol-conforming Fakes ---


class FakeModelRepository:
    """Fake model repository for L2 use case and engine tests."""

    def __init__(self, available: set[ModelSize] | None = None, models_dir: Path | None = None):
        self._available = set(available or ())
        self._models_dir = models_dir or Path('/fake/models')
        self.acquire_calls: list[ModelSize] = []
        self.remove_calls: list[ModelSize] = []

    def list_all(self) -> list[ModelDescriptor]:
        return [self.get(size) for size in MODEL_CATALOG]

    def get(self, size: ModelSize) -> ModelDescriptor:
        meta = MODEL_CATALOG[size]
        available = size in self._available
        return ModelDescriptor(
            size=size,
            name=meta.display_name,
            description=meta.description,
            size_in_bytes=meta.estimated_bytes,
            is_available_locally=available,
            local_file_path=str(self._models_dir / meta.file_name) if available else None,
        )

    def resolve_local_path(self, size: ModelSize) -> str:
        if size not in self._available:
            raise ModelUnavailableError(f'Model {size.value} is not available locally.', model=size)
        return str(self._models_dir / MODEL_CATALOG[size].file_name)

    def acquire(
        self,
        size: ModelSize,
        on_progress: Callable[[float], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        check_cancelled(cancel_token)
        self.acquire_calls.append(size)
        if on_progress is not None:
            on_progress(0.5)
            on_progress(1.0)
        self._available.add(size)

    def remove(self, size: ModelSize) -> None:
        self.remove_calls.append(size)
        self._available.discard(size)


class FakeMediaNormalizer:
    """Fake normalizer: writes a real (tiny) WAV into *temp_dir* and reports progress."""

    def __init__(self, temp_dir: Path, ratios: tuple[float, ...] = (0.25, 0.5, 1.0)):
        self._temp_dir = temp_dir
        self._ratios = ratios
        self.error: BaseException | None = None
        self.initialize_calls = 0
        self.extract_calls: list[str] = []
        self.produced: list[Path] = []

    def initialize(
        self,
        on_progress: Callable[[str], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        self.initialize_calls += 1

    def extract_audio(
        self,
        source_path: str,
        target_sample_rate: int = SAMPLE_RATE,
        target_channels: int = 1,
        on_progress: Callable[[float], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str:
        self.extract_calls.append(source_path)
        check_cancelled(cancel_token)
        if self.error is not None:
            raise self.error
        out = write_wav(self._temp_dir / f'normalized_{len(self.produced)}.wav', 0.1)
        self.produced.append(out)
        for ratio in self._ratios:
            if on_progress is not None:
                on_progress(ratio)
        return str(out)


class FakeRecognitionEngine:
    """Fake engine: emits scripted progress and segments, optionally cancelling midway."""

    def __init__(self, segments: list[TextSegment] | None = None):
        self._segments = segments or []
        self.error: BaseException | None = None
        self.cancel_after: int | None = None
        self.transcribe_calls: list[tuple[str, ModelSize]] = []
        self.seen_paths_existed: list[bool] = []
        self.languages_seen: list[str | None] = []

    def transcribe(
        self,
        audio_path: str,
        model: ModelSize,
        options: TranscriptionOptions | None = None,
        on_progress: Callable[[TranscriptionProgress], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> TranscriptionOutput:
        options = options or TranscriptionOptions()
        self.transcribe_calls.append((audio_path, model))
        self.seen_paths_existed.append(Path(audio_path).exists())
        self.languages_seen.append(options.language)
        if self.error is not None:
            raise self.error
        if on_progress is not None:
            on_progress(TranscriptionProgress(completion_ratio=0.0, current_phase='Initializing transcription...'))
        total = max(len(self._segments), 1)
        for i, segment in enumerate(self._segments, start=1):
            if self.cancel_after is not None and i > self.cancel_after and cancel_token is not None:
                cancel_token.cancel()
            check_cancelled(cancel_token)
            if options.on_segment_detected is not None:
                options.on_segment_detected(segment)
            if on_progress is not None:
                on_progress(
                    TranscriptionProgress(
                        completion_ratio=i / total,
                        current_phase='Transcribing...',
                        partial_text=segment.text,
                    )
                )
        return TranscriptionOutput(
            full_text='\n'.join(s.text for s in self._segments),
            processing_duration=timedelta(seconds=1.5),
            model_used=model,
            completed_at=datetime(2026, 1, 1, 12, 0, 0),
            source_media_path=audio_path,
            segments=tuple(self._segments) if options.include_segments else None,
        )


class FakeTranscriber:
    """Fake transcriber for engine tests: returns scripted segments per window."""

    def __init__(self, windows: list[list[TextSegment]] | None = None):
        self._windows = list(windows or [])
        self.load_model_calls: list[str] = []
        self.transcribe_calls: list[tuple[np.ndarray, str | None]] = []
        self.close_calls = 0
        self.load_error: BaseException | None = None

    def load_model(self, model_path: str) -> None:
        self.load_model_calls.append(model_path)
        if self.load_error is not None:
            raise self.load_error

    def transcribe(self, audio: np.ndarray, language: str | None = None) -> list[TextSegment]:
        idx = len(self.transcribe_calls)
        self.transcribe_calls.append((audio, language))
        return self._windows[idx] if idx < len(self._windows) else []

    def close(self) -> None:
        self.close_calls += 1


# --- Standard Fixtures ---


@pytest.fixture
def default_config(tmp_path: Path) -> AppConfig:
    return build_app_config({'storage': {'root': str(tmp_path / 'root')}})


@pytest.fixture
def media_file(tmp_path: Path) -> Path:
    p = tmp_path / 'talk.mp4'
    p.write_bytes(b'not really a video')
    return p


@pytest.fixture
def wav_file(tmp_path: Path) -> Path:
    return write_wav(tmp_path / 'audio.wav', 1.0)


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    content = """\
storage:
  root: "./scribe-data"
download:
  timeout: 15
transcription:
  model: "small"
  language: "de"
  include_segments: true
"""
    p = tmp_path / 'config.yaml'
    p.write_text(content, encoding='utf-8')
    return p


@pytest.fixture
def fake_repository() -> FakeModelRepository:
    return FakeModelRepository(available={ModelSize.BASE})


@pytest.fixture
def fake_normalizer(tmp_path: Path) -> FakeMediaNormalizer:
    d = tmp_path / 'temp'
    d.mkdir()
    return FakeMediaNormalizer(d)


@pytest.fixture
def fake_transcriber() -> FakeTranscriber:
    return FakeTranscriber()
