"""Gateway: windowed whisper inference over a normalized WAV — implements RecognitionEngine port."""

from __future__ import annotations

import contextlib
import enum
import logging
import time
import wave
from collections.abc import Callable, Iterator
from dataclasses import dataclass
from datetime import datetime, timedelta
from pathlib import Path

import numpy as np

from offline_scribe.l1_entities.audio_constants import SAMPLE_RATE, SAMPLE_WIDTH
from offline_scribe.l1_entities.cancellation import CancellationToken, check_cancelled
from offline_scribe.l1_entities.errors import AudioNotFoundError, EngineFailureError, OperationCancelledError
from offline_scribe.l1_entities.model_catalog import ModelSize
from offline_scribe.l1_entities.transcript import TextSegment
from offline_scribe.l1_entities.transcription import (
    TranscriptionOptions,
    TranscriptionOutput,
    TranscriptionProgress,
)
from offline_scribe.l2_use_cases.ports.model_repository import ModelRepository
from offline_scribe.l2_use_cases.ports.transcriber import Transcriber

log = logging.getLogger('scribe.engine')

PHASE_INITIALIZING = 'Initializing transcription...'
PHASE_TRANSCRIBING = 'Transcribing...'

DEFAULT_WINDOW_SECONDS = 30.0  # whisper's native context length


class RecognitionState(enum.Enum):
    IDLE = 'idle'
    LOADING = 'loading'
    STREAMING = 'streaming'
    COMPLETED = 'completed'
    FAILED = 'failed'
    CANCELLED = 'cancelled'


@dataclass(frozen=True)
class AudioWindow:
    offset: float  # seconds from start of audio
    samples: np.ndarray
    data_start: int  # byte offset of the PCM payload in the file
    file_size: int

    def position_ratio(self, seconds: float) -> float:
        """Estimated read position within the file for an audio offset, as a ratio."""
        if self.file_size <= 0:
            return 0.0
        position = self.data_start + int(seconds * SAMPLE_RATE) * SAMPLE_WIDTH
        return min(max(position / self.file_size, 0.0), 1.0)

    @property
    def end(self) -> float:
        return self.offset + len(self.samples) / SAMPLE_RATE


def iter_wav_windows(path: Path, window_seconds: float) -> Iterator[AudioWindow]:
    """Yield consecutive float32 mono windows from a 16 kHz pcm_s16le WAV file."""
    file_size = path.stat().st_size
    try:
        wav = wave.open(str(path), 'rb')  # noqa: SIM115 -- closed in finally; generator body
    except (wave.Error, EOFError) as exc:
        raise EngineFailureError(f'Cannot decode audio file {path}: {exc}') from exc

    try:
        channels = wav.getnchannels()
        if wav.getsampwidth() != SAMPLE_WIDTH or wav.getframerate() != SAMPLE_RATE:
            raise EngineFailureError(
                f'Unsupported audio format in {path}: expected {SAMPLE_RATE} Hz 16-bit PCM, '
                f'got {wav.getframerate()} Hz {wav.getsampwidth() * 8}-bit'
            )
        frame_bytes = channels * SAMPLE_WIDTH
        data_start = max(file_size - wav.getnframes() * frame_bytes, 0)
        frames_per_window = max(int(window_seconds * SAMPLE_RATE), 1)

        frames_read = 0
        while True:
            raw = wav.readframes(frames_per_window)
            if not raw:
                break
            samples = np.frombuffer(raw, dtype='<i2').astype(np.float32) / 32768.0
            if channels > 1:
                samples = samples.reshape(-1, channels).mean(axis=1)
            yield AudioWindow(
                offset=frames_read / SAMPLE_RATE,
                samples=samples,
                data_start=data_start,
                file_size=file_size,
            )
            frames_read += len(samples)
    finally:
        wav.close()


class _RecognitionRun:
    """State of a single ``transcribe`` call; never shared between calls."""

    def __init__(self, audio_path: str) -> None:
        self.audio_path = audio_path
        self.state = RecognitionState.IDLE

    def advance(self, state: RecognitionState) -> None:
        log.debug('Recognition of %s: %s -> %s', self.audio_path, self.state.value, state.value)
        self.state = state


class WhisperRecognitionEngine:
    """Streams timed segments from a normalized WAV through a Transcriber.

    Each call is independent: a fresh transcriber is created, the model is loaded,
    the audio is fed in fixed windows and the transcriber is closed afterwards.
    Segment callbacks fire synchronously, in production order, each one before the
    progress event that carries the same text. State transitions are logged per call
    on ``scribe.engine`` at DEBUG level.
    """

    def __init__(
        self,
        model_repository: ModelRepository,
        transcriber_factory: Callable[[], Transcriber],
        window_seconds: float = DEFAULT_WINDOW_SECONDS,
    ) -> None:
        self._models = model_repository
        self._transcriber_factory = transcriber_factory
        self._window_seconds = window_seconds

    def transcribe(
        self,
        audio_path: str,
        model: ModelSize,
        options: TranscriptionOptions | None = None,
        on_progress: Callable[[TranscriptionProgress], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> TranscriptionOutput:
        options = options or TranscriptionOptions()
        audio_path = str(audio_path)

        if not Path(audio_path).exists():
            raise AudioNotFoundError(f'Audio file not found: {audio_path}', path=audio_path)

        model_path = self._models.resolve_local_path(model)

        log.info('Starting transcription of %s using %s', audio_path, model.value)
        started = time.monotonic()
        texts: list[str] = []
        retained: list[TextSegment] = []

        run = _RecognitionRun(audio_path)
        transcriber = self._transcriber_factory()
        try:
            run.advance(RecognitionState.LOADING)
            transcriber.load_model(model_path)
            check_cancelled(cancel_token)

            run.advance(RecognitionState.STREAMING)
            _emit(on_progress, 0.0, PHASE_INITIALIZING)

            with contextlib.closing(iter_wav_windows(Path(audio_path), self._window_seconds)) as windows:
                for window in windows:
                    check_cancelled(cancel_token)
                    segments = transcriber.transcribe(window.samples, language=options.language)
                    if not segments:
                        _emit(on_progress, window.position_ratio(window.end), PHASE_TRANSCRIBING)
                    for raw in segments:
                        segment = TextSegment(
                            text=raw.text.strip(),
                            start=window.offset + raw.start,
                            end=window.offset + raw.end,
                        )
                        texts.append(segment.text)
                        if options.include_segments:
                            retained.append(segment)
                        if options.on_segment_detected is not None:
                            options.on_segment_detected(segment)
                        ratio = window.position_ratio(min(segment.end, window.end))
                        _emit(on_progress, ratio, PHASE_TRANSCRIBING, segment.text)
                        check_cancelled(cancel_token)
        except OperationCancelledError:
            run.advance(RecognitionState.CANCELLED)
            log.info('Transcription of %s cancelled', audio_path)
            raise
        except BaseException:
            run.advance(RecognitionState.FAILED)
            log.error('Transcription failed for %s', audio_path, exc_info=True)
            raise
        finally:
            transcriber.close()

        run.advance(RecognitionState.COMPLETED)
        elapsed = timedelta(seconds=time.monotonic() - started)
        full_text = '\n'.join(texts)
        log.info(
            'Transcription completed in %.2fs. Generated %d characters',
            elapsed.total_seconds(),
            len(full_text),
        )

        return TranscriptionOutput(
            full_text=full_text,
            processing_duration=elapsed,
            model_used=model,
            completed_at=datetime.now(),
            source_media_path=audio_path,
            segments=tuple(retained) if options.include_segments else None,
        )


def _emit(
    on_progress: Callable[[TranscriptionProgress], None] | None,
    ratio: float,
    phase: str,
    partial_text: str | None = None,
) -> None:
    if on_progress is not None:
        on_progress(TranscriptionProgress(completion_ratio=ratio, current_phase=phase, partial_text=partial_text))
