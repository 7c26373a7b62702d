"""Headless runners — model download and media transcription with progress on stderr."""

from __future__ import annotations

import sys

from offline_scribe.l1_entities.cancellation import CancellationToken
from offline_scribe.l1_entities.model_catalog import ModelSize
from offline_scribe.l1_entities.transcript import TextSegment, format_wall_time
from offline_scribe.l1_entities.transcription import (
    TranscriptionOptions,
    TranscriptionOutput,
    TranscriptionProgress,
)
from offline_scribe.l2_use_cases.ports.media_normalizer import MediaNormalizer
from offline_scribe.l2_use_cases.ports.model_repository import ModelRepository
from offline_scribe.l2_use_cases.transcribe_media_use_case import TranscribeMediaUseCase


def _err(msg: str) -> None:
    print(msg, file=sys.stderr, flush=True)


class ProgressPrinter:
    """Prints one line per whole-percent step or phase change."""

    def __init__(self) -> None:
        self._last: tuple[int, str] | None = None

    def __call__(self, progress: TranscriptionProgress) -> None:
        key = (int(progress.percent_complete), progress.current_phase)
        if key == self._last:
            return
        self._last = key
        _err(f'  [{key[0]:3d}%] {key[1]}')


def download_model(
    repository: ModelRepository,
    model: ModelSize,
    cancel_token: CancellationToken | None = None,
) -> str:
    """Download *model*, printing percentages. Returns the local artifact path."""
    descriptor = repository.get(model)
    _err(f'Downloading {descriptor.name} (~{descriptor.formatted_size})')

    last_percent = -1

    def _on_progress(ratio: float) -> None:
        nonlocal last_percent
        percent = int(ratio * 100)
        if percent != last_percent:
            last_percent = percent
            _err(f'  Downloading {model.value}: {percent}%')

    repository.acquire(model, on_progress=_on_progress, cancel_token=cancel_token)
    path = repository.resolve_local_path(model)
    _err(f'Saved: {path}')
    return path


def transcribe_file(
    use_case: TranscribeMediaUseCase,
    normalizer: MediaNormalizer,
    media_path: str,
    model: ModelSize,
    options: TranscriptionOptions,
    cancel_token: CancellationToken | None = None,
) -> TranscriptionOutput:
    """Provision ffmpeg if needed, then run the full pipeline with live segment echo."""
    normalizer.initialize(on_progress=_err, cancel_token=cancel_token)

    def _on_segment(segment: TextSegment) -> None:
        _err(f'  [{format_wall_time(segment.start)}] {segment.text}')

    _err(f'Transcribing {media_path} with {model.value}')
    return use_case.execute(
        media_path,
        model,
        options.model_copy(update={'on_segment_detected': _on_segment}),
        on_progress=ProgressPrinter(),
        cancel_token=cancel_token,
    )


def render_output(result: TranscriptionOutput, with_timestamps: bool) -> str:
    """Plain full text, or one ``[HH:MM:SS] text`` line per retained segment."""
    if with_timestamps and result.segments is not None:
        return '\n'.join(f'[{format_wall_time(seg.start)}] {seg.text}' for seg in result.segments)
    return result.full_text
