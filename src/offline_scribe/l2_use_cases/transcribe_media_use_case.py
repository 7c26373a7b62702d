"""Use case: media file → normalized audio → transcript, as one cancellable operation."""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path

from offline_scribe.l1_entities.cancellation import CancellationToken, check_cancelled
from offline_scribe.l1_entities.errors import MediaNotFoundError, ModelUnavailableError
from offline_scribe.l1_entities.model_catalog import ModelSize
from offline_scribe.l1_entities.transcription import (
    TranscriptionOptions,
    TranscriptionOutput,
    TranscriptionProgress,
)
from offline_scribe.l2_use_cases.ports.media_normalizer import MediaNormalizer
from offline_scribe.l2_use_cases.ports.model_repository import ModelRepository
from offline_scribe.l2_use_cases.ports.recognition_engine import RecognitionEngine
from offline_scribe.l2_use_cases.utils.progress_blender import MonotonicProgress, PhaseBand

log = logging.getLogger('scribe.pipeline')

PHASE_PREPARING = 'Preparing audio'
PHASE_CONVERTING = 'Converting audio format'
PHASE_COMPLETED = 'Completed'

# Conversion is usually an order of magnitude faster than inference.
NORMALIZATION_BAND = PhaseBand(start=0.0, width=0.2)
RECOGNITION_BAND = PhaseBand(start=0.2, width=0.8)


class TranscribeMediaUseCase:
    """Composes model check, normalization and recognition with blended progress.

    Progress ratios seen by the caller never decrease within one ``execute`` call.
    Segment callbacks fire before the progress event carrying that segment's text.
    The intermediate WAV is always deleted, whichever stage fails.
    """

    def __init__(
        self,
        model_repository: ModelRepository,
        media_normalizer: MediaNormalizer,
        recognition_engine: RecognitionEngine,
    ) -> None:
        self._models = model_repository
        self._normalizer = media_normalizer
        self._engine = recognition_engine

    def check_model_ready(self, model: ModelSize) -> bool:
        """Pure availability probe — never downloads."""
        return self._models.get(model).is_available_locally

    def execute(
        self,
        media_path: str,
        model: ModelSize,
        options: TranscriptionOptions | None = None,
        on_progress: Callable[[TranscriptionProgress], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> TranscriptionOutput:
        media_path = str(media_path)
        if not Path(media_path).exists():
            raise MediaNotFoundError(f'Media file not found: {media_path}', path=media_path)

        if not self.check_model_ready(model):
            raise ModelUnavailableError(f'Model {model.value} is not available. Download it first.', model=model)

        check_cancelled(cancel_token)

        log.info('Starting transcription of %s with %s', media_path, model.value)
        progress = MonotonicProgress(on_progress)
        normalized_path: str | None = None

        def _on_conversion(ratio: float) -> None:
            progress.report(NORMALIZATION_BAND.map(ratio), PHASE_CONVERTING)

        def _on_recognition(p: TranscriptionProgress) -> None:
            progress.report(RECOGNITION_BAND.map(p.completion_ratio), p.current_phase, p.partial_text)

        try:
            progress.report(0.0, PHASE_PREPARING)
            normalized_path = self._normalizer.extract_audio(
                media_path,
                on_progress=_on_conversion,
                cancel_token=cancel_token,
            )

            result = self._engine.transcribe(
                normalized_path,
                model,
                options,
                on_progress=_on_recognition,
                cancel_token=cancel_token,
            )

            progress.report(1.0, PHASE_COMPLETED)
            log.info('Transcription of %s completed in %.2fs', media_path, result.processing_duration.total_seconds())
            return result.model_copy(update={'source_media_path': media_path})
        finally:
            if normalized_path is not None:
                _discard_temp_file(Path(normalized_path))


def _discard_temp_file(path: Path) -> None:
    try:
        path.unlink(missing_ok=True)
        log.debug('Cleaned up temporary file: %s', path)
    except OSError:
        log.warning('Failed to delete temporary file: %s', path, exc_info=True)
