"""Dependency container — composition root for wiring all layers together."""

from __future__ import annotations

from offline_scribe.l1_entities.config import AppConfig
from offline_scribe.l2_use_cases.ports.audio_recorder import AudioRecorder
from offline_scribe.l2_use_cases.ports.media_normalizer import MediaNormalizer
from offline_scribe.l2_use_cases.ports.model_repository import ModelRepository
from offline_scribe.l2_use_cases.ports.recognition_engine import RecognitionEngine
from offline_scribe.l2_use_cases.transcribe_media_use_case import TranscribeMediaUseCase
from offline_scribe.l3_interface_adapters.gateways.ffmpeg_media_normalizer import FfmpegMediaNormalizer
from offline_scribe.l3_interface_adapters.gateways.hf_model_repository import HfModelRepository
from offline_scribe.l3_interface_adapters.gateways.whisper_recognition_engine import WhisperRecognitionEngine
from offline_scribe.l3_interface_adapters.gateways.whisper_transcriber import WhisperTranscriber


class DependencyContainer:
    """Creates and wires all concrete instances. Easy to override for testing."""

    def __init__(self, config: AppConfig) -> None:
        self.config = config
        config.ensure_directories()

        self.model_repository: ModelRepository = HfModelRepository(
            config.models_dir,
            chunk_size=config.download.chunk_size,
            timeout=config.download.timeout,
        )
        self.media_normalizer: MediaNormalizer = FfmpegMediaNormalizer(config.ffmpeg_dir, config.temp_dir)
        self.recognition_engine: RecognitionEngine = WhisperRecognitionEngine(
            self.model_repository,
            WhisperTranscriber,
            window_seconds=config.transcription.window_seconds,
        )
        self.transcribe_media = TranscribeMediaUseCase(
            model_repository=self.model_repository,
            media_normalizer=self.media_normalizer,
            recognition_engine=self.recognition_engine,
        )

    def build_recorder(self) -> AudioRecorder:
        from offline_scribe.l3_interface_adapters.gateways.sounddevice_audio_recorder import (  # noqa: PLC0415 -- deferred: PortAudio only loaded for `record`
            SounddeviceAudioRecorder,
        )

        return SounddeviceAudioRecorder(self.config.temp_dir)
