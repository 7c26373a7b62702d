"""Configuration Pydantic models — pure schema, no infrastructure defaults."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field

from offline_scribe.l1_entities.model_catalog import ModelSize


class StorageConfig(BaseModel):
    root: str


class DownloadConfig(BaseModel):
    timeout: float = Field(description='Seconds before an idle model download is abandoned')
    chunk_size: int = Field(gt=0)


class TranscriptionConfig(BaseModel):
    model: ModelSize
    language: str | None = None
    window_seconds: float = Field(gt=0)
    include_segments: bool


class AppConfig(BaseModel):
    storage: StorageConfig
    download: DownloadConfig
    transcription: TranscriptionConfig

    @property
    def root_dir(self) -> Path:
        return Path(self.storage.root).expanduser()

    @property
    def models_dir(self) -> Path:
        return self.root_dir / 'Models'

    @property
    def ffmpeg_dir(self) -> Path:
        return self.root_dir / 'FFmpeg'

    @property
    def temp_dir(self) -> Path:
        return self.root_dir / 'Temp'

    def ensure_directories(self) -> None:
        for d in (self.models_dir, self.ffmpeg_dir, self.temp_dir):
            d.mkdir(parents=True, exist_ok=True)
