"""L1 entity: whisper model variants and their static metadata."""

from __future__ import annotations

import enum
from types import MappingProxyType

from pydantic import BaseModel


class ModelSize(enum.Enum):
    TINY = 'tiny'
    BASE = 'base'
    SMALL = 'small'
    MEDIUM = 'medium'
    LARGE_V3 = 'large-v3'


class ModelMetadata(BaseModel):
    display_name: str
    description: str
    estimated_bytes: int
    file_name: str

    model_config = {'frozen': True}


MODEL_CATALOG: MappingProxyType[ModelSize, ModelMetadata] = MappingProxyType(
    {
        ModelSize.TINY: ModelMetadata(
            display_name='Tiny',
            description='Fastest, lowest accuracy',
            estimated_bytes=77_000_000,
            file_name='ggml-tiny.bin',
        ),
        ModelSize.BASE: ModelMetadata(
            display_name='Base',
            description='Fast, good for English',
            estimated_bytes=148_000_000,
            file_name='ggml-base.bin',
        ),
        ModelSize.SMALL: ModelMetadata(
            display_name='Small',
            description='Balanced speed & accuracy',
            estimated_bytes=488_000_000,
            file_name='ggml-small.bin',
        ),
        ModelSize.MEDIUM: ModelMetadata(
            display_name='Medium',
            description='High accuracy',
            estimated_bytes=1_500_000_000,
            file_name='ggml-medium.bin',
        ),
        ModelSize.LARGE_V3: ModelMetadata(
            display_name='Large V3',
            description='Best accuracy, slowest',
            estimated_bytes=3_100_000_000,
            file_name='ggml-large-v3.bin',
        ),
    }
)
