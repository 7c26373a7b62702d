"""Model descriptor entity — a read-derived projection of disk state."""

from __future__ import annotations

from pydantic import BaseModel

from offline_scribe.l1_entities.model_catalog import ModelSize

_UNITS = ('B', 'KB', 'MB', 'GB', 'TB')


def format_bytes(count: int) -> str:
    """Format a byte count using 1024-based units with two decimals."""
    size = float(count)
    unit = 0
    while size >= 1024 and unit < len(_UNITS) - 1:
        size /= 1024
        unit += 1
    return f'{size:.2f} {_UNITS[unit]}'


class ModelDescriptor(BaseModel):
    """Catalog metadata joined with the current local availability of the artifact."""

    size: ModelSize
    name: str
    description: str
    size_in_bytes: int
    is_available_locally: bool
    local_file_path: str | None = None

    model_config = {'frozen': True}

    @property
    def formatted_size(self) -> str:
        return format_bytes(self.size_in_bytes)
