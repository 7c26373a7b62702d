"""Port: local whisper model storage."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from offline_scribe.l1_entities.cancellation import CancellationToken
from offline_scribe.l1_entities.model_catalog import ModelSize
from offline_scribe.l1_entities.model_descriptor import ModelDescriptor


class ModelRepository(Protocol):
    """Maps a model identifier to a verified local artifact and manages its lifecycle."""

    def list_all(self) -> list[ModelDescriptor]:
        """Describe every catalog entry, re-checking disk state on each call."""
        ...

    def get(self, size: ModelSize) -> ModelDescriptor:
        """Describe a single catalog entry."""
        ...

    def resolve_local_path(self, size: ModelSize) -> str:
        """Return the artifact path. Raises ModelUnavailableError; never downloads."""
        ...

    def acquire(
        self,
        size: ModelSize,
        on_progress: Callable[[float], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """Download the artifact. A failed download leaves no file behind."""
        ...

    def remove(self, size: ModelSize) -> None:
        """Delete the artifact if present. Idempotent."""
        ...
