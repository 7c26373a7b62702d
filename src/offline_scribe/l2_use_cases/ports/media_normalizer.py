"""Port: media-to-PCM normalization."""

from __future__ import annotations

from collections.abc import Callable
from typing import Protocol

from offline_scribe.l1_entities.audio_constants import CHANNELS, SAMPLE_RATE
from offline_scribe.l1_entities.cancellation import CancellationToken


class MediaNormalizer(Protocol):
    """Converts arbitrary media into a 16-bit PCM WAV file at a fixed rate/channel count."""

    def initialize(
        self,
        on_progress: Callable[[str], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> None:
        """Provision the conversion toolchain once. Safe to call concurrently."""
        ...

    def extract_audio(
        self,
        source_path: str,
        target_sample_rate: int = SAMPLE_RATE,
        target_channels: int = CHANNELS,
        on_progress: Callable[[float], None] | None = None,
        cancel_token: CancellationToken | None = None,
    ) -> str:
        """Write a new temporary WAV and return its path. The caller deletes it."""
        ...
