"""Port: configuration loader."""

from __future__ import annotations

from typing import Protocol

from offline_scribe.l1_entities.config import AppConfig


class ConfigLoader(Protocol):
    """Abstract configuration loader."""

    def load(
        self,
        config_path: str | None = None,
        overrides: dict | None = None,
    ) -> AppConfig: ...

    def load_raw(
        self,
        config_path: str | None = None,
        overrides: dict | None = None,
    ) -> dict:
        """Read user configuration and merge overrides, before validation."""
        ...
