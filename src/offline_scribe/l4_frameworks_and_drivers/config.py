"""Application config defaults — lives in L4, not domain."""

from __future__ import annotations

import copy

from offline_scribe.l1_entities.config import AppConfig
from offline_scribe.l3_interface_adapters.gateways.paths import DATA_DIR
from offline_scribe.l3_interface_adapters.gateways.yaml_config_loader import deep_merge

APP_CONFIG_DEFAULTS: dict = {
    'storage': {
        'root': str(DATA_DIR),
    },
    'download': {
        'timeout': 60.0,
        'chunk_size': 8192,
    },
    'transcription': {
        'model': 'base',
        'language': None,
        'window_seconds': 30.0,
        'include_segments': False,
    },
}


def build_app_config(raw: dict) -> AppConfig:
    """Merge *raw* user overrides on top of defaults, then validate."""
    merged = copy.deepcopy(APP_CONFIG_DEFAULTS)
    deep_merge(merged, raw)
    return AppConfig.model_validate(merged)
