from __future__ import annotations

from .settings import AppConfig, BackendConfig, RuntimeConfig, Settings, SyncConfig, load_config

__all__ = [
    "AppConfig",
    "BackendConfig",
    "RuntimeConfig",
    "Settings",
    "SyncConfig",
    "load_config",
]
