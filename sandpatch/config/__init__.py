"""Configuration loading and validation."""

from sandpatch.config.loader import load_config
from sandpatch.config.schema import (
    AuditConfig,
    Config,
    PatchConfig,
    SecurityConfig,
    StoreConfig,
)

__all__ = [
    "AuditConfig",
    "Config",
    "PatchConfig",
    "SecurityConfig",
    "StoreConfig",
    "load_config",
]
