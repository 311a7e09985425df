"""Core errors, constants and path utilities."""

from sandpatch.core.errors import (
    ConfigError,
    ContainerExecError,
    LoadError,
    PathSecurityError,
    SandpatchError,
)

__all__ = [
    "ConfigError",
    "ContainerExecError",
    "LoadError",
    "PathSecurityError",
    "SandpatchError",
]
