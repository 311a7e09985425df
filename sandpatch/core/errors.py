"""Typed exception hierarchy for sandpatch.

The patch engine itself never raises across its public contract; it returns
result dataclasses. These exceptions are raised by collaborators (content
stores, configuration loading) and are wrapped by the coordinator.
"""

from __future__ import annotations


class SandpatchError(Exception):
    """Base class for all sandpatch errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ConfigError(SandpatchError):
    """Raised for configuration issues (missing file, invalid JSON, validation failure)."""


class LoadError(SandpatchError):
    """Raised when a JSON file cannot be read or parsed."""


class PathSecurityError(SandpatchError):
    """Raised when a resolved path violates the sandbox boundary."""

    def __init__(self, path: str, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Path security violation for '{path}': {reason}")


class ContainerExecError(SandpatchError):
    """Raised when a command executed inside a container fails."""

    def __init__(self, command: list[str], returncode: int | None, stderr: str) -> None:
        self.command = command
        self.returncode = returncode
        self.stderr = stderr
        if returncode is None:
            detail = "timed out"
        else:
            detail = f"exit code {returncode}"
        message = f"Container command failed ({detail})"
        if stderr.strip():
            message += f": {stderr.strip()}"
        super().__init__(message)
