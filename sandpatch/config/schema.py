"""Pydantic models for sandpatch configuration validation."""

import posixpath
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

from sandpatch.sandbox.policy import SecurityPolicy

StoreBackend = Literal["local", "container"]


def _check_absolute_posix(paths: list[str]) -> list[str]:
    """Require absolute POSIX paths and normalize them."""
    normalized = []
    for path in paths:
        if not path.startswith("/"):
            raise ValueError(f"Path must be absolute: {path!r}")
        normalized.append(posixpath.normpath(path))
    return normalized


class SecurityConfig(BaseModel):
    """Sandbox policy settings.

    Example in config.json:
        "security": {
            "allowed_identity_patterns": ["ai-web-ide-*"],
            "allowed_roots": ["/app/workspace"],
            "restricted_prefixes": ["/etc", "/root"],
            "require_identity": true
        }
    """

    model_config = ConfigDict(extra="forbid")

    allowed_identity_patterns: list[str] = Field(
        default_factory=lambda: ["ai-web-ide-*", "ai-dev-*"]
    )
    """Container names or `*` patterns that may be patched."""

    allowed_roots: list[str] = Field(
        default_factory=lambda: ["/app", "/app/workspace", "/workspace"]
    )
    """Directories that roots and final paths must lie under."""

    restricted_prefixes: list[str] = Field(
        default_factory=lambda: [
            "/etc",
            "/usr",
            "/bin",
            "/sbin",
            "/root",
            "/home",
            "/var/log",
            "/sys",
            "/proc",
        ]
    )
    """Paths that are always denied."""

    require_identity: bool = True
    """Reject targets that carry no identity."""

    @field_validator("allowed_identity_patterns")
    @classmethod
    def _patterns_not_blank(cls, v: list[str]) -> list[str]:
        for pattern in v:
            if not pattern.strip():
                raise ValueError("Identity patterns must not be blank")
        return v

    @field_validator("allowed_roots", "restricted_prefixes")
    @classmethod
    def _absolute_paths(cls, v: list[str]) -> list[str]:
        return _check_absolute_posix(v)

    def to_policy(self) -> SecurityPolicy:
        """Build the immutable policy used by the validator."""
        return SecurityPolicy.build(
            allowed_identity_patterns=self.allowed_identity_patterns,
            allowed_roots=self.allowed_roots,
            restricted_prefixes=self.restricted_prefixes,
            require_identity=self.require_identity,
        )


class PatchConfig(BaseModel):
    """Diff parsing and application settings."""

    model_config = ConfigDict(extra="forbid")

    strict_parse: bool = False
    """Fail on hunk lines with an unknown prefix instead of dropping them."""

    dry_run: bool = False
    """Validate and apply in memory without writing."""


class StoreConfig(BaseModel):
    """Content store selection."""

    model_config = ConfigDict(extra="forbid")

    backend: StoreBackend = "local"
    """local: host filesystem, container: docker exec."""

    docker_binary: str = "docker"
    """Container CLI used by the container backend."""

    exec_timeout: float = Field(default=30.0, gt=0)
    """Seconds allowed per container exec."""


class AuditConfig(BaseModel):
    """Audit event routing."""

    model_config = ConfigDict(extra="forbid")

    enabled: bool = True
    """Send validation decisions to the audit logger."""

    logger_name: str = "sandpatch.audit"
    """Logger that receives audit events."""


class Config(BaseModel):
    """Root configuration model."""

    model_config = ConfigDict(extra="forbid")

    security: SecurityConfig = Field(default_factory=SecurityConfig)
    patch: PatchConfig = Field(default_factory=PatchConfig)
    store: StoreConfig = Field(default_factory=StoreConfig)
    audit: AuditConfig = Field(default_factory=AuditConfig)
