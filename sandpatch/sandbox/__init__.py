"""Sandbox validation: policy, target checks, audit events and identity inference."""

from sandpatch.sandbox.audit import (
    AuditEvent,
    AuditVerdict,
    LoggingAuditSink,
    MemoryAuditSink,
)
from sandpatch.sandbox.identity import infer_identity, normalize_project_name
from sandpatch.sandbox.policy import PatchTarget, SecurityPolicy
from sandpatch.sandbox.types import SandboxViolation, ValidationResult, ViolationKind
from sandpatch.sandbox.validator import identity_matches, validate_target

__all__ = [
    "AuditEvent",
    "AuditVerdict",
    "LoggingAuditSink",
    "MemoryAuditSink",
    "PatchTarget",
    "SandboxViolation",
    "SecurityPolicy",
    "ValidationResult",
    "ViolationKind",
    "identity_matches",
    "infer_identity",
    "normalize_project_name",
    "validate_target",
]
