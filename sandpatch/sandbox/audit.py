"""Audit events for sandbox validation decisions, and simple sinks."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from sandpatch.sandbox.types import ViolationKind

logger = logging.getLogger(__name__)

AUDIT_LOGGER_NAME = "sandpatch.audit"


class AuditVerdict(Enum):
    ALLOWED = "allowed"
    DENIED = "denied"


@dataclass(frozen=True)
class AuditEvent:
    """One immutable record of a validation decision."""

    identity: str
    path: str
    verdict: AuditVerdict
    reason: ViolationKind | None = None
    detail: str = ""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))

    def to_dict(self) -> dict[str, Any]:
        """JSON-friendly representation."""
        return {
            "identity": self.identity,
            "path": self.path,
            "verdict": self.verdict.value,
            "reason": self.reason.value if self.reason else None,
            "detail": self.detail,
            "timestamp": self.timestamp.isoformat(),
        }


class LoggingAuditSink:
    """Audit sink that writes events to the `sandpatch.audit` logger.

    Allowed access is logged at INFO, denied access at WARNING.
    """

    def __init__(self, logger_name: str = AUDIT_LOGGER_NAME) -> None:
        self._logger = logging.getLogger(logger_name)

    def record(self, event: AuditEvent) -> None:
        if event.verdict is AuditVerdict.ALLOWED:
            self._logger.info(
                "access granted: identity=%s path=%s", event.identity, event.path
            )
        else:
            self._logger.warning(
                "access denied: identity=%s path=%s reason=%s detail=%s",
                event.identity,
                event.path,
                event.reason.value if event.reason else None,
                event.detail,
            )


class MemoryAuditSink:
    """Audit sink that keeps events in a list."""

    def __init__(self) -> None:
        self.events: list[AuditEvent] = []

    def record(self, event: AuditEvent) -> None:
        self.events.append(event)

    @property
    def denied(self) -> list[AuditEvent]:
        return [e for e in self.events if e.verdict is AuditVerdict.DENIED]


def emit(sink: Any, event: AuditEvent) -> None:
    """Deliver an event to a sink without letting the sink affect the caller.

    Auditing is fire-and-forget: a failing sink is logged, never propagated,
    so it cannot change a validation verdict.
    """
    if sink is None:
        return
    try:
        sink.record(event)
    except Exception:
        logger.exception("Audit sink %r failed to record event", sink)
