"""Shared pytest fixtures and configuration for pytest."""

import logging
import sys
from collections.abc import Iterator

import pytest

from sandpatch.sandbox.audit import MemoryAuditSink
from sandpatch.sandbox.policy import PatchTarget, SecurityPolicy


def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers for platform-specific tests."""
    config.addinivalue_line("markers", "unix_only: mark test to run only on Unix")


def pytest_collection_modifyitems(
    config: pytest.Config, items: list[pytest.Item]
) -> None:
    """Auto-skip tests based on platform markers."""
    skip_unix = pytest.mark.skip(reason="Unix-only test")

    for item in items:
        if "unix_only" in item.keywords and sys.platform == "win32":
            item.add_marker(skip_unix)


@pytest.fixture
def policy() -> SecurityPolicy:
    """Policy used by most sandbox tests."""
    return SecurityPolicy.build(
        allowed_identity_patterns=["ai-sandbox-*", "exact-box"],
        allowed_roots=["/app", "/workspace"],
        restricted_prefixes=["/etc", "/app/secrets"],
    )


@pytest.fixture
def target() -> PatchTarget:
    """A target that passes the default `policy` fixture."""
    return PatchTarget(
        identity="ai-sandbox-1",
        root_directory="/app",
        relative_path="src/main.py",
    )


@pytest.fixture
def audit_sink() -> MemoryAuditSink:
    return MemoryAuditSink()


@pytest.fixture(autouse=True)
def reset_sandpatch_logger() -> Iterator[None]:
    """Undo configure_logging() so caplog sees records from every test."""
    yield
    ns_logger = logging.getLogger("sandpatch")
    ns_logger.handlers.clear()
    ns_logger.setLevel(logging.NOTSET)
    ns_logger.propagate = True
