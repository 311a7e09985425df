"""Unit tests for sandpatch.core errors, utils and logging setup."""

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path

from sandpatch.core.errors import (
    ConfigError,
    ContainerExecError,
    PathSecurityError,
    SandpatchError,
)
from sandpatch.core.log_setup import configure_logging
from sandpatch.core.utils import deep_merge


class TestErrors:
    def test_hierarchy(self) -> None:
        assert issubclass(ConfigError, SandpatchError)
        assert issubclass(PathSecurityError, SandpatchError)
        assert issubclass(ContainerExecError, SandpatchError)

    def test_message_attribute(self) -> None:
        error = ConfigError("bad config")

        assert error.message == "bad config"
        assert str(error) == "bad config"

    def test_path_security_error(self) -> None:
        error = PathSecurityError("/etc/passwd", "outside root")

        assert error.message == "Path security violation for '/etc/passwd': outside root"

    def test_container_exec_error_without_stderr(self) -> None:
        error = ContainerExecError(["docker", "exec"], 125, "  ")

        assert error.message == "Container command failed (exit code 125)"


class TestDeepMerge:
    def test_nested_dicts_merged(self) -> None:
        base = {"security": {"require_identity": True, "allowed_roots": ["/app"]}}
        override = {"security": {"require_identity": False}}

        merged = deep_merge(base, override)

        assert merged == {"security": {"require_identity": False, "allowed_roots": ["/app"]}}

    def test_lists_replaced(self) -> None:
        merged = deep_merge({"roots": ["/a", "/b"]}, {"roots": []})

        assert merged == {"roots": []}

    def test_inputs_untouched(self) -> None:
        base = {"a": {"b": 1}}

        deep_merge(base, {"a": {"b": 2}})

        assert base == {"a": {"b": 1}}


class TestConfigureLogging:
    def test_console_only(self) -> None:
        ns_logger = configure_logging(logging.INFO)

        assert ns_logger.name == "sandpatch"
        assert len(ns_logger.handlers) == 1
        assert ns_logger.level == logging.INFO
        assert ns_logger.propagate is False

    def test_repeated_calls_do_not_duplicate_handlers(self) -> None:
        configure_logging()
        ns_logger = configure_logging()

        assert len(ns_logger.handlers) == 1

    def test_file_handler(self, tmp_path: Path) -> None:
        log_file = tmp_path / "logs" / "sandpatch.log"

        ns_logger = configure_logging(logging.WARNING, log_file=log_file, file_level=logging.DEBUG)
        logging.getLogger("sandpatch.audit").info("access granted: identity=x path=/app/y")
        for handler in ns_logger.handlers:
            handler.flush()

        assert any(isinstance(h, RotatingFileHandler) for h in ns_logger.handlers)
        assert ns_logger.level == logging.DEBUG
        assert "access granted" in log_file.read_text()

        for handler in ns_logger.handlers:
            handler.close()
