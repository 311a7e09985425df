"""Logging configuration for the sandpatch namespace."""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path

NAMESPACE = "sandpatch"

_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def configure_logging(
    level: int = logging.WARNING,
    log_file: Path | None = None,
    file_level: int = logging.INFO,
) -> logging.Logger:
    """Configure the `sandpatch` namespace logger.

    Sets up a stderr handler and, when `log_file` is given, a rotating file
    handler (max 5MB per file, 3 backups). Existing handlers are replaced so
    repeated calls do not duplicate output. Messages do not propagate to the
    root logger.

    Args:
        level: Console logging level (default WARNING).
        log_file: Optional path for persistent logs (parent is created).
        file_level: Logging level for the file handler (default INFO).

    Returns:
        The configured namespace logger.

    Example:
        configure_logging(logging.DEBUG, Path(".sandpatch/logs/sandpatch.log"))
        logging.getLogger("sandpatch.audit").warning("access denied: ...")
    """
    ns_logger = logging.getLogger(NAMESPACE)
    ns_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%H:%M:%S"))
    ns_logger.addHandler(console_handler)

    effective = level
    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_file,
            maxBytes=5 * 1024 * 1024,  # 5MB
            backupCount=3,
            encoding="utf-8",
        )
        file_handler.setLevel(file_level)
        file_handler.setFormatter(logging.Formatter(_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        ns_logger.addHandler(file_handler)
        effective = min(level, file_level)

    ns_logger.setLevel(effective)
    ns_logger.propagate = False
    return ns_logger
