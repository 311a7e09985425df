"""Configuration loading with fail-fast behavior and layered merging.

Layers, later overriding earlier:
1. Global user config (~/.sandpatch/config.json)
2. Project local config (<cwd>/.sandpatch/config.json)

The policy is loaded once by the embedding system and handed to the
coordinator; nothing here is consulted per request.
"""

import json
import logging
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from sandpatch.config.schema import Config
from sandpatch.core.constants import get_default_config_path, get_local_config_path
from sandpatch.core.errors import ConfigError, LoadError
from sandpatch.core.utils import deep_merge

logger = logging.getLogger(__name__)


def read_config_file(path: Path) -> dict[str, Any]:
    """Read one JSON config layer.

    A blank file counts as an empty object. A UTF-8 BOM is tolerated since
    editors on Windows like to add one.

    Raises:
        LoadError: Missing, unreadable, malformed, or not a JSON object.
    """
    try:
        text = path.read_text(encoding="utf-8-sig")
    except FileNotFoundError as e:
        raise LoadError(f"config: File not found: {path}") from e
    except OSError as e:
        raise LoadError(f"config: Failed to read file {path}: {e}") from e

    if not text.strip():
        return {}

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise LoadError(f"config: Invalid JSON in {path}: {e}") from e

    if not isinstance(data, dict):
        raise LoadError(f"config: Expected object in {path}, got {type(data).__name__}")
    return data


def _validate(data: dict[str, Any], source: str) -> Config:
    try:
        return Config.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed ({source}): {e}") from e


def load_config(path: Path | None = None, cwd: Path | None = None) -> Config:
    """Load configuration from file with layered merging.

    Args:
        path: Explicit config file path. If provided, skips layered loading.
        cwd: Working directory for local lookup. Defaults to Path.cwd().

    Returns:
        Validated Config object (Pydantic defaults when no file exists).

    Raises:
        ConfigError: If a config file is missing (explicit path only), holds
            invalid JSON, or the merged config fails validation.
    """
    if path is not None:
        try:
            data = read_config_file(path)
        except LoadError as e:
            raise ConfigError(e.message) from e
        return _validate(data, str(path))

    merged: dict[str, Any] = {}
    sources: list[str] = []
    for layer in (get_default_config_path(), get_local_config_path(cwd or Path.cwd())):
        if not layer.is_file():
            logger.debug("Optional config not present: %s", layer)
            continue
        try:
            merged = deep_merge(merged, read_config_file(layer))
        except LoadError as e:
            raise ConfigError(e.message) from e
        sources.append(str(layer))

    if not sources:
        logger.debug("No config files found, using defaults")
        return Config()

    logger.info("Config loaded from: %s", sources)
    return _validate(merged, "merged from " + ", ".join(sources))
