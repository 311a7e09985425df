"""Core constants and paths for sandpatch.

Single source of truth for config locations. Modules import from here
instead of hardcoding `Path.home() / ".sandpatch"`.
"""

from pathlib import Path

SANDPATCH_DIR_NAME = ".sandpatch"
CONFIG_FILE_NAME = "config.json"

# Reported as the actual line when a hunk runs past the end of the document
EOF_SENTINEL = "<EOF>"


def get_sandpatch_dir() -> Path:
    """Get ~/.sandpatch (global config directory)."""
    return Path.home() / SANDPATCH_DIR_NAME


def get_default_config_path() -> Path:
    """Get default global config file path."""
    return get_sandpatch_dir() / CONFIG_FILE_NAME


def get_local_config_path(cwd: Path) -> Path:
    """Get the project-local config file path for a working directory."""
    return cwd / SANDPATCH_DIR_NAME / CONFIG_FILE_NAME
