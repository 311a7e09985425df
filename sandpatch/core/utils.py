"""Shared utility functions for sandpatch."""

from typing import Any


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Overlay one config layer on another and return a new dict.

    Nested sections are merged key by key; any other value in `override`,
    lists included, replaces the one in `base`. A project config can
    therefore narrow `allowed_roots` instead of only adding to the global
    list.

    Example:
        >>> deep_merge({"security": {"allowed_roots": ["/app", "/workspace"]}},
        ...            {"security": {"allowed_roots": ["/app/workspace"]}})
        {'security': {'allowed_roots': ['/app/workspace']}}
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, dict) and isinstance(value, dict):
            merged[key] = deep_merge(current, value)
        else:
            merged[key] = value
    return merged
