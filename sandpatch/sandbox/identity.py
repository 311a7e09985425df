"""Inference of a project identity from a runtime-discovered container name.

The rules live in an explicit, ordered table so they can be tested and
extended without touching the patch engine, which only ever receives an
already-resolved PatchTarget.

Usage:
    from sandpatch.sandbox.identity import infer_identity

    infer_identity("ai-web-ide-my-shop-1712345678")  # Returns "my_shop"
    infer_identity("postgres")                        # Returns None
"""

from __future__ import annotations

import re
from collections.abc import Sequence
from dataclasses import dataclass

# A dash-separated token that is entirely digits (timestamps, counters)
_NUMERIC_TOKEN = r"\d+(?:-|$)"


@dataclass(frozen=True)
class IdentityRule:
    """One inference rule: the `project` group of `pattern` is the identity."""

    name: str
    pattern: re.Pattern[str]


DEFAULT_IDENTITY_RULES: tuple[IdentityRule, ...] = (
    # ai-web-ide-{project}-{timestamp}
    IdentityRule(
        name="web-ide-timestamped",
        pattern=re.compile(r"^ai-web-ide-(?P<project>.+?)-\d+$"),
    ),
    # Anything containing web-ide-{project...}, stopping at the first numeric token
    IdentityRule(
        name="web-ide-loose",
        pattern=re.compile(
            rf"web-ide-(?P<project>(?!{_NUMERIC_TOKEN})[^-]+(?:-(?!{_NUMERIC_TOKEN})[^-]+)*)"
        ),
    ),
)


def normalize_project_name(name: str) -> str:
    """Normalize a project name: dashes become underscores.

    Examples:
        >>> normalize_project_name("my-shop")
        'my_shop'
    """
    return name.replace("-", "_")


def infer_identity(
    raw_name: str,
    rules: Sequence[IdentityRule] = DEFAULT_IDENTITY_RULES,
) -> str | None:
    """Infer a normalized project identity from a raw container name.

    Rules are tried in order; the first match wins.

    Args:
        raw_name: Container or sandbox name as discovered at runtime.
        rules: Ordered rule table (defaults to DEFAULT_IDENTITY_RULES).

    Returns:
        Normalized project name, or None if no rule matches.

    Examples:
        >>> infer_identity("ai-web-ide-todo-app-1700000000")
        'todo_app'
        >>> infer_identity("my-web-ide-blog-3")
        'blog'
        >>> infer_identity("redis") is None
        True
    """
    if not raw_name:
        return None

    for rule in rules:
        match = rule.pattern.search(raw_name)
        if match:
            return normalize_project_name(match.group("project"))
    return None
