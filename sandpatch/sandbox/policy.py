"""Patch targets and the security policy they are validated against."""

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass(frozen=True)
class PatchTarget:
    """A requested mutation target.

    Attributes:
        identity: Execution context handle (e.g. a container name)
        root_directory: Sandbox boundary the target must stay inside
        relative_path: Caller-supplied path, untrusted
    """

    identity: str
    root_directory: str
    relative_path: str


@dataclass(frozen=True)
class SecurityPolicy:
    """Configuration for the sandbox validator.

    Loaded once by the embedding system and never mutated.

    Attributes:
        allowed_identity_patterns: Literal names or `*` wildcard patterns
        allowed_roots: Directories a root and the final path must lie under
        restricted_prefixes: Paths that are always denied
        require_identity: Reject targets with an empty identity
    """

    allowed_identity_patterns: frozenset[str] = frozenset()
    allowed_roots: frozenset[str] = frozenset()
    restricted_prefixes: frozenset[str] = frozenset()
    require_identity: bool = True

    @classmethod
    def build(
        cls,
        allowed_identity_patterns: Iterable[str] = (),
        allowed_roots: Iterable[str] = (),
        restricted_prefixes: Iterable[str] = (),
        require_identity: bool = True,
    ) -> "SecurityPolicy":
        """Build a policy from any iterables."""
        return cls(
            allowed_identity_patterns=frozenset(allowed_identity_patterns),
            allowed_roots=frozenset(allowed_roots),
            restricted_prefixes=frozenset(restricted_prefixes),
            require_identity=require_identity,
        )
