"""Sandboxed unified-diff patching.

Parses unified diffs, validates patch targets against a security policy and
applies patches atomically through injected content stores.
"""

__version__ = "0.1.0"
