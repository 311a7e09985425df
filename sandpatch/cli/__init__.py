"""Command-line interface for sandpatch."""
