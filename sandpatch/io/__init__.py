"""Content stores implementing the ContentProvider and ContentWriter protocols."""

from sandpatch.io.container import ContainerFileStore
from sandpatch.io.local import LocalFileStore

__all__ = ["ContainerFileStore", "LocalFileStore"]
