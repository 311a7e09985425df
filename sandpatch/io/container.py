"""Content store for files inside a running container.

Reads and writes go through `docker exec` against the container named by the
target identity. The store owns the timeout for each exec; a timed-out
process is killed and reported as a ContainerExecError.
"""

import asyncio
import logging
import posixpath

from sandpatch.core.errors import ContainerExecError
from sandpatch.core.paths import normalize_posix, to_lf
from sandpatch.sandbox.policy import PatchTarget

logger = logging.getLogger(__name__)

DEFAULT_EXEC_TIMEOUT: float = 30.0

# Write to a sibling temp file, then rename over the target. An existing
# target is copied first (cp -p) so the truncating `cat` keeps its mode; the
# temp file is removed on any failure.
_ATOMIC_WRITE_SCRIPT = (
    'tmp="$1.sandpatch.$$"; '
    '{ { [ ! -e "$1" ] || cp -p "$1" "$tmp"; } && cat > "$tmp" && mv -f "$tmp" "$1"; } '
    '|| { rm -f "$tmp"; exit 1; }'
)


def container_path(target: PatchTarget) -> str:
    """Absolute path of the target inside the container."""
    return normalize_posix(posixpath.join(target.root_directory, target.relative_path))


class ContainerFileStore:
    """ContentProvider and ContentWriter backed by `docker exec`.

    Args:
        docker_binary: Container CLI to invoke (docker, podman, ...)
        timeout: Seconds allowed per exec call
    """

    def __init__(
        self,
        docker_binary: str = "docker",
        timeout: float = DEFAULT_EXEC_TIMEOUT,
        encoding: str = "utf-8",
    ) -> None:
        self._docker = docker_binary
        self._timeout = timeout
        self._encoding = encoding

    def read_command(self, target: PatchTarget) -> list[str]:
        return [self._docker, "exec", target.identity, "cat", "--", container_path(target)]

    def write_command(self, target: PatchTarget) -> list[str]:
        return [
            self._docker,
            "exec",
            "-i",
            target.identity,
            "sh",
            "-c",
            _ATOMIC_WRITE_SCRIPT,
            "sh",
            container_path(target),
        ]

    async def _run(self, command: list[str], stdin: bytes | None = None) -> bytes:
        logger.debug("Running: %s", " ".join(command))
        process = await asyncio.create_subprocess_exec(
            *command,
            stdin=asyncio.subprocess.PIPE if stdin is not None else asyncio.subprocess.DEVNULL,
            stdout=asyncio.subprocess.PIPE,
            stderr=asyncio.subprocess.PIPE,
        )
        try:
            stdout, stderr = await asyncio.wait_for(
                process.communicate(stdin), timeout=self._timeout
            )
        except TimeoutError:
            logger.warning("Container command timed out after %.1fs", self._timeout)
            try:
                process.kill()
            except ProcessLookupError:
                pass
            await process.wait()
            raise ContainerExecError(command, None, "")

        if process.returncode != 0:
            raise ContainerExecError(
                command,
                process.returncode,
                stderr.decode(self._encoding, errors="replace"),
            )
        return stdout

    async def read(self, target: PatchTarget) -> str:
        """Read the target file from the container as LF-normalized text.

        Raises:
            ContainerExecError: If the exec fails or times out.
            UnicodeDecodeError: If the file is not valid text.
        """
        stdout = await self._run(self.read_command(target))
        return to_lf(stdout.decode(self._encoding))

    async def write(self, target: PatchTarget, content: str) -> None:
        """Replace the target file in the container.

        Raises:
            ContainerExecError: If the exec fails or times out.
        """
        await self._run(self.write_command(target), stdin=content.encode(self._encoding))
