"""Stable handle onto the process table.

The /proc directory is opened once as a directory file descriptor and every
lookup is made relative to it, so all reads of a resolution attempt share the
same view of the process filesystem. Reads are limited to the primary thread:
children of other threads in the group are not discovered.
"""

import logging
import os
from pathlib import Path
from typing import List, Optional, Union

from .errors import ProcessReadError

logger = logging.getLogger(__name__)


# Upper bound on a children list; anything larger is treated as corrupt
MAX_CHILDREN_BYTES = 64 * 1024


class ProcTable:
    """Directory handle onto /proc with validated per-pid reads.

    Usage:
        with ProcTable() as proc:
            exe = proc.exe(pid)
            children = proc.children(pid)
    """

    def __init__(self, root: Union[str, Path] = "/proc"):
        """Open the process table.

        Args:
            root: Mount point of the process filesystem

        Raises:
            ProcessReadError: If the directory cannot be opened
        """
        self.root = Path(root)
        try:
            self._fd: Optional[int] = os.open(self.root, os.O_RDONLY | os.O_DIRECTORY)
        except OSError as e:
            raise ProcessReadError(0, ".", f"unable to open {self.root}: {e}") from e
        logger.debug("Opened process table %s (fd=%d)", self.root, self._fd)

    def __enter__(self) -> "ProcTable":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._fd is None

    def close(self) -> None:
        """Release the directory handle. Safe to call more than once."""
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    def _dir_fd(self, pid: int, path: str) -> int:
        if self._fd is None:
            raise ProcessReadError(pid, path, "process table is closed")
        return self._fd

    def _read_link(self, pid: int, path: str) -> str:
        dir_fd = self._dir_fd(pid, path)
        try:
            target = os.readlink(path, dir_fd=dir_fd)
        except OSError as e:
            raise ProcessReadError(pid, path, e.strerror or str(e)) from e

        # Non-UTF-8 names come back with surrogate escapes and cannot be printed
        try:
            target.encode("utf-8")
        except UnicodeEncodeError as e:
            raise ProcessReadError(pid, path, f"link target is not valid UTF-8: {target!r}") from e
        return target

    def exe(self, pid: int) -> str:
        """Absolute path of the process's executable."""
        return self._read_link(pid, f"{pid}/exe")

    def cwd(self, pid: int) -> str:
        """Absolute path of the process's current working directory."""
        return self._read_link(pid, f"{pid}/cwd")

    def children(self, pid: int) -> List[int]:
        """Immediate children of the process's primary thread.

        The kernel's list is untrusted input: it is size-bounded and every
        entry must be a positive decimal pid.

        Raises:
            ProcessReadError: If the list cannot be read or is malformed
        """
        # thread id == pid: the thread group leader
        path = f"{pid}/task/{pid}/children"
        dir_fd = self._dir_fd(pid, path)
        try:
            fd = os.open(path, os.O_RDONLY, dir_fd=dir_fd)
        except OSError as e:
            raise ProcessReadError(pid, path, e.strerror or str(e)) from e

        try:
            with os.fdopen(fd, "rb") as f:
                raw = f.read(MAX_CHILDREN_BYTES + 1)
        except OSError as e:
            raise ProcessReadError(pid, path, e.strerror or str(e)) from e

        if len(raw) > MAX_CHILDREN_BYTES:
            raise ProcessReadError(pid, path, f"children list exceeds {MAX_CHILDREN_BYTES} bytes")

        children = []
        for token in raw.split():
            if not token.isdigit():
                raise ProcessReadError(pid, path, f"malformed child pid {token!r}")
            child = int(token)
            if child <= 0:
                raise ProcessReadError(pid, path, f"invalid child pid {child}")
            children.append(child)
        return children
