"""On-disk imitation of /proc for process tree tests.

Each process gets exe and cwd symlinks and a task/<pid>/children file laid
out the way the kernel exposes them.
"""

import os
from pathlib import Path
from typing import Iterable, Optional, Union


class FakeProc:
    def __init__(self, root: Path):
        self.root = root
        self.root.mkdir(parents=True, exist_ok=True)

    def add(
        self,
        pid: int,
        exe: Union[str, bytes],
        cwd: Union[str, bytes],
        children: Iterable[int] = (),
        children_raw: Optional[bytes] = None,
    ) -> Path:
        """Add a process entry.

        Args:
            pid: Process ID.
            exe: Executable symlink target. Bytes are written unencoded.
            cwd: Working directory symlink target. Bytes are written unencoded.
            children: Child pids, written with the kernel's trailing space.
            children_raw: Exact children file content, overriding children.

        Returns:
            Path of the process directory.
        """
        proc_dir = self.root / str(pid)
        proc_dir.mkdir()
        _symlink(exe, proc_dir / "exe")
        _symlink(cwd, proc_dir / "cwd")

        task_dir = proc_dir / "task" / str(pid)
        task_dir.mkdir(parents=True)
        if children_raw is None:
            children_raw = "".join(f"{child} " for child in children).encode()
        (task_dir / "children").write_bytes(children_raw)
        return proc_dir

    def remove_children_file(self, pid: int) -> None:
        (self.root / str(pid) / "task" / str(pid) / "children").unlink()


def _symlink(target: Union[str, bytes], link: Path) -> None:
    if isinstance(target, bytes):
        os.symlink(target, os.fsencode(link))
    else:
        link.symlink_to(target)
