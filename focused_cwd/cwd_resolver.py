"""Working directory resolution over the process tree.

Starting from the focused window's process, the tree is walked depth-first
through /proc and one working directory is picked per node by merging the
node's own cwd with the best of its children:

    child PRIORITY                  -> child
    node REGULAR,  child REGULAR    -> child (deepest plain descendant)
    node PRIORITY, child REGULAR    -> node, if its directory still exists

A subtree that cannot be read contributes nothing; its parent falls back to
its own cwd. Every result handed up the tree has been checked to exist.
"""

import logging
import os
from typing import Callable, List, Optional, Sequence

from .errors import ProcessReadError
from .models import ChildResult, Cwd
from .proc_table import ProcTable

logger = logging.getLogger(__name__)


# Process trees are not cyclic, but /proc is not trusted to be shallow
DEFAULT_MAX_DEPTH = 64


def select_child(results: Sequence[ChildResult]) -> Optional[ChildResult]:
    """Pick the child to follow: the first PRIORITY result, else the first result.

    Args:
        results: Successfully resolved children, in /proc order

    Returns:
        The chosen child, or None if no child resolved
    """
    for result in results:
        if result.cwd.is_priority:
            return result
    return results[0] if results else None


def merge(parent: Cwd, child: Cwd, exists: Callable[[str], bool] = os.path.isdir) -> Cwd:
    """Merge a node's cwd with the cwd chosen from its children.

    Args:
        parent: The node's own classified cwd
        child: The chosen child's resolved cwd
        exists: Existence check for the parent's directory

    Returns:
        The winning cwd
    """
    if parent.is_priority and not child.is_priority:
        if exists(parent.path):
            return parent
        logger.info("Priority directory %s does not exist anymore; using %s", parent.path, child.path)
    return child


class CwdResolver:
    """Recursive resolver for the most relevant working directory of a process tree.

    Children are resolved one after another, depth-first, in the order the
    kernel lists them. Only the primary thread's children are considered.
    """

    def __init__(
        self,
        proc: ProcTable,
        priority_commands: Sequence[str] = (),
        max_depth: int = DEFAULT_MAX_DEPTH,
        exists: Callable[[str], bool] = os.path.isdir,
    ):
        """Initialize the resolver.

        Args:
            proc: Open process table
            priority_commands: Executable paths or names whose cwd wins tie-breaks
            max_depth: Deepest level descended into; nodes there are treated as leaves
            exists: Existence check applied to every returned directory
        """
        self.proc = proc
        self.priority_commands = list(priority_commands)
        self.max_depth = max_depth
        self.exists = exists

    def resolve(self, pid: int) -> Cwd:
        """Resolve the working directory for the tree rooted at pid.

        Raises:
            ProcessReadError: If the root process itself cannot be resolved
        """
        return self._resolve(pid, 0)

    def _resolve(self, pid: int, depth: int) -> Cwd:
        exe = self.proc.exe(pid)
        cwd = Cwd.classify(self.proc.cwd(pid), exe, self.priority_commands)
        logger.debug("Process %d (%s): %s [%s]", pid, exe, cwd.path, cwd.tag.value)

        children = self._children(pid, depth)
        results: List[ChildResult] = []
        for child in children:
            try:
                results.append(ChildResult(pid=child, cwd=self._resolve(child, depth + 1)))
            except ProcessReadError as e:
                logger.debug("Dropping child %d of process %d: %s", child, pid, e)

        chosen = select_child(results)
        if chosen is None:
            return self._verified(pid, cwd)

        if len(children) > 1:
            logger.info(
                "Process %d has multiple children %s; following %d",
                pid, children, chosen.pid,
            )
        return merge(cwd, chosen.cwd, self.exists)

    def _children(self, pid: int, depth: int) -> List[int]:
        if depth >= self.max_depth:
            logger.warning("Process tree deeper than %d levels at pid %d; not descending", self.max_depth, pid)
            return []
        try:
            return self.proc.children(pid)
        except ProcessReadError as e:
            logger.debug("Treating process %d as childless: %s", pid, e)
            return []

    def _verified(self, pid: int, cwd: Cwd) -> Cwd:
        if not self.exists(cwd.path):
            raise ProcessReadError(pid, f"{pid}/cwd", f"{cwd.path} does not exist anymore")
        return cwd


def resolve_cwd(
    proc: ProcTable,
    pid: int,
    priority_commands: Sequence[str] = (),
    max_depth: int = DEFAULT_MAX_DEPTH,
    exists: Callable[[str], bool] = os.path.isdir,
) -> Cwd:
    """Resolve the working directory for the process tree rooted at pid."""
    return CwdResolver(proc, priority_commands, max_depth=max_depth, exists=exists).resolve(pid)
