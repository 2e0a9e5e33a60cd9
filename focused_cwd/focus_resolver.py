"""Focused window pid resolution over the X11 property protocol.

Reads the EWMH/ICCCM properties that identify the focused window and the
process owning it:

    root window     _NET_ACTIVE_WINDOW  WINDOW    focused window id
    focused window  WM_STATE            WM_STATE  Withdrawn / Normal / Iconic
    focused window  _NET_WM_PID         CARDINAL  owning process id
    focused window  WM_CLASS            STRING    fallback class name

Getting a handle on /proc and getting the pid are separate tasks, but the
two views must agree. If /proc were opened before the window is resolved, a
program started afterwards could be missing from our view (or a just-exited
program could share its pid). If it were opened after the pid is read, the
program could already be gone. The handle is therefore opened after the
window id is known and before its pid is read; this narrows the race without
removing it.
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional, Union

from Xlib import Xatom
from Xlib import display as xdisplay
from Xlib import error as xerror

from .errors import (
    ConfigurationError,
    DisplayConnectionError,
    NoFocusError,
    ProtocolError,
    StateError,
    UnimplementedError,
)
from .models import NO_WINDOW, PropertyReply, WindowState
from .proc_table import ProcTable

logger = logging.getLogger(__name__)


NET_ACTIVE_WINDOW = "_NET_ACTIVE_WINDOW"
NET_WM_PID = "_NET_WM_PID"
WM_STATE = "WM_STATE"

REQUIRED_ATOMS = (NET_ACTIVE_WINDOW, NET_WM_PID, WM_STATE)

# WM_CLASS is read in 32-bit units; 16 units = 64 bytes
WM_CLASS_READ_LENGTH = 16

_XLIB_ERRORS = (xerror.XError, xerror.ConnectionClosedError)


@dataclass(frozen=True)
class FocusedProcess:
    """The focused window's owner and the process table view it was read with."""

    pid: int
    window: int
    proc: ProcTable


class FocusResolver:
    """Resolves the pid owning the focused, visible window.

    Every step may fail independently; the first failure aborts with a typed
    FocusError. There are no retries.
    """

    def __init__(
        self,
        display_name: Optional[str] = None,
        proc_root: Union[str, Path] = "/proc",
        connect: Optional[Callable] = None,
        open_proc: Callable[..., ProcTable] = ProcTable,
    ):
        """Initialize the resolver.

        Args:
            display_name: X display to connect to (default: $DISPLAY)
            proc_root: Mount point of the process filesystem
            connect: Display factory, Xlib.display.Display by default
            open_proc: Process table factory, called with proc_root
        """
        self.display_name = display_name
        self.proc_root = proc_root
        self._connect = connect or xdisplay.Display
        self._open_proc = open_proc

    @contextmanager
    def focused_process(self) -> Iterator[FocusedProcess]:
        """Resolve the focused window's pid.

        Yields:
            FocusedProcess with the pid and the open process table. Both the
            display connection and the process table are released when the
            context exits, on every path.

        Raises:
            FocusError: On the first failing step
            ProcessReadError: If the process table cannot be opened
        """
        conn = self._open_display()
        try:
            atoms = self._intern_atoms(conn)
            root = self._root_window(conn)
            window_id = self._active_window(root, atoms[NET_ACTIVE_WINDOW])
            window = conn.create_resource_object("window", window_id)

            with self._open_proc(self.proc_root) as proc:
                self._check_state(window, window_id, atoms[WM_STATE])
                pid = self._window_pid(window, window_id, atoms[NET_WM_PID])
                logger.debug("Focused window %#x belongs to pid %d", window_id, pid)
                yield FocusedProcess(pid=pid, window=window_id, proc=proc)
        finally:
            conn.close()

    def resolve(self) -> int:
        """Return only the pid of the focused window's process."""
        with self.focused_process() as focused:
            return focused.pid

    def _open_display(self):
        try:
            return self._connect(self.display_name)
        except (xerror.DisplayError, xerror.ConnectionClosedError, OSError) as e:
            raise DisplayConnectionError(self.display_name, str(e)) from e

    def _intern_atoms(self, conn) -> Dict[str, int]:
        atoms = {}
        for name in REQUIRED_ATOMS:
            try:
                atom = conn.intern_atom(name)
            except _XLIB_ERRORS as e:
                raise ProtocolError(name, f"unable to intern atom: {e}") from e
            if not atom:
                raise ProtocolError(name, "server returned atom None")
            atoms[name] = atom
        return atoms

    def _root_window(self, conn):
        try:
            return conn.screen().root
        except (IndexError, AttributeError) as e:
            raise ConfigurationError(f"no default screen on {self.display_name or '$DISPLAY'}") from e

    def _get_property(self, window, window_id: int, name: str, atom: int,
                      prop_type: int, length: int = 1) -> Optional[PropertyReply]:
        """Read a property, returning None when it is absent or empty."""
        try:
            reply = window.get_property(atom, prop_type, 0, length)
        except _XLIB_ERRORS as e:
            raise ProtocolError(name, str(e), window_id) from e
        if reply is None:
            return None
        prop = PropertyReply.from_xlib(name, reply)
        if prop.value_count == 0:
            return None
        return prop

    def _active_window(self, root, atom: int) -> int:
        prop = self._get_property(root, root.id, NET_ACTIVE_WINDOW, atom, Xatom.WINDOW)
        if prop is None:
            raise ProtocolError(NET_ACTIVE_WINDOW, "property is missing or empty on the root window")
        window_id = prop.card32()
        if window_id == NO_WINDOW:
            raise NoFocusError()
        return window_id

    def _check_state(self, window, window_id: int, atom: int) -> None:
        """Reject withdrawn or iconic windows. A missing WM_STATE is tolerated."""
        try:
            prop = self._get_property(window, window_id, WM_STATE, atom, atom)
        except ProtocolError as e:
            logger.warning("Unable to retrieve WM_STATE from focused window %#x: %s", window_id, e)
            return
        if prop is None:
            logger.warning("Unable to retrieve WM_STATE from focused window %#x", window_id)
            return

        state = prop.card32()
        if state != WindowState.NORMAL:
            raise StateError(window_id, state)

    def _window_pid(self, window, window_id: int, atom: int) -> int:
        prop = self._get_property(window, window_id, NET_WM_PID, atom, Xatom.CARDINAL)
        if prop is not None:
            return prop.card32()

        logger.warning("Unable to retrieve _NET_WM_PID from focused window %#x; trying WM_CLASS", window_id)
        class_prop = self._get_property(
            window, window_id, "WM_CLASS", Xatom.WM_CLASS, Xatom.STRING, WM_CLASS_READ_LENGTH
        )
        window_class = class_prop.text() if class_prop is not None else ""
        raise UnimplementedError(window_id, window_class)


def resolve_focused_process(display_name: Optional[str] = None,
                            proc_root: Union[str, Path] = "/proc") -> int:
    """Return the pid owning the focused, visible window.

    Raises:
        FocusError: If the pid cannot be determined
    """
    return FocusResolver(display_name=display_name, proc_root=proc_root).resolve()
