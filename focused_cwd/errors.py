"""
Error handling for the focused-window working directory resolver.

Every failure of a resolution attempt is reported as a typed exception with
a structured code, so the command line can log it and substitute the
fallback directory.
"""

from enum import Enum
from typing import Optional, Dict, Any


class ErrorCode(Enum):
    """
    Error codes for focused-cwd.

    Custom codes:
    - 1000-1099: Display server errors (Focus Resolver)
    - 1100-1199: Focus state errors (Focus Resolver)
    - 1200-1299: Process table errors (Cwd Resolver)
    """

    # Display server errors (1000-1099)
    DISPLAY_CONNECTION_FAILED = 1000
    SCREEN_NOT_FOUND = 1001
    PROTOCOL_VIOLATION = 1002

    # Focus state errors (1100-1199)
    NO_FOCUSED_WINDOW = 1100
    WINDOW_NOT_NORMAL = 1101
    PID_LOOKUP_UNIMPLEMENTED = 1102

    # Process table errors (1200-1299)
    PROCESS_READ_FAILED = 1200


class FocusedCwdError(Exception):
    """Base exception for focused-cwd errors."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        context: Optional[Dict[str, Any]] = None
    ):
        """
        Initialize resolver error.

        Args:
            code: Error code from ErrorCode enum
            message: Human-readable error message
            context: Additional context for debugging
        """
        self.code = code
        self.message = message
        self.context = context or {}
        super().__init__(message)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert error to dictionary for structured logging.

        Returns:
            Error dictionary with code, message, and context
        """
        result = {
            "code": self.code.value,
            "message": self.message
        }

        if self.context:
            result["context"] = self.context

        return result


class FocusError(FocusedCwdError):
    """Failure to resolve the pid of the focused window."""


class DisplayConnectionError(FocusError):
    """The display server could not be reached."""

    def __init__(self, display_name: Optional[str], reason: str):
        super().__init__(
            code=ErrorCode.DISPLAY_CONNECTION_FAILED,
            message=f"Unable to open X11 connection to {display_name or '$DISPLAY'}: {reason}",
            context={"display": display_name, "reason": reason}
        )


class ConfigurationError(FocusError):
    """The display has no usable default screen."""

    def __init__(self, reason: str):
        super().__init__(
            code=ErrorCode.SCREEN_NOT_FOUND,
            message=f"Unable to select current screen: {reason}",
            context={"reason": reason}
        )


class ProtocolError(FocusError):
    """A property reply or atom lookup violated the expected wire shape."""

    def __init__(self, name: str, reason: str, window: Optional[int] = None):
        """
        Initialize protocol error.

        Args:
            name: Atom or property name involved
            reason: What was wrong with the reply
            window: Window the property was read from, if any
        """
        where = f" on window {window:#x}" if window is not None else ""
        context: Dict[str, Any] = {"name": name, "reason": reason}
        if window is not None:
            context["window"] = window
        super().__init__(
            code=ErrorCode.PROTOCOL_VIOLATION,
            message=f"Unable to retrieve {name}{where}: {reason}",
            context=context
        )
        self.name = name


class NoFocusError(FocusError):
    """No window currently holds the input focus."""

    def __init__(self):
        super().__init__(
            code=ErrorCode.NO_FOCUSED_WINDOW,
            message="No window is focused"
        )


class StateError(FocusError):
    """The focused window is withdrawn or iconic."""

    def __init__(self, window: int, state: int):
        super().__init__(
            code=ErrorCode.WINDOW_NOT_NORMAL,
            message=(
                f"Focused window {window:#x} is not in normal (visible) state "
                f"({state} != 1); ignoring"
            ),
            context={"window": window, "state": state}
        )
        self.window = window
        self.state = state


class UnimplementedError(FocusError):
    """The window has no _NET_WM_PID and matching by WM_CLASS is not supported."""

    def __init__(self, window: int, window_class: str):
        super().__init__(
            code=ErrorCode.PID_LOOKUP_UNIMPLEMENTED,
            message=f"Unimplemented: find processes named {window_class!r}",
            context={"window": window, "window_class": window_class}
        )
        self.window = window
        self.window_class = window_class


class CwdError(FocusedCwdError):
    """Failure to resolve a working directory from the process tree."""


class ProcessReadError(CwdError):
    """A /proc lookup for a pid failed, usually because the process exited."""

    def __init__(self, pid: int, path: str, reason: str):
        """
        Initialize process read error.

        Args:
            pid: Process whose entry could not be read
            path: Path relative to the process table root
            reason: Reason for failure
        """
        super().__init__(
            code=ErrorCode.PROCESS_READ_FAILED,
            message=f"Unable to read /proc/{path}: {reason}",
            context={"pid": pid, "path": path, "reason": reason}
        )
        self.pid = pid
        self.path = path
