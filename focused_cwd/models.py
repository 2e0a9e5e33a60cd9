"""Pydantic data models for the focused-window working directory resolver.

This module defines the values exchanged between the resolvers:
- WindowState: ICCCM WM_STATE values
- PropertyReply: Decoded GetProperty reply with shape validation
- CwdTag / Cwd: Working directory tagged by priority classification
- ChildResult: A resolved child subtree, kept with its pid for diagnostics
"""

from enum import Enum
from typing import List, Sequence, Union

from pydantic import BaseModel, ConfigDict, Field

from .errors import ProtocolError


# X11 "None" resource id, as reported by _NET_ACTIVE_WINDOW when nothing is focused
NO_WINDOW = 0


# =============================================================================
# Window State Enum
# =============================================================================


class WindowState(int, Enum):
    """ICCCM WM_STATE values. 2 is unused by convention."""

    WITHDRAWN = 0
    NORMAL = 1
    ICONIC = 3


# =============================================================================
# Property Reply Model
# =============================================================================


class PropertyReply(BaseModel):
    """Decoded GetProperty reply.

    python-xlib hands back format-8 data as bytes and format-16/32 data as an
    array of ints; both are normalized here so the reply can be validated
    against the property's known wire type before it is trusted.

    Attributes:
        name: Property name, used in error messages.
        property_type: Atom of the reply's actual type.
        format: Item width in bits (8, 16 or 32).
        value: Raw bytes (format 8) or list of integers (format 16/32).
    """

    model_config = ConfigDict(frozen=True)

    name: str
    property_type: int = 0
    format: int = Field(default=32, description="Item width in bits")
    value: Union[bytes, List[int]] = b""

    @classmethod
    def from_xlib(cls, name: str, reply) -> "PropertyReply":
        """Build from an Xlib.protocol.request.GetProperty reply."""
        value = reply.value
        if not isinstance(value, bytes):
            value = [int(item) for item in value]
        return cls(
            name=name,
            property_type=reply.property_type,
            format=reply.format,
            value=value,
        )

    @property
    def value_count(self) -> int:
        """Number of items declared by the reply."""
        return len(self.value)

    def card32(self) -> int:
        """Return the single 32-bit item of a fixed-width property.

        Raises:
            ProtocolError: If the reply is not format 32 or does not hold
                exactly one item.
        """
        if self.format != 32 or isinstance(self.value, bytes):
            raise ProtocolError(self.name, f"expected format 32, got format {self.format}")
        if self.value_count != 1:
            raise ProtocolError(self.name, f"expected 1 value, got {self.value_count}")
        item = self.value[0]
        if not 0 <= item <= 0xFFFFFFFF:
            raise ProtocolError(self.name, f"value {item} does not fit in 32 bits")
        return item

    def text(self) -> str:
        """Decode a string property up to the first nul byte as UTF-8.

        Raises:
            ProtocolError: If the reply is not format 8 or is not valid UTF-8.
        """
        if self.format != 8 or not isinstance(self.value, bytes):
            raise ProtocolError(self.name, f"expected format 8, got format {self.format}")
        raw = self.value.split(b"\x00", 1)[0]
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(self.name, f"unable to decode {raw!r}: {e}") from e


# =============================================================================
# Working Directory Models
# =============================================================================


def is_priority_command(exe: str, priority_commands: Sequence[str]) -> bool:
    """Check whether an executable path matches any priority command."""
    name = exe.rsplit("/", 1)[-1]
    for command in priority_commands:
        if "/" in command:
            if command == exe:
                return True
        elif command == name:
            return True
    return False


class CwdTag(str, Enum):
    """Whether a working directory came from a priority command."""

    PRIORITY = "priority"
    REGULAR = "regular"


class Cwd(BaseModel):
    """Working directory of one process, tagged by priority classification.

    The tag is assigned once by classify() and only compared afterwards.
    str() yields the bare path; the tag never leaves the resolver.
    """

    model_config = ConfigDict(frozen=True)

    path: str = Field(..., min_length=1, description="Absolute working directory")
    tag: CwdTag = Field(default=CwdTag.REGULAR)

    @classmethod
    def classify(cls, cwd: str, exe: str, priority_commands: Sequence[str]) -> "Cwd":
        """Tag cwd as PRIORITY if exe matches a priority command.

        A command containing a slash must equal the executable path exactly;
        a bare name must equal the executable's file name exactly.
        """
        tag = CwdTag.PRIORITY if is_priority_command(exe, priority_commands) else CwdTag.REGULAR
        return cls(path=cwd, tag=tag)

    @property
    def is_priority(self) -> bool:
        return self.tag is CwdTag.PRIORITY

    def __str__(self) -> str:
        return self.path


class ChildResult(BaseModel):
    """A child subtree that resolved successfully."""

    model_config = ConfigDict(frozen=True)

    pid: int = Field(..., gt=0, description="Child process ID")
    cwd: Cwd
