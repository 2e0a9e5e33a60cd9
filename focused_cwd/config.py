"""Resolver configuration.

Settings come from the command line first and the environment second:

    FOCUSED_CWD_PRIORITY    colon-separated priority commands
    FOCUSED_CWD_LOG_LEVEL   log level name
    FOCUSED_CWD_MAX_DEPTH   process tree descent limit
    FOCUSED_CWD_PROC        process filesystem mount point

The display is taken from --display, or from $DISPLAY by python-xlib.
"""

import argparse
import logging
from pathlib import Path
from typing import List, Literal, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .cwd_resolver import DEFAULT_MAX_DEPTH

logger = logging.getLogger(__name__)


ENV_PRIORITY = "FOCUSED_CWD_PRIORITY"
ENV_LOG_LEVEL = "FOCUSED_CWD_LOG_LEVEL"
ENV_MAX_DEPTH = "FOCUSED_CWD_MAX_DEPTH"
ENV_PROC_ROOT = "FOCUSED_CWD_PROC"

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class ResolverConfig(BaseModel):
    """Settings for one resolution run."""

    model_config = ConfigDict(extra="forbid")

    priority_commands: List[str] = Field(default_factory=list)
    display_name: Optional[str] = Field(default=None)
    proc_root: Path = Field(default=Path("/proc"))
    max_depth: int = Field(default=DEFAULT_MAX_DEPTH, ge=1, le=4096)
    log_level: LogLevel = Field(default="WARNING")
    strict: bool = Field(default=False)

    @field_validator("priority_commands")
    @classmethod
    def drop_empty_commands(cls, v: List[str]) -> List[str]:
        """Empty entries can never match an executable."""
        return [command for command in v if command]

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v):
        if isinstance(v, str):
            return v.upper()
        return v

    @classmethod
    def from_sources(cls, args: argparse.Namespace, environ: Mapping[str, str]) -> "ResolverConfig":
        """Build the configuration from parsed arguments and the environment.

        Command-line values win; unset options fall back to the environment
        and then to the defaults.

        Raises:
            pydantic.ValidationError: If a value is invalid
        """
        values = {"strict": bool(getattr(args, "strict", False))}

        priority = list(getattr(args, "priority", None) or [])
        if not priority and environ.get(ENV_PRIORITY):
            priority = environ[ENV_PRIORITY].split(":")
        values["priority_commands"] = priority

        display_name = getattr(args, "display", None)
        if display_name:
            values["display_name"] = display_name

        for key, attr, env in (
            ("proc_root", "proc_root", ENV_PROC_ROOT),
            ("max_depth", "max_depth", ENV_MAX_DEPTH),
            ("log_level", "log_level", ENV_LOG_LEVEL),
        ):
            value = getattr(args, attr, None)
            if value is None:
                value = environ.get(env) or None
            if value is not None:
                values[key] = value

        return cls(**values)
