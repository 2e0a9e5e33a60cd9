"""Focused-window working directory resolver.

This package finds the working directory most representative of the
application behind the focused X11 window, so a launcher or terminal
binding can open a new shell "where the user is".

Architecture:
    - Focus Resolver: EWMH property queries over python-xlib yield the pid
      owning the focused window
    - Cwd Resolver: recursive walk of /proc rooted at that pid picks one
      working directory, preferring caller-listed priority commands

Modules:
    - models: Pydantic data models (Cwd, CwdTag, WindowState, PropertyReply)
    - errors: Error codes and the exception hierarchy
    - proc_table: dir-fd handle onto /proc with validated reads
    - focus_resolver: Display connection and property protocol
    - cwd_resolver: Process tree descent and tie-break merges
    - config: ResolverConfig built from arguments and environment
"""

import logging

__version__ = "0.1.0"

__all__ = [
    "__version__",
    "configure_logging",
]


def configure_logging(
    level: str = "WARNING",
    format_string: str | None = None,
) -> logging.Logger:
    """Configure package-level logging.

    Diagnostics go to stderr; stdout is reserved for the resolved path.

    Args:
        level: Log level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        format_string: Custom format string. Defaults to a format with
            level, module, and message.

    Returns:
        Configured logger instance for the focused_cwd package.

    Example:
        >>> from focused_cwd import configure_logging
        >>> logger = configure_logging("DEBUG")
        >>> logger.debug("Resolving focused window...")
    """
    if format_string is None:
        format_string = "%(levelname)s - %(name)s - %(message)s"

    logger = logging.getLogger("focused_cwd")
    logger.setLevel(getattr(logging, level.upper(), logging.WARNING))

    # Remove existing handlers to avoid duplicates
    logger.handlers.clear()

    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(format_string))
    logger.addHandler(handler)

    return logger

