"""CLI entry point for the focused-window working directory resolver.

Prints the working directory of the application behind the focused window
as the only line of standard output. When resolution fails, the error is
logged to standard error and the home directory is printed instead.

Usage:
    focused-cwd
    focused-cwd bash zsh /usr/bin/fish
    focused-cwd --strict --log-level DEBUG nvim
"""

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import Callable, Mapping, Optional, Tuple

from pydantic import ValidationError

from . import __version__, configure_logging
from .config import ResolverConfig
from .cwd_resolver import CwdResolver
from .errors import FocusedCwdError
from .focus_resolver import FocusResolver

logger = logging.getLogger(__name__)


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Args:
        argv: Command-line arguments. Defaults to sys.argv[1:].

    Returns:
        Parsed arguments namespace.
    """
    parser = argparse.ArgumentParser(
        prog="focused-cwd",
        description="Print the working directory of the focused window's application",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s
      Follow the deepest process under the focused window

  %(prog)s bash zsh
      Prefer the directory of a bash or zsh process over its descendants

  alacritty --working-directory "$(%(prog)s bash)"
      Open a terminal where the user is working
""",
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )

    parser.add_argument(
        "priority",
        nargs="*",
        metavar="COMMAND",
        help="Executable path or name whose working directory wins tie-breaks",
    )

    parser.add_argument(
        "--display",
        type=str,
        default=None,
        help="X display to query (default: $DISPLAY)",
    )

    parser.add_argument(
        "--proc-root",
        type=str,
        default=None,
        metavar="DIR",
        help="Process filesystem mount point (default: /proc)",
    )

    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        metavar="N",
        help="Maximum process tree depth to descend (default: 64)",
    )

    parser.add_argument(
        "--log-level",
        type=str.upper,
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        default=None,
        help="Logging level (default: WARNING)",
    )

    parser.add_argument(
        "--strict",
        action="store_true",
        help="Exit with status 1 when the home directory fallback is used",
    )

    return parser.parse_args(argv)


def run(
    config: ResolverConfig,
    home: Path,
    resolver_factory: Optional[Callable[..., FocusResolver]] = None,
) -> Tuple[str, bool]:
    """Resolve the focused window's working directory.

    Args:
        config: Resolver settings
        home: Directory substituted when resolution fails
        resolver_factory: FocusResolver constructor (default: FocusResolver)

    Returns:
        (path, resolved) where resolved is False if home was substituted.
    """
    factory = resolver_factory or FocusResolver
    resolver = factory(display_name=config.display_name, proc_root=config.proc_root)
    try:
        with resolver.focused_process() as focused:
            cwd = CwdResolver(
                focused.proc,
                config.priority_commands,
                max_depth=config.max_depth,
            ).resolve(focused.pid)
    except FocusedCwdError as e:
        logger.error("%s", e)
        logger.debug("Resolution failure details: %s", e.to_dict())
        return str(home), False

    logger.info("Resolved %s (%s)", cwd.path, cwd.tag.value)
    return str(cwd), True


def main(argv: list[str] | None = None,
         environ: Optional[Mapping[str, str]] = None,
         home: Optional[Path] = None) -> int:
    """Main entry point for focused-cwd.

    Args:
        argv: Command-line arguments. Defaults to sys.argv[1:].
        environ: Environment mapping. Defaults to os.environ.
        home: Fallback directory. Defaults to the user's home directory.

    Returns:
        Exit code: 0, or 1 under --strict when the fallback was used.
    """
    args = parse_args(argv)
    environ = os.environ if environ is None else environ

    try:
        config = ResolverConfig.from_sources(args, environ)
    except ValidationError as e:
        configure_logging("ERROR")
        logger.error("Invalid configuration: %s", e)
        print(home if home is not None else Path.home())
        return 1 if args.strict else 0

    configure_logging(config.log_level)
    logger.debug("Priority commands: %s", ", ".join(config.priority_commands) or "(none)")

    path, resolved = run(config, home if home is not None else Path.home())
    print(path)

    if config.strict and not resolved:
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
