"""
Command-line entry point.

Usage: dirwatch [-h | --help | -v | --version] | COMMAND [ARGS...]

Only the first argument is inspected for options; everything else belongs to
the supervised command.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler

from .config import config
from .console import Console
from .errors import DirwatchError, UsageError, WatchError
from .loop import WatchLoop, install_interrupt_handler
from .process import CommandSpec, ProcessSupervisor

logger = logging.getLogger(__name__)

HELP_FLAGS = ("-h", "--help")
VERSION_FLAGS = ("-v", "--version")


def configure_logging():
    """Send logs to stderr, and to a rotating file when one is configured."""
    log_formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(log_formatter)
    handlers = [console_handler]

    if config.log_file:
        file_handler = RotatingFileHandler(
            config.log_file,
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
        )
        file_handler.setFormatter(log_formatter)
        handlers.append(file_handler)

    logging.basicConfig(level=config.log_level, handlers=handlers, force=True)


def parse_args(argv: list[str]) -> CommandSpec | str:
    """Return "help", "version", or the CommandSpec to supervise."""
    if not argv:
        raise UsageError("no command given")
    if argv[0] in HELP_FLAGS:
        return "help"
    if argv[0] in VERSION_FLAGS:
        return "version"
    return CommandSpec(tuple(argv))


def main(argv: list[str] | None = None) -> int:
    """Run dirwatch. Returns the process exit status."""
    argv = sys.argv[1:] if argv is None else argv
    console = Console()
    install_interrupt_handler(console)

    try:
        parsed = parse_args(argv)
    except UsageError as e:
        console.error(str(e))
        console.blank()
        console.usage()
        return 1

    if parsed == "help":
        console.description()
        console.blank()
        console.usage()
        return 0
    if parsed == "version":
        console.version()
        return 0

    configure_logging()
    supervisor = ProcessSupervisor(parsed, console=console)
    try:
        WatchLoop(supervisor).run()
    except DirwatchError as e:
        logger.debug("Fatal error", exc_info=True)
        console.error(str(e))
        if isinstance(e, WatchError):
            console.blank()
            console.usage()
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
