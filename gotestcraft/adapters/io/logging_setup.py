"""
Console logging setup with Rich.

Routes the root logger through a single RichHandler. Classic mode logs at
INFO, minimal mode only shows warnings unless verbose output is requested.
"""

import logging
import threading
from enum import Enum

from rich.console import Console
from rich.logging import RichHandler
from rich.theme import Theme

GOTESTCRAFT_THEME = Theme(
    {
        "success": "bold green",
        "error": "bold red",
        "warning": "yellow",
        "info": "cyan",
        "path": "bold blue",
    }
)


class LogMode(str, Enum):
    """Logging output modes."""

    CLASSIC = "classic"
    MINIMAL = "minimal"


class LoggerManager:
    """Manager for the process-wide logging configuration."""

    _console: Console | None = None
    log_mode: LogMode = LogMode.CLASSIC
    _setup_complete: bool = False
    _setup_lock: threading.Lock = threading.Lock()

    @classmethod
    def setup_global_logging(
        cls, console: Console | None = None, level: int = logging.INFO
    ) -> None:
        """Set up global logging configuration with thread safety."""
        with cls._setup_lock:
            if cls._setup_complete:
                logging.getLogger().setLevel(level)
                return

            cls._console = console or Console(theme=GOTESTCRAFT_THEME, stderr=True)
            root_logger = logging.getLogger()

            # Replace foreign RichHandlers, keep other handlers
            for handler in list(root_logger.handlers):
                if isinstance(handler, RichHandler):
                    root_logger.removeHandler(handler)

            rich_handler = RichHandler(
                console=cls._console,
                show_time=True,
                show_path=False,
                markup=False,
                rich_tracebacks=True,
            )
            rich_handler.setFormatter(logging.Formatter(fmt="%(message)s"))

            root_logger.addHandler(rich_handler)
            root_logger.setLevel(level)
            cls._setup_complete = True

    @classmethod
    def set_log_mode(
        cls, mode: LogMode, verbose: bool = False, quiet: bool = False
    ) -> None:
        """Configure log mode and root level appropriately."""
        cls.log_mode = mode
        # quiet > verbose > default
        if quiet:
            level = logging.WARNING
        elif verbose:
            level = logging.DEBUG
        else:
            level = logging.WARNING if mode == LogMode.MINIMAL else logging.INFO
        logging.getLogger().setLevel(level)

    @staticmethod
    def suppress_modules(modules: list[str], verbose: bool = False) -> None:
        """Keep noisy third-party loggers at WARNING unless verbose."""
        if verbose:
            return
        for name in modules:
            logging.getLogger(name).setLevel(logging.WARNING)
