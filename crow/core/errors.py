"""Error taxonomy for crow.

Everything deriving from CrowError is fatal: it travels up to the entry
point, which restores the terminal, prints the message and exits. Missing
ids, empty queries and similar non-events never raise.
"""

import sys
from typing import Optional

from loguru import logger
from rich.console import Console
from rich.markup import escape


class CrowError(Exception):
    """Base class for errors that terminate crow with a message."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(message)
        self.message = message
        self.cause = cause

    def __str__(self) -> str:
        if self.cause is not None:
            return f"{self.message}. {self.cause}"
        return self.message


class StartupError(CrowError):
    """Home directory, config directory or initial store file unavailable."""


class StoreError(CrowError):
    """The JSON store could not be read, parsed or written."""


class HistoryError(CrowError):
    """The user's shell or its history file could not be used."""


class ExternalToolError(CrowError):
    """The external editor or the clipboard failed."""


def eject(error: CrowError, console: Optional[Console] = None) -> None:
    """Print a fatal error to stderr and exit the process.

    Callers must have restored the terminal before calling this.
    """
    console = console or Console(stderr=True)
    logger.error(f"{type(error).__name__}: {error}")
    console.print(f"[red]{escape(str(error))}[/red]", highlight=False)
    sys.exit(1)
