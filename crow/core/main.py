"""Interactive session for crow."""

import sys
from typing import Optional

from loguru import logger
from rich.console import Console
from rich.live import Live

from . import rendering
from .bus import InputBus
from .config import Config
from .errors import CrowError, eject
from .external import Clipboard, Editor
from .input import InputEvent, InputHandler
from .state import State
from .store import CommandStore, FilePath
from .terminal import TerminalReader
from .worker import InputWorker

LOG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>"
)


def setup_logging(config: Config, interactive: bool = True) -> None:
    """
    Configure loguru sinks.

    The interactive session owns the terminal, so it only logs to a file.
    Plain CLI commands keep warnings on stderr as well.
    """
    logger.remove()
    if not interactive:
        logger.add(sys.stderr, format=LOG_FORMAT, level="WARNING")

    log_dir = config.log_directory
    try:
        log_dir.mkdir(parents=True, exist_ok=True)
    except OSError:
        # No log file is not a reason to refuse to start
        return
    logger.add(
        log_dir / "crow.log",
        format=LOG_FORMAT,
        rotation="1 day",
        retention="7 days",
        level=config.log_level,
    )


class TerminalSession:
    """
    Terminal ownership for the interactive session.

    suspend()/resume() hand the terminal to an external program: the live
    display stops, the tty goes back to its saved mode and the input worker
    stops reading.
    """

    def __init__(self, live: Live, reader: TerminalReader, bus: InputBus):
        self.live = live
        self.reader = reader
        self.bus = bus

    def suspend(self) -> None:
        self.bus.suspend()
        self.live.stop()
        self.reader.suspend()

    def resume(self) -> None:
        self.reader.resume()
        self.live.start(refresh=True)
        self.bus.resume()


def run_session(config: Config, console: Optional[Console] = None) -> None:
    """
    Run the interactive search until the user quits.

    Errors deriving from CrowError restore the terminal first and then
    terminate the process with their message.
    """
    console = console or Console()
    try:
        store = CommandStore(FilePath.resolve(
            str(config.db_path) if config.db_path else None, config.db_file
        ))
        state = State.from_store(store)
    except CrowError as e:
        eject(e)
        return

    logger.info(f"Starting session with {len(state.catalog)} commands from {store.file_path}")

    bus = InputBus()
    reader = TerminalReader()
    worker = InputWorker(bus, reader.poll, tick_rate=config.tick_rate)
    quit_message: Optional[str] = None
    error: Optional[CrowError] = None

    reader.enter()
    try:
        with Live(
            rendering.layout(state, console.size.height),
            console=console,
            screen=True,
            auto_refresh=False,
        ) as live:
            handler = InputHandler(state, Clipboard(), Editor(), TerminalSession(live, reader, bus))
            worker.start()

            while True:
                live.update(rendering.layout(state, console.size.height), refresh=True)
                event = bus.next_event()
                if handler.handle(event) is InputEvent.QUIT:
                    quit_message = handler.quit_message
                    break
    except CrowError as e:
        error = e
    except KeyboardInterrupt:
        logger.info("Keyboard interrupt received")
    finally:
        worker.stop()
        reader.exit()
        logger.debug(f"Input bus stats: {bus.get_stats()}")

    if error is not None:
        eject(error)
    if quit_message:
        console.print(quit_message, highlight=False)
    logger.info("Session finished")
