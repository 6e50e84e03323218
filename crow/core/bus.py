"""Channels between the input worker and the main loop.

The worker only ever sends immutable event values; all state lives in the
main loop, so no locking is needed on the session state.
"""

import queue
from collections import defaultdict
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from loguru import logger


class ScrollDirection(Enum):
    UP = "up"
    DOWN = "down"


@dataclass(frozen=True)
class KeyInput:
    """A key press. `key` is a single character or a named key."""
    key: str
    ctrl: bool = False


@dataclass(frozen=True)
class MouseInput:
    """A mouse wheel movement."""
    direction: ScrollDirection


@dataclass(frozen=True)
class Tick:
    """Signals that a tick interval passed without (or besides) input."""


@dataclass(frozen=True)
class InputFailure:
    """The worker could not read the terminal and has stopped."""
    message: str


CliEvent = Union[KeyInput, MouseInput, Tick, InputFailure]

# Named keys
ENTER = "enter"
BACKSPACE = "backspace"
ESCAPE = "esc"
UP = "up"
DOWN = "down"
LEFT = "left"
RIGHT = "right"
TAB = "tab"


class WorkerSignal(Enum):
    """Control messages from the main loop to the input worker."""
    SUSPEND = "suspend"
    RESUME = "resume"
    STOP = "stop"


class InputBus:
    """
    Event channel (worker -> main loop) and control channel (main loop -> worker).

    The event channel is bounded; when it is full new events are dropped
    and counted instead of blocking the worker.
    """

    def __init__(self, maxsize: int = 1000):
        self._events: "queue.Queue[CliEvent]" = queue.Queue(maxsize=maxsize)
        self._control: "queue.Queue[WorkerSignal]" = queue.Queue()
        self._stats = defaultdict(int)

    def emit(self, event: CliEvent) -> bool:
        """Send an event to the main loop. Returns False if it was dropped."""
        try:
            self._events.put_nowait(event)
        except queue.Full:
            logger.warning(f"Event queue full, dropping event: {type(event).__name__}")
            self._stats['dropped'] += 1
            return False
        self._stats['emitted'] += 1
        return True

    def next_event(self, timeout: Optional[float] = None) -> CliEvent:
        """Block until the next event arrives.

        Raises queue.Empty if a timeout is given and nothing arrived.
        """
        event = self._events.get(timeout=timeout)
        self._stats['processed'] += 1
        return event

    def signal(self, message: WorkerSignal) -> None:
        """Send a control message to the worker."""
        self._control.put(message)
        logger.debug(f"Signalled input worker: {message.value}")

    def poll_signal(self) -> Optional[WorkerSignal]:
        try:
            return self._control.get_nowait()
        except queue.Empty:
            return None

    def suspend(self) -> None:
        self.signal(WorkerSignal.SUSPEND)

    def resume(self) -> None:
        self.signal(WorkerSignal.RESUME)

    def get_stats(self) -> Dict[str, int]:
        """Get channel statistics."""
        return dict(self._stats)
