"""Input-capture worker thread."""

import threading
import time
from typing import Callable, List

from loguru import logger

from .bus import CliEvent, InputBus, InputFailure, Tick, WorkerSignal

Poller = Callable[[float], List[CliEvent]]


class InputWorker(threading.Thread):
    """
    Polls for terminal input and sends events down the bus.

    A Tick is sent every `tick_rate` seconds. While suspended the worker
    does not read the terminal at all, so input typed in that window goes
    to whoever owns the terminal (the external editor) and is never queued
    for crow.
    Events returned by a poll that was in progress when the suspend arrived
    are dropped as well.
    """

    def __init__(self, bus: InputBus, poll: Poller, tick_rate: float = 0.2):
        super().__init__(name="crow-input", daemon=True)
        self.bus = bus
        self.poll = poll
        self.tick_rate = tick_rate
        self.suspended = False
        self._stopped = threading.Event()

    def run(self) -> None:
        last_tick = time.monotonic()
        logger.debug("Input worker started")

        while not self._stopped.is_set():
            if not self._drain_signals():
                break

            if self.suspended:
                time.sleep(0.01)
                continue

            timeout = max(0.0, self.tick_rate - (time.monotonic() - last_tick))
            try:
                events = self.poll(timeout)
            except OSError as e:
                logger.exception("Could not read terminal input")
                self.bus.emit(InputFailure(str(e)))
                break

            # A suspend that arrived during the poll means these keys were
            # meant for the editor
            if not self._drain_signals():
                break
            if self.suspended:
                if events:
                    logger.debug(f"Dropping {len(events)} events read while suspending")
                continue

            for event in events:
                self.bus.emit(event)

            if time.monotonic() - last_tick >= self.tick_rate and self.bus.emit(Tick()):
                last_tick = time.monotonic()

        logger.debug("Input worker stopped")

    def _drain_signals(self) -> bool:
        """Apply pending control messages. Returns False on STOP."""
        while True:
            signal = self.bus.poll_signal()
            if signal is None:
                return True
            if signal is WorkerSignal.SUSPEND:
                self.suspended = True
                logger.debug("Input worker suspended")
            elif signal is WorkerSignal.RESUME:
                self.suspended = False
                logger.debug("Input worker resumed")
            elif signal is WorkerSignal.STOP:
                self._stopped.set()
                return False

    def stop(self, timeout: float = 1.0) -> None:
        """Ask the worker to finish and wait for it."""
        self.bus.signal(WorkerSignal.STOP)
        if self.is_alive():
            self.join(timeout)
