"""Raw terminal input: puts the tty in cbreak-like mode and decodes key
presses and mouse wheel events from the byte stream."""

import os
import re
import select
import sys
import termios
from typing import List, Optional

from loguru import logger

from .bus import (
    BACKSPACE, DOWN, ENTER, ESCAPE, LEFT, RIGHT, TAB, UP,
    CliEvent, KeyInput, MouseInput, ScrollDirection,
)

# xterm button tracking with SGR extended coordinates
MOUSE_ON = "\x1b[?1000h\x1b[?1006h"
MOUSE_OFF = "\x1b[?1000l\x1b[?1006l"

_CSI = re.compile(r"\x1b\[(<?)([0-9;]*)([A-Za-z~])")
_SS3 = re.compile(r"\x1bO([A-D])")

_ARROWS = {"A": UP, "B": DOWN, "C": RIGHT, "D": LEFT}
_WHEEL = {64: ScrollDirection.UP, 65: ScrollDirection.DOWN}


def decode(data: str) -> List[CliEvent]:
    """Turn a chunk of terminal input into events."""
    events: List[CliEvent] = []
    i = 0
    while i < len(data):
        ch = data[i]

        if ch == "\x1b":
            match = _CSI.match(data, i)
            if match:
                mouse, params, final = match.groups()
                event = _decode_csi(mouse, params, final)
                if event is not None:
                    events.append(event)
                i = match.end()
                continue
            match = _SS3.match(data, i)
            if match:
                events.append(KeyInput(_ARROWS[match.group(1)]))
                i = match.end()
                continue
            events.append(KeyInput(ESCAPE))
            i += 1
            continue

        if ch in ("\r", "\n"):
            events.append(KeyInput(ENTER))
        elif ch in ("\x7f", "\x08"):
            events.append(KeyInput(BACKSPACE))
        elif ch == "\t":
            events.append(KeyInput(TAB))
        elif "\x01" <= ch <= "\x1a":
            events.append(KeyInput(chr(ord(ch) + ord("a") - 1), ctrl=True))
        elif ch.isprintable():
            events.append(KeyInput(ch))
        i += 1

    return events


def _decode_csi(mouse: str, params: str, final: str) -> Optional[CliEvent]:
    if mouse:
        # ESC [ < button ; x ; y M|m
        try:
            button = int(params.split(";")[0])
        except ValueError:
            return None
        direction = _WHEEL.get(button)
        return MouseInput(direction) if direction and final == "M" else None

    if final in _ARROWS:
        return KeyInput(_ARROWS[final])

    logger.debug(f"Ignoring escape sequence: ESC[{params}{final}")
    return None


class TerminalReader:
    """
    Owns the terminal mode while crow is interactive.

    enter()/exit() switch between the saved mode and a mode without echo,
    line buffering, signals or flow control (so Ctrl+Q and Ctrl+C arrive
    as key presses). Output processing is left on for the renderer.
    """

    def __init__(self, stdin=None, stdout=None):
        self.stdin = stdin or sys.stdin
        self.stdout = stdout or sys.stdout
        self._saved: Optional[list] = None

    @property
    def fd(self) -> int:
        return self.stdin.fileno()

    def enter(self) -> None:
        self._saved = termios.tcgetattr(self.fd)
        self._apply_interactive_mode()
        self.stdout.write(MOUSE_ON)
        self.stdout.flush()

    def exit(self) -> None:
        """Restore the saved terminal mode. Safe to call more than once."""
        if self._saved is None:
            return
        self.stdout.write(MOUSE_OFF)
        self.stdout.flush()
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)
        self._saved = None

    def suspend(self) -> None:
        """Hand the terminal to another program (e.g. an editor)."""
        if self._saved is None:
            return
        self.stdout.write(MOUSE_OFF)
        self.stdout.flush()
        termios.tcsetattr(self.fd, termios.TCSADRAIN, self._saved)

    def resume(self) -> None:
        if self._saved is None:
            return
        self._apply_interactive_mode()
        self.stdout.write(MOUSE_ON)
        self.stdout.flush()

    def _apply_interactive_mode(self) -> None:
        mode = termios.tcgetattr(self.fd)
        mode[0] &= ~(termios.IXON | termios.ICRNL)
        mode[3] &= ~(termios.ECHO | termios.ICANON | termios.ISIG | termios.IEXTEN)
        mode[6][termios.VMIN] = 1
        mode[6][termios.VTIME] = 0
        termios.tcsetattr(self.fd, termios.TCSAFLUSH, mode)

    def poll(self, timeout: float) -> List[CliEvent]:
        """Wait up to `timeout` seconds for input and decode it."""
        ready, _, _ = select.select([self.fd], [], [], timeout)
        if not ready:
            return []

        data = os.read(self.fd, 1024)
        # An escape sequence may be split across reads
        while data.endswith(b"\x1b") or re.search(rb"\x1b\[[<0-9;]*$", data):
            ready, _, _ = select.select([self.fd], [], [], 0.01)
            if not ready:
                break
            data += os.read(self.fd, 1024)

        return decode(data.decode("utf-8", errors="replace"))
