"""Reading recent commands from the user's shell history."""

import os
import re
from enum import Enum
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .errors import HistoryError

# zsh extended history prefix, e.g. ": 1639150000:0;"
_ZSH_PREFIX = re.compile(r"^: [0-9]*:[0-9]*;")


class Shell(Enum):
    ZSH = "zsh"
    BASH = "bash"

    @classmethod
    def from_path(cls, shell_path: str) -> Optional["Shell"]:
        """Detect the shell from a path such as $SHELL ("/bin/zsh")."""
        for shell in (cls.ZSH, cls.BASH):
            if shell.value in shell_path:
                return shell
        return None

    @classmethod
    def from_env(cls) -> "Shell":
        shell_path = os.environ.get("SHELL")
        if not shell_path:
            raise HistoryError("Could not access $SHELL environment variable")
        shell = cls.from_path(shell_path)
        if shell is None:
            raise HistoryError(f"Did not find a proper shell! ({shell_path} is not supported)")
        return shell

    @property
    def history_file_name(self) -> str:
        return f".{self.value}_history"

    def read_history_file(self, base_dir: Path) -> List[str]:
        """Lines of the history file inside `base_dir`."""
        path = Path(base_dir) / self.history_file_name
        try:
            # zsh writes metafied bytes, so don't insist on valid utf-8
            text = path.read_text(encoding="utf-8", errors="replace")
        except OSError as e:
            raise HistoryError(f"Unable to open detected history file: {path}", e)
        return text.splitlines()

    def clean(self, line: str) -> str:
        if self is Shell.ZSH:
            return _ZSH_PREFIX.sub("", line)
        return line

    def read_last_history_command(self, base_dir: Path) -> str:
        """
        The last command the user entered before the current one.

        The final history line is the running `crow add:last` itself, so
        the penultimate line is used.
        """
        lines = self.read_history_file(base_dir)
        if len(lines) < 2:
            raise HistoryError("History file does not contain a previous command")
        command = self.clean(lines[-2])
        logger.debug(f"Last {self.value} history command: {command}")
        return command

    def read_recent_history_commands(self, base_dir: Path, limit: int = 10) -> List[str]:
        """Most recent distinct commands, newest first, without the running one."""
        lines = self.read_history_file(base_dir)[:-1]
        commands: List[str] = []
        for line in reversed(lines):
            command = self.clean(line).strip()
            if command and command not in commands:
                commands.append(command)
            if len(commands) >= limit:
                break
        return commands
