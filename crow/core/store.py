"""File-backed JSON store for saved commands.

The document layout is `{"commands": [{"id", "command", "description"}, ...]}`.
A bare list of command objects is accepted on read so older files keep
working; writes always produce the object form.
"""

import json
import os
import tempfile
from pathlib import Path
from typing import List, Optional

from loguru import logger
from rich.console import Console

from .config import DEFAULT_DB_FILE, expand_user, home_dir
from .errors import StartupError, StoreError
from .models import CrowCommand

console = Console(stderr=True)


class FilePath:
    """Resolved location of the JSON store."""

    DEFAULT_DIR_PARTS = (".config", "crow")

    def __init__(self, path: Path):
        self._path = path

    @classmethod
    def resolve(cls, path: Optional[str] = None, file_name: Optional[str] = None) -> "FilePath":
        """Build the store path and create intermediate directories.

        Only the directories are created here, never the file itself.
        """
        directory = expand_user(path) if path else cls.default_dir()

        if not directory.exists():
            console.print(f"Creating config path: {directory}", highlight=False)
            try:
                directory.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                raise StartupError("Could not create directories up to config path", e)

        return cls(directory / (file_name or DEFAULT_DB_FILE))

    @classmethod
    def default_dir(cls) -> Path:
        return home_dir().joinpath(*cls.DEFAULT_DIR_PARTS)

    @property
    def path(self) -> Path:
        return self._path

    def __fspath__(self) -> str:
        return str(self._path)

    def __str__(self) -> str:
        return str(self._path)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, FilePath) and other._path == self._path

    def __hash__(self) -> int:
        return hash(self._path)


class CommandStore:
    """
    In-memory copy of the JSON store.

    Opening a store that does not exist yet writes an empty document.
    Mutations stay in memory until write() is called.
    """

    def __init__(self, file_path: FilePath):
        self.file_path = file_path
        self._commands: List[CrowCommand] = []

        if not file_path.path.exists():
            console.print(f"Creating config file: {file_path}", highlight=False)
            try:
                self.write()
            except StoreError as e:
                raise StartupError("Could not initialize database file", e.cause)
        else:
            self.read()

    def read(self) -> "CommandStore":
        """Read and parse the JSON document into memory."""
        try:
            raw = self.file_path.path.read_text(encoding="utf-8")
        except OSError as e:
            raise StoreError(f"Could not read database file {self.file_path}", e)

        try:
            data = json.loads(raw)
            items = data["commands"] if isinstance(data, dict) else data
            if not isinstance(items, list):
                raise TypeError("commands must be a list")
            self._commands = [CrowCommand.from_dict(item) for item in items]
        except (ValueError, KeyError, TypeError) as e:
            raise StoreError(f"Unable to parse database file {self.file_path}", e)

        logger.debug(f"Read {len(self._commands)} commands from {self.file_path}")
        return self

    def write(self) -> "CommandStore":
        """Write all in-memory commands to the JSON file."""
        document = {"commands": [c.to_dict() for c in self._commands]}
        target = self.file_path.path
        try:
            fd, tmp = tempfile.mkstemp(dir=target.parent, prefix=".crow-", suffix=".json")
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as f:
                    json.dump(document, f, ensure_ascii=False)
                    f.flush()
                    os.fsync(f.fileno())
                os.replace(tmp, target)
            except BaseException:
                if os.path.exists(tmp):
                    os.unlink(tmp)
                raise
        except OSError as e:
            raise StoreError("Could not write database file", e)

        logger.debug(f"Wrote {len(self._commands)} commands to {target}")
        return self

    def commands(self) -> List[CrowCommand]:
        return list(self._commands)

    def set_commands(self, commands: List[CrowCommand]) -> "CommandStore":
        self._commands = list(commands)
        return self

    def add_command(self, command: CrowCommand) -> "CommandStore":
        """Append a command in memory. Call write() to persist it."""
        self._commands.append(command)
        return self

    # Record Store interface used by the interactive session

    def load(self) -> List[CrowCommand]:
        return self.read().commands()

    def save(self, commands: List[CrowCommand]) -> None:
        self.set_commands(commands).write()
