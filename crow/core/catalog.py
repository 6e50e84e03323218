"""Normalized in-memory view of the saved commands."""

from typing import Dict, Iterable, Iterator, List, Optional

from loguru import logger

from .models import CrowCommand, Id


class CommandCatalog:
    """
    Id -> command lookup plus the ids in their original order.

    The id list is the unfiltered display order and also the order used
    when the catalog is written back to the store. Both structures are
    updated together by every mutation, so they always hold the same ids.
    The catalog owns its commands; callers get copies through
    to_ordered_records().
    """

    def __init__(self):
        self._commands: Dict[Id, CrowCommand] = {}
        self._command_ids: List[Id] = []

    @classmethod
    def load(cls, records: Iterable[CrowCommand]) -> "CommandCatalog":
        """Build a catalog from a flat list of records.

        A duplicate id overwrites the earlier record and keeps the position
        where the id first appeared.
        """
        catalog = cls()
        for record in records:
            if record.id not in catalog._commands:
                catalog._command_ids.append(record.id)
            catalog._commands[record.id] = CrowCommand(record.id, record.command, record.description)
        return catalog

    def get(self, command_id: Optional[Id]) -> Optional[CrowCommand]:
        if command_id is None:
            return None
        return self._commands.get(command_id)

    def __contains__(self, command_id: object) -> bool:
        return command_id in self._commands

    def __len__(self) -> int:
        return len(self._command_ids)

    def __iter__(self) -> Iterator[CrowCommand]:
        return (self._commands[i] for i in self._command_ids)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, CommandCatalog):
            return NotImplemented
        return self._commands == other._commands and set(self._command_ids) == set(other._command_ids)

    def is_empty(self) -> bool:
        return not self._command_ids

    @property
    def command_ids(self) -> List[Id]:
        return list(self._command_ids)

    def update_command_text(self, command_id: Id, command: str) -> None:
        """Replace the command text. Unknown ids are ignored."""
        existing = self._commands.get(command_id)
        if existing is None:
            logger.debug(f"Ignoring command update for missing id {command_id}")
            return
        self._commands[command_id] = CrowCommand(existing.id, command, existing.description)

    def update_description(self, command_id: Id, description: str) -> None:
        """Replace the description. Unknown ids are ignored."""
        existing = self._commands.get(command_id)
        if existing is None:
            logger.debug(f"Ignoring description update for missing id {command_id}")
            return
        self._commands[command_id] = CrowCommand(existing.id, existing.command, description)

    def remove(self, command_id: Id) -> Optional[CrowCommand]:
        """Remove a command by id from both the lookup and the id order."""
        removed = self._commands.pop(command_id, None)
        if removed is None:
            return None
        self._command_ids.remove(command_id)
        return removed

    def to_ordered_records(self) -> List[CrowCommand]:
        """Denormalize to a flat list of copies in insertion order."""
        return [
            CrowCommand(c.id, c.command, c.description)
            for c in self
        ]
