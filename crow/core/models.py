"""Data models for crow."""

from dataclasses import dataclass, asdict
from typing import Dict, Any, Tuple

import ulid

Id = str


def new_id() -> Id:
    """Generate a fresh, unique command id."""
    return str(ulid.ULID())


@dataclass
class CrowCommand:
    """A command saved by the user. Identity is the id, not the content."""
    id: Id
    command: str
    description: str = ""

    def match_str(self) -> str:
        """Single string from command and description used for fuzzy matching."""
        return f"{self.command}: {self.description}"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CrowCommand":
        return cls(
            id=str(data["id"]),
            command=str(data["command"]),
            description=str(data["description"]),
        )

    def __str__(self) -> str:
        return f"Id: {self.id}, Command: {self.command}, Description: {self.description}"


@dataclass(frozen=True)
class CommandScore:
    """Fuzzy score of one command against the current query.

    `indices` are character offsets into the command's match string.
    `command_id` refers to a CrowCommand in the catalog without owning it.
    """
    score: int
    command_id: Id
    indices: Tuple[int, ...] = ()
