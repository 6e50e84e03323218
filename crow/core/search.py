"""Search session: the ranked result of the current query."""

from typing import Dict, List, Optional

from .catalog import CommandCatalog
from .fuzzy import search_commands
from .models import CommandScore, Id


class FuzzResult:
    """
    Scores keyed by command id plus the ids in rank order.

    The rank order is the render order; the mapping only serves lookups.
    Results are replaced wholesale on every query change.
    """

    def __init__(self, scores: Optional[List[CommandScore]] = None):
        scores = scores or []
        self._scores: Dict[Id, CommandScore] = {s.command_id: s for s in scores}
        self._command_ids: List[Id] = [s.command_id for s in scores]

    @classmethod
    def run(cls, catalog: CommandCatalog, pattern: str) -> "FuzzResult":
        """Rank every command of the catalog against the pattern."""
        return cls(search_commands(catalog, pattern))

    def scores(self) -> List[CommandScore]:
        """Scores in rank order."""
        return [self._scores[i] for i in self._command_ids]

    def get(self, command_id: Id) -> Optional[CommandScore]:
        return self._scores.get(command_id)

    @property
    def command_ids(self) -> List[Id]:
        return list(self._command_ids)

    def is_empty(self) -> bool:
        return not self._command_ids

    def __len__(self) -> int:
        return len(self._command_ids)


class SearchSession:
    """Live query string plus the fuzz result derived from it."""

    def __init__(self):
        self.query = ""
        self.result = FuzzResult()

    def run(self, catalog: CommandCatalog) -> FuzzResult:
        """Recompute the result for the current query."""
        self.result = FuzzResult.run(catalog, self.query)
        return self.result

    def or_full_catalog(self, catalog: CommandCatalog) -> List[CommandScore]:
        """
        Scores to display.

        A non-empty result, or a non-empty query that legitimately matched
        nothing, is returned as is. Before any search has run the whole
        catalog is ranked with the empty pattern once and cached.
        """
        if not self.result.is_empty() or self.query:
            return self.result.scores()

        self.result = FuzzResult.run(catalog, "")
        return self.result.scores()

    def clear(self) -> None:
        self.query = ""
        self.result = FuzzResult()
