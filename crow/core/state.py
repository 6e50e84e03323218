"""Session state: catalog, search, selection and the active mode."""

from enum import Enum
from typing import List, Optional, Protocol

from loguru import logger

from .catalog import CommandCatalog
from .models import CommandScore, CrowCommand, Id
from .search import SearchSession


class MenuItem(Enum):
    """Mode crow is in. Quit is a shortcut, not a menu item."""
    FIND = 0
    EDIT = 1
    DELETE = 2

    @property
    def label(self) -> str:
        return self.name.capitalize()


class RecordStore(Protocol):
    def load(self) -> List[CrowCommand]: ...

    def save(self, commands: List[CrowCommand]) -> None: ...


class State:
    """
    Single owner of all mutable session data.

    Only the main loop touches a State. `selected_command_id` is derived
    from `list_index` against the visible list and is recomputed after
    every change to that list, so it always names a visible command, or is
    None when nothing is visible.
    """

    def __init__(self, catalog: CommandCatalog, store: Optional[RecordStore] = None):
        self.catalog = catalog
        self.store = store
        self.search = SearchSession()
        self.active_menu_item = MenuItem.FIND
        self.detail_scroll_position = 0
        self.list_index: Optional[int] = None
        self.selected_command_id: Optional[Id] = None

        self.select_command(0)

    @classmethod
    def from_store(cls, store: RecordStore) -> "State":
        """Read all commands from the store and normalize them."""
        return cls(CommandCatalog.load(store.load()), store)

    # Read-only accessors for the presentation layer

    @property
    def input(self) -> str:
        return self.search.query

    def visible_scores(self) -> List[CommandScore]:
        """Ranked search result, or the full catalog if nothing was searched."""
        return self.search.or_full_catalog(self.catalog)

    def visible_commands(self) -> List[CrowCommand]:
        return [
            command
            for command in (self.catalog.get(s.command_id) for s in self.visible_scores())
            if command is not None
        ]

    def selected_command(self) -> Optional[CrowCommand]:
        return self.catalog.get(self.selected_command_id)

    def has_crow_commands(self) -> bool:
        return not self.catalog.is_empty()

    # Selection

    def select_command(self, index: int) -> None:
        """
        Select the entry at `index` of the visible list.

        The visible list shrinks while searching, so the id is looked up in
        the ranked result rather than the full catalog. Out-of-range indices
        are clamped; an empty list clears the selection.
        """
        visible = self.visible_scores()
        if not visible:
            self.list_index = None
            self.selected_command_id = None
            return

        index = max(0, min(index, len(visible) - 1))
        self.list_index = index
        self.selected_command_id = visible[index].command_id

    def repair_selection(self) -> None:
        self.select_command(self.list_index or 0)

    def select_next(self) -> None:
        count = len(self.visible_scores())
        if count == 0 or self.list_index is None:
            return
        self.select_command(0 if self.list_index >= count - 1 else self.list_index + 1)

    def select_previous(self) -> None:
        count = len(self.visible_scores())
        if count == 0 or self.list_index is None:
            return
        self.select_command(self.list_index - 1 if self.list_index > 0 else count - 1)

    # Query

    def set_input(self, query: str) -> None:
        """Replace the query, rerun the search and select the first entry."""
        self.search.query = query
        self.search.run(self.catalog)
        self.select_command(0)

    def push_input(self, char: str) -> None:
        self.set_input(self.search.query + char)

    def pop_input(self) -> None:
        if not self.search.query:
            return
        self.set_input(self.search.query[:-1])

    # Mode and detail view

    def set_active_menu_item(self, item: MenuItem) -> None:
        if item is not self.active_menu_item:
            logger.debug(f"Switching mode {self.active_menu_item.label} -> {item.label}")
        self.active_menu_item = item

    def scroll_detail_down(self) -> None:
        self.detail_scroll_position += 1

    def scroll_detail_up(self) -> None:
        self.detail_scroll_position = max(0, self.detail_scroll_position - 1)

    # Mutations

    def update_command_command(self, command_id: Id, command: str) -> None:
        self.catalog.update_command_text(command_id, command)
        self.write_commands_to_db()
        self._refresh_search()

    def update_command_description(self, command_id: Id, description: str) -> None:
        self.catalog.update_description(command_id, description)
        self.write_commands_to_db()
        self._refresh_search()

    def _refresh_search(self) -> None:
        """Rerun an active search after an edit so scores match the new text."""
        if self.search.query:
            self.search.run(self.catalog)
        self.repair_selection()

    def delete_selected_command(self) -> Optional[CrowCommand]:
        """
        Remove the selected command and persist the catalog.

        Clears the query and the search result, returns to Find mode and
        repairs the selection against the full catalog.
        """
        command = self.selected_command()
        if command is None:
            return None

        self.catalog.remove(command.id)
        self.write_commands_to_db()
        self.search.clear()
        self.set_active_menu_item(MenuItem.FIND)
        self.select_command(0)
        logger.debug(f"Deleted command {command.id}")
        return command

    def write_commands_to_db(self) -> None:
        """Persist a snapshot of the catalog through the record store."""
        if self.store is None:
            return
        self.store.save(self.catalog.to_ordered_records())
