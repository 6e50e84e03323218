"""Input handling: the transition function of the interactive session."""

from enum import Enum
from typing import Optional, Protocol

from loguru import logger
from rich.markup import escape

from .bus import (
    BACKSPACE, DOWN, ENTER, ESCAPE, UP,
    CliEvent, InputFailure, KeyInput, MouseInput, ScrollDirection,
)
from .errors import CrowError
from .state import MenuItem, State


class InputEvent(Enum):
    """Result of handling one event: keep running or quit crow."""
    CONTINUE = "continue"
    QUIT = "quit"


class Clipboard(Protocol):
    def set(self, text: str) -> None: ...


class Editor(Protocol):
    def edit(self, prefill: str) -> Optional[str]: ...


class InputControl(Protocol):
    """Hands the terminal over to an external program and takes it back."""

    def suspend(self) -> None: ...

    def resume(self) -> None: ...


# Global key bindings (all with Ctrl)
QUIT_KEYS = ("q", "c")
MENU_KEYS = {"f": MenuItem.FIND, "e": MenuItem.EDIT, "d": MenuItem.DELETE}


class InputHandler:
    """
    Dispatches input events against a State.

    Global bindings (quit, mode switches) are checked first, then the
    event goes to the handler of the active mode. After QUIT is returned,
    `quit_message` holds what should be printed once the terminal has
    been restored.
    """

    def __init__(
        self,
        state: State,
        clipboard: Clipboard,
        editor: Editor,
        control: InputControl,
    ):
        self.state = state
        self.clipboard = clipboard
        self.editor = editor
        self.control = control
        self.quit_message: Optional[str] = None

    def handle(self, event: CliEvent) -> InputEvent:
        if isinstance(event, InputFailure):
            raise CrowError("Could not read terminal input", OSError(event.message))

        if not isinstance(event, (KeyInput, MouseInput)):
            return InputEvent.CONTINUE

        if isinstance(event, KeyInput) and event.ctrl:
            if event.key in QUIT_KEYS:
                return InputEvent.QUIT
            if event.key in MENU_KEYS:
                self.state.set_active_menu_item(MENU_KEYS[event.key])
                return InputEvent.CONTINUE

        mode = self.state.active_menu_item
        if mode is MenuItem.FIND:
            return self.handle_find(event)
        if mode is MenuItem.EDIT:
            self.handle_edit(event)
        elif mode is MenuItem.DELETE:
            self.handle_delete(event)
        return InputEvent.CONTINUE

    def handle_find(self, event: CliEvent) -> InputEvent:
        state = self.state

        if isinstance(event, MouseInput):
            if event.direction is ScrollDirection.UP:
                state.scroll_detail_up()
            else:
                # TODO: cap at the rendered height of the detail text
                state.scroll_detail_down()
            return InputEvent.CONTINUE

        if event.ctrl:
            return InputEvent.CONTINUE

        if event.key == DOWN:
            state.select_next()
        elif event.key == UP:
            state.select_previous()
        elif event.key == ENTER:
            command = state.selected_command()
            if command is not None:
                self.clipboard.set(command.command)
                self.quit_message = (
                    f"\nCommand:\n  [cyan]{escape(command.command)}[/cyan]\ncopied to clipboard!\n"
                )
                return InputEvent.QUIT
        elif event.key == BACKSPACE:
            state.pop_input()
        elif len(event.key) == 1:
            # A new search always selects the first entry
            state.push_input(event.key)

        return InputEvent.CONTINUE

    def handle_edit(self, event: CliEvent) -> None:
        if not isinstance(event, KeyInput) or event.ctrl:
            return
        if event.key == ESCAPE:
            self.state.set_active_menu_item(MenuItem.FIND)
            return

        command = self.state.selected_command()
        if command is None:
            return

        if event.key == "d":
            edited = self._edit(command.description)
            self.state.update_command_description(command.id, edited)
        elif event.key == "c":
            edited = self._edit(command.command)
            self.state.update_command_command(command.id, edited)

    def handle_delete(self, event: CliEvent) -> None:
        if not isinstance(event, KeyInput) or event.ctrl:
            return
        if event.key == "y":
            self.state.delete_selected_command()
        elif event.key in ("n", ENTER, ESCAPE):
            self.state.set_active_menu_item(MenuItem.FIND)

    def _edit(self, prefill: str) -> str:
        """Run the external editor with input capture suspended.

        An aborted edit yields an empty string.
        """
        self.control.suspend()
        try:
            edited = self.editor.edit(prefill)
        finally:
            self.control.resume()
        if edited is None:
            logger.debug("Editor closed without saving")
            return ""
        return edited
