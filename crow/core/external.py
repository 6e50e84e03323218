"""External collaborators: system clipboard and the user's text editor."""

from typing import Optional

import click
import pyperclip
from loguru import logger

from .errors import ExternalToolError


class Clipboard:
    """System clipboard via pyperclip."""

    def set(self, text: str) -> None:
        try:
            pyperclip.copy(text)
        except pyperclip.PyperclipException as e:
            raise ExternalToolError("Could not add command to clipboard", e)
        logger.debug("Copied command to clipboard")


class Editor:
    """
    Blocking call into $VISUAL/$EDITOR via click.edit.

    edit() returns None when the user quits without saving.
    """

    def __init__(self, extension: str = ".txt", editor: Optional[str] = None):
        self.extension = extension
        self.editor = editor

    def edit(self, prefill: str) -> Optional[str]:
        try:
            edited = click.edit(prefill, editor=self.editor, extension=self.extension, require_save=True)
        except click.ClickException as e:
            raise ExternalToolError("Could not open editor", e)

        if edited is None:
            return None
        # Editors append a trailing newline on save
        return edited.rstrip("\n")
