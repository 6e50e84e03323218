"""Rendering of the interactive session with rich.

Everything here only reads the State; input handling lives in input.py.
"""

from typing import List, Optional

from rich import box
from rich.align import Align
from rich.console import Group
from rich.layout import Layout
from rich.panel import Panel
from rich.text import Text

from .models import CommandScore, CrowCommand
from .state import MenuItem, State

MENU = [MenuItem.FIND, MenuItem.EDIT, MenuItem.DELETE]

# Rows taken by the menu and input panels plus the list border
_CHROME_ROWS = 3 + 3 + 2


def layout(state: State, height: int) -> Layout:
    """Build the full screen for the current state."""
    root = Layout(name="root")
    root.split_column(
        Layout(keybindings(state.active_menu_item), name="menu", size=3),
        Layout(name="body"),
        Layout(input_prompt(state.input), name="input", size=3),
    )

    body = root["body"]
    if state.has_crow_commands():
        body.split_row(
            Layout(command_list(state, max(1, height - _CHROME_ROWS)), name="list"),
            Layout(name="side"),
        )
        side = body["side"]
        selected = state.selected_command()
        popup_panel = popup(state.active_menu_item, selected)
        detail = command_detail(selected, state.detail_scroll_position)
        if popup_panel is not None:
            side.split_column(Layout(popup_panel, name="popup", size=5), Layout(detail, name="detail"))
        else:
            side.update(detail)
    else:
        body.update(empty_command_list())

    return root


def keybindings(active: MenuItem) -> Panel:
    """Menu tabs with the shortcut letter underlined and the active mode highlighted."""
    tabs = Text()
    entries = [(item.label, item is active) for item in MENU] + [("Quit", False)]
    for label, is_active in entries:
        style = "green" if is_active else "bright_yellow"
        if tabs:
            tabs.append(" | ", style="white")
        tabs.append(label[0], style=f"{style} underline")
        tabs.append(label[1:], style=style)
    return Panel(tabs, title="Menu (Ctrl + key)", box=box.SQUARE, border_style="white")


def highlight_matches(command: CrowCommand, score: Optional[CommandScore]) -> Text:
    """Match string of a command with the fuzzy-matched characters highlighted."""
    text = Text(command.command, style="white")
    if command.description:
        text.append(": ")
        text.append(command.description, style="bright_black")
    if score is not None:
        for index in score.indices:
            if index < len(text):
                text.stylize("bold yellow", index, index + 1)
    return text


def command_list(state: State, rows: int) -> Panel:
    """
    Visible commands with the selection marked.

    Only `rows` entries fit, so the window scrolls to keep the selected
    entry on screen.
    """
    scores = state.visible_scores()
    selected = state.list_index or 0
    start = max(0, selected - rows + 1)

    lines: List[Text] = []
    for offset, score in enumerate(scores[start:start + rows]):
        command = state.catalog.get(score.command_id)
        if command is None:
            continue
        line = highlight_matches(command, score)
        if state.list_index is not None and start + offset == state.list_index:
            line = Text(">> ", style="cyan") + line
            line.stylize("italic")
        else:
            line = Text("   ") + line
        line.no_wrap = True
        line.overflow = "ellipsis"
        lines.append(line)

    if not lines:
        lines.append(Text("No matching commands", style="yellow"))

    title = f"Commands ({len(scores)})"
    return Panel(Group(*lines), title=title, box=box.SQUARE, border_style="white")


def command_detail(command: Optional[CrowCommand], scroll_position: int) -> Panel:
    """Command and description of the selection, scrolled by whole lines."""
    if command is None:
        return Panel(Text(""), box=box.SQUARE, border_style="white")

    detail = Text(command.command, style="cyan")
    detail.append(f"\n\n{command.description}", style="white")
    lines = detail.split("\n")[scroll_position:]
    body = Text("\n").join(lines)
    body.justify = "center"
    return Panel(body, box=box.SQUARE, border_style="white")


def empty_command_list() -> Panel:
    text = Text(
        "There are no saved commands!\n"
        "Please quit and run one of the following crow commands first:\n\n",
        style="white",
        justify="center",
    )
    text.append("crow add\n", style="cyan")
    text.append("crow add:last\n", style="cyan")
    text.append("crow add:pick\n", style="cyan")
    text.append("\n\nSee <crow --help> for more information.", style="yellow")
    return Panel(text, box=box.SQUARE, border_style="bright_cyan")


def input_prompt(query: str) -> Panel:
    prompt = Text("> ", style="cyan")
    prompt.append(query, style="white")
    prompt.append("█", style="blink")
    return Panel(prompt, box=box.SQUARE, border_style="bright_cyan")


def popup(mode: MenuItem, selected: Optional[CrowCommand]) -> Optional[Panel]:
    """Overlay for Edit and Delete mode, None in Find mode or without a selection."""
    if selected is None:
        return None
    if mode is MenuItem.EDIT:
        return edit_command()
    if mode is MenuItem.DELETE:
        return delete_command(selected)
    return None


def edit_command() -> Panel:
    text = Text()
    text.append("c", style="green underline")
    text.append("ommand / ", style="white")
    text.append("d", style="green underline")
    text.append("escription", style="white")
    return Panel(Align.center(text), title="Edit", box=box.SQUARE, border_style="white")


def delete_command(selected: CrowCommand) -> Panel:
    text = Text("Do you really want to ", style="white")
    text.append("delete ", style="red")
    text.append("command: ", style="white")
    text.append(selected.command, style="cyan")
    text.append("? (y/N)", style="white")
    return Panel(Align.center(text), title="Delete", box=box.SQUARE, border_style="white")
