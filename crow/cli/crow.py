#!/usr/bin/env python3
"""
Main CLI for crow (command row).

Usage:
    crow                    - Fuzzy search saved commands (same as `crow search`)
    crow search             - Fuzzy search saved commands
    crow add "command"      - Save a command
    crow add:last           - Save the last command from your shell history
    crow add:pick           - Pick a recent command from your shell history and save it
    crow list [pattern]     - Print saved commands, optionally fuzzy filtered
"""

import functools
from pathlib import Path
from typing import Optional

import click
import yaml
from loguru import logger
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .. import __version__
from ..core.catalog import CommandCatalog
from ..core.config import Config, home_dir
from ..core.errors import CrowError, eject
from ..core.external import Editor
from ..core.fuzzy import search_commands
from ..core.history import Shell
from ..core.main import run_session, setup_logging
from ..core.models import CrowCommand, new_id
from ..core.store import CommandStore, FilePath

console = Console()
err_console = Console(stderr=True)


def db_options(f):
    """Options shared by every subcommand that touches the store."""
    f = click.option("--config", "-c", "config_path", type=click.Path(dir_okay=False),
                     help="Config file path")(f)
    f = click.option("--file", "-f", "db_file",
                     help="Name of the json file where commands are saved.\nDefaults to 'crow_db.json'")(f)
    f = click.option("--path", "-p", "db_path",
                     help="File path to the json file where commands are saved.\nDefaults to '~/.config/crow/'")(f)
    return f


def fatal_errors(f):
    """Turn CrowError into a message on stderr and exit status 1."""
    @functools.wraps(f)
    def wrapper(*args, **kwargs):
        try:
            return f(*args, **kwargs)
        except CrowError as e:
            eject(e, err_console)
    return wrapper


def load_config(config_path: Optional[str], db_path: Optional[str], db_file: Optional[str]) -> Config:
    try:
        config = Config.load(Path(config_path) if config_path else None)
    except (FileNotFoundError, ValidationError, yaml.YAMLError) as e:
        err_console.print(f"[red]Configuration error:[/red] {escape(str(e))}", highlight=False)
        raise SystemExit(1)
    return config.with_overrides(db_path, db_file)


def open_store(config: Config) -> CommandStore:
    return CommandStore(FilePath.resolve(
        str(config.db_path) if config.db_path else None, config.db_file
    ))


def save_new_command(config: Config, command: str, save_prompt: Optional[str]) -> Optional[CrowCommand]:
    """
    Ask for confirmation and a description, then append the command to the store.

    With `save_prompt` None the confirmation is skipped.
    """
    if save_prompt and not click.confirm(save_prompt, default=False):
        return None

    description = ""
    if click.confirm("Do you want to add a description", default=True):
        description = Editor().edit("") or ""

    new_command = CrowCommand(id=new_id(), command=command, description=description)
    open_store(config).add_command(new_command).write()
    logger.info(f"Saved command {new_command.id}")
    console.print(f"[green]✓[/green] Saved: [cyan]{escape(new_command.command)}[/cyan]", highlight=False)
    return new_command


@click.group(invoke_without_command=True)
@click.version_option(__version__, prog_name="crow")
@click.pass_context
def cli(ctx):
    """crow (command row) - save CLI commands with a description and fuzzy search them later."""
    if ctx.invoked_subcommand is None:
        ctx.invoke(search)


@cli.command()
@db_options
@fatal_errors
def search(db_path: Optional[str], db_file: Optional[str], config_path: Optional[str]):
    """Search through saved commands.

    This is also what crow does when run without a subcommand.
    """
    config = load_config(config_path, db_path, db_file)
    setup_logging(config, interactive=True)
    run_session(config, console)


@cli.command()
@click.argument("command")
@db_options
@fatal_errors
def add(command: str, db_path: Optional[str], db_file: Optional[str], config_path: Optional[str]):
    """Add a new command to crow."""
    config = load_config(config_path, db_path, db_file)
    setup_logging(config, interactive=False)
    save_new_command(
        config,
        command,
        f"Do you want to save command: {click.style(command, fg='cyan')}?",
    )


@cli.command(name="add:last")
@db_options
@fatal_errors
def add_last(db_path: Optional[str], db_file: Optional[str], config_path: Optional[str]):
    """Add the last used CLI command to crow."""
    config = load_config(config_path, db_path, db_file)
    setup_logging(config, interactive=False)

    shell = Shell.from_env()
    last_command = shell.read_last_history_command(home_dir())
    console.print(f"\nThe last command was: [cyan]{escape(last_command)}[/cyan]", highlight=False)
    save_new_command(config, last_command, "Do you want to save that command?")


@cli.command(name="add:pick")
@db_options
@fatal_errors
def add_pick(db_path: Optional[str], db_file: Optional[str], config_path: Optional[str]):
    """Pick one of the most recent history commands and add it to crow."""
    config = load_config(config_path, db_path, db_file)
    setup_logging(config, interactive=False)

    shell = Shell.from_env()
    commands = shell.read_recent_history_commands(home_dir(), config.history_pick_limit)
    if not commands:
        console.print("[yellow]No commands found in your history[/yellow]")
        return

    console.print("[bold]Recent commands:[/bold]\n")
    for i, command in enumerate(commands, 1):
        console.print(f"  {i}. [cyan]{escape(command)}[/cyan]", highlight=False)

    choice = click.prompt("\nWhich command do you want to save", type=click.IntRange(1, len(commands)))
    save_new_command(config, commands[choice - 1], None)


@cli.command(name="list")
@click.argument("pattern", required=False, default="")
@db_options
@fatal_errors
def list_commands(pattern: str, db_path: Optional[str], db_file: Optional[str], config_path: Optional[str]):
    """Print saved commands, optionally fuzzy filtered by PATTERN."""
    config = load_config(config_path, db_path, db_file)
    setup_logging(config, interactive=False)

    catalog = CommandCatalog.load(open_store(config).commands())
    scores = search_commands(catalog, pattern)
    if not scores:
        console.print("[yellow]No commands found[/yellow]")
        return

    table = Table(title=f"Commands ({len(scores)})")
    table.add_column("Id", style="dim")
    table.add_column("Command", style="cyan", no_wrap=False)
    table.add_column("Description", no_wrap=False)
    if pattern:
        table.add_column("Score", justify="right")

    for s in scores:
        command = catalog.get(s.command_id)
        row = [command.id, command.command, command.description]
        if pattern:
            row.append(str(s.score))
        table.add_row(*row)

    console.print(table)


def main():
    """Entry point for the CLI."""
    cli()


if __name__ == "__main__":
    main()
