"""Tests for the crow command line interface."""

import shutil

import pytest
from click.testing import CliRunner

from crow import __version__
from crow.cli import crow as crow_cli
from crow.cli.crow import cli
from crow.core.models import CrowCommand
from crow.core.store import CommandStore, FilePath

from conftest import TESTDATA


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def home(tmp_path, monkeypatch):
    home = tmp_path / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.setenv("SHELL", "/bin/bash")
    shutil.copy(TESTDATA / ".bash_history", home / ".bash_history")
    return home


@pytest.fixture
def db_dir(tmp_path):
    return tmp_path / "db"


@pytest.fixture
def opts(tmp_path, db_dir, home):
    config = tmp_path / "config.yaml"
    config.write_text(f"log_dir: {tmp_path / 'logs'}\n")
    return ["-p", str(db_dir), "-c", str(config)]


def saved_commands(db_dir):
    return CommandStore(FilePath(db_dir / "crow_db.json")).commands()


class TestAdd:

    def test_add_without_description(self, runner, opts, db_dir):
        result = runner.invoke(cli, ["add", "ls -la", *opts], input="y\nn\n")

        assert result.exit_code == 0, result.output
        commands = saved_commands(db_dir)
        assert len(commands) == 1
        assert commands[0].command == "ls -la"
        assert commands[0].description == ""
        assert "Saved" in result.output

    def test_add_with_description(self, runner, opts, db_dir, monkeypatch):
        class StubEditor:
            def edit(self, prefill):
                return "list all files"

        monkeypatch.setattr(crow_cli, "Editor", StubEditor)

        result = runner.invoke(cli, ["add", "ls -la", *opts], input="y\ny\n")

        assert result.exit_code == 0, result.output
        assert saved_commands(db_dir)[0].description == "list all files"

    def test_aborted_description_is_empty(self, runner, opts, db_dir, monkeypatch):
        class AbortingEditor:
            def edit(self, prefill):
                return None

        monkeypatch.setattr(crow_cli, "Editor", AbortingEditor)

        result = runner.invoke(cli, ["add", "ls -la", *opts], input="y\ny\n")

        assert result.exit_code == 0, result.output
        assert saved_commands(db_dir)[0].description == ""

    def test_add_declined(self, runner, opts, db_dir):
        result = runner.invoke(cli, ["add", "ls -la", *opts], input="n\n")

        assert result.exit_code == 0
        assert not (db_dir / "crow_db.json").exists()

    def test_add_appends(self, runner, opts, db_dir):
        runner.invoke(cli, ["add", "ls -la", *opts], input="y\nn\n")
        runner.invoke(cli, ["add", "pwd", *opts], input="y\nn\n")

        commands = saved_commands(db_dir)
        assert [c.command for c in commands] == ["ls -la", "pwd"]
        assert commands[0].id != commands[1].id

    def test_custom_file_name(self, runner, opts, db_dir):
        result = runner.invoke(cli, ["add", "ls", *opts, "-f", "other.json"], input="y\nn\n")

        assert result.exit_code == 0, result.output
        assert (db_dir / "other.json").exists()

    def test_invalid_database(self, runner, opts, db_dir):
        db_dir.mkdir()
        (db_dir / "crow_db.json").write_text("not json")

        result = runner.invoke(cli, ["add", "ls", *opts], input="y\nn\n")

        assert result.exit_code == 1
        assert "Unable to parse database file" in result.output


class TestAddFromHistory:

    def test_add_last(self, runner, opts, db_dir):
        result = runner.invoke(cli, ["add:last", *opts], input="y\nn\n")

        assert result.exit_code == 0, result.output
        assert "The last command was" in result.output
        assert saved_commands(db_dir)[0].command == 'echo "Hi from test history"'

    def test_add_last_unsupported_shell(self, runner, opts, monkeypatch):
        monkeypatch.setenv("SHELL", "/usr/bin/fish")

        result = runner.invoke(cli, ["add:last", *opts])

        assert result.exit_code == 1
        assert "not supported" in result.output

    def test_add_last_missing_history(self, runner, opts, home):
        (home / ".bash_history").unlink()

        result = runner.invoke(cli, ["add:last", *opts])

        assert result.exit_code == 1
        assert "Unable to open detected history file" in result.output

    def test_add_pick(self, runner, opts, db_dir):
        result = runner.invoke(cli, ["add:pick", *opts], input="2\nn\n")

        assert result.exit_code == 0, result.output
        assert "1. echo \"Hi from test history\"" in result.output
        assert saved_commands(db_dir)[0].command == "git status"

    def test_add_pick_out_of_range(self, runner, opts, db_dir):
        result = runner.invoke(cli, ["add:pick", *opts], input="9\n1\nn\n")

        assert result.exit_code == 0, result.output
        assert saved_commands(db_dir)[0].command == 'echo "Hi from test history"'


class TestList:

    @pytest.fixture
    def populated(self, db_dir):
        db_dir.mkdir()
        shutil.copy(TESTDATA / "crow.json", db_dir / "crow_db.json")

    def test_list_all(self, runner, opts, populated):
        result = runner.invoke(cli, ["list", *opts])

        assert result.exit_code == 0, result.output
        assert "echo 'hi from db'" in result.output
        assert "test_command_2" in result.output

    def test_list_filtered(self, runner, opts, populated):
        result = runner.invoke(cli, ["list", "echo", *opts])

        assert result.exit_code == 0, result.output
        assert "test_command_1" in result.output
        assert "test_command_2" not in result.output

    def test_list_empty(self, runner, opts):
        result = runner.invoke(cli, ["list", *opts])

        assert result.exit_code == 0
        assert "No commands found" in result.output


class TestCli:

    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert __version__ in result.output

    def test_help_lists_subcommands(self, runner):
        result = runner.invoke(cli, ["--help"])

        for name in ("search", "add", "add:last", "add:pick", "list"):
            assert name in result.output

    def test_missing_config_file(self, runner, tmp_path, home):
        result = runner.invoke(cli, ["list", "-c", str(tmp_path / "missing.yaml")])

        assert result.exit_code == 1
        assert "Configuration error" in result.output

    def test_unknown_home_directory_exits_cleanly(self, runner, tmp_path, monkeypatch, no_home):
        monkeypatch.chdir(tmp_path)

        result = runner.invoke(cli, ["list"])

        assert result.exit_code == 1
        assert "Could not retrieve home directory" in result.output
        assert "Traceback" not in result.output

    def test_no_subcommand_runs_search(self, runner, monkeypatch, opts):
        sessions = []
        monkeypatch.setattr(crow_cli, "run_session", lambda config, console: sessions.append(config))

        result = runner.invoke(cli, [])

        assert result.exit_code == 0, result.output
        assert len(sessions) == 1

    def test_search_applies_overrides(self, runner, monkeypatch, opts, db_dir):
        sessions = []
        monkeypatch.setattr(crow_cli, "run_session", lambda config, console: sessions.append(config))

        result = runner.invoke(cli, ["search", *opts, "-f", "x.json"])

        assert result.exit_code == 0, result.output
        assert sessions[0].db_path == db_dir
        assert sessions[0].db_file == "x.json"


def test_saved_command_round_trips_through_store(tmp_path):
    """Commands written by the CLI helpers are readable by the session store."""
    store = CommandStore(FilePath.resolve(str(tmp_path)))
    store.add_command(CrowCommand("1", "ls", "")).write()

    assert CommandStore(FilePath.resolve(str(tmp_path))).load() == [CrowCommand("1", "ls", "")]
