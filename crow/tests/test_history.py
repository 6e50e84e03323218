"""Tests for reading commands from shell history."""

import pytest

from crow.core.errors import HistoryError
from crow.core.history import Shell


class TestShellDetection:

    @pytest.mark.parametrize("path,expected", [
        ("/bin/zsh", Shell.ZSH),
        ("/usr/local/bin/zsh", Shell.ZSH),
        ("/bin/bash", Shell.BASH),
        ("/usr/bin/fish", None),
    ])
    def test_from_path(self, path, expected):
        assert Shell.from_path(path) is expected

    def test_from_env(self, monkeypatch):
        monkeypatch.setenv("SHELL", "/bin/bash")
        assert Shell.from_env() is Shell.BASH

    def test_from_env_missing(self, monkeypatch):
        monkeypatch.delenv("SHELL", raising=False)
        with pytest.raises(HistoryError):
            Shell.from_env()

    def test_from_env_unsupported(self, monkeypatch):
        monkeypatch.setenv("SHELL", "/usr/bin/fish")
        with pytest.raises(HistoryError, match="not supported"):
            Shell.from_env()


class TestHistory:

    def test_last_bash_command(self, testdata_dir):
        assert Shell.BASH.read_last_history_command(testdata_dir) == 'echo "Hi from test history"'

    def test_last_zsh_command_strips_prefix(self, testdata_dir):
        assert Shell.ZSH.read_last_history_command(testdata_dir) == "echo 'Hi from test zsh_history'"

    def test_missing_history_file(self, tmp_path):
        with pytest.raises(HistoryError, match="Unable to open detected history file"):
            Shell.BASH.read_last_history_command(tmp_path)

    def test_history_too_short(self, tmp_path):
        (tmp_path / ".bash_history").write_text("crow add:last\n")

        with pytest.raises(HistoryError):
            Shell.BASH.read_last_history_command(tmp_path)

    def test_recent_commands_newest_first_distinct(self, testdata_dir):
        commands = Shell.BASH.read_recent_history_commands(testdata_dir)

        assert commands == ['echo "Hi from test history"', "git status", "ls -la"]

    def test_recent_commands_limit(self, testdata_dir):
        assert Shell.ZSH.read_recent_history_commands(testdata_dir, limit=1) == [
            "echo 'Hi from test zsh_history'"
        ]

    def test_invalid_utf8_is_replaced(self, tmp_path):
        (tmp_path / ".zsh_history").write_bytes(b": 1:0;echo \x83caf\xe9\n: 2:0;crow add:last\n")

        command = Shell.ZSH.read_last_history_command(tmp_path)

        assert command.startswith("echo ")
