"""Shared fixtures and fakes for crow tests."""

import shutil
from pathlib import Path
from typing import List, Optional

import pytest

from crow.core.catalog import CommandCatalog
from crow.core.models import CrowCommand

TESTDATA = Path(__file__).parent / "testdata"


class FakeStore:
    """Record store that keeps everything in memory."""

    def __init__(self, commands: Optional[List[CrowCommand]] = None):
        self.commands = list(commands or [])
        self.saves: List[List[CrowCommand]] = []

    def load(self) -> List[CrowCommand]:
        return list(self.commands)

    def save(self, commands: List[CrowCommand]) -> None:
        self.commands = list(commands)
        self.saves.append(list(commands))


class FakeClipboard:
    def __init__(self):
        self.contents: Optional[str] = None

    def set(self, text: str) -> None:
        self.contents = text


class FakeEditor:
    """Returns a canned result and remembers what it was prefilled with."""

    def __init__(self, result: Optional[str] = ""):
        self.result = result
        self.prefills: List[str] = []

    def edit(self, prefill: str) -> Optional[str]:
        self.prefills.append(prefill)
        return self.result


class FakeControl:
    def __init__(self):
        self.calls: List[str] = []

    def suspend(self) -> None:
        self.calls.append("suspend")

    def resume(self) -> None:
        self.calls.append("resume")


@pytest.fixture
def testdata_dir() -> Path:
    return TESTDATA


@pytest.fixture
def sample_commands() -> List[CrowCommand]:
    return [
        CrowCommand("a", "git status", ""),
        CrowCommand("b", "docker ps", ""),
        CrowCommand("c", "ls -la", ""),
    ]


@pytest.fixture
def catalog(sample_commands) -> CommandCatalog:
    return CommandCatalog.load(sample_commands)


@pytest.fixture
def fake_store(sample_commands) -> FakeStore:
    return FakeStore(sample_commands)


@pytest.fixture
def db_copy(tmp_path) -> Path:
    """Writable copy of the test database."""
    target = tmp_path / "crow.json"
    shutil.copy(TESTDATA / "crow.json", target)
    return target


@pytest.fixture
def no_home(monkeypatch):
    """Make the home directory impossible to determine."""
    def home(cls):
        raise RuntimeError("Could not determine home directory.")

    monkeypatch.setattr(Path, "home", classmethod(home))
