"""Configuration management for crow."""

from pathlib import Path
from typing import Optional

import yaml
from loguru import logger
from pydantic import BaseModel, field_validator

from .errors import StartupError

DEFAULT_DB_FILE = "crow_db.json"


def home_dir() -> Path:
    """The user's home directory.

    Raises StartupError when it cannot be determined, e.g. HOME is unset
    and the user has no passwd entry.
    """
    try:
        return Path.home()
    except (RuntimeError, KeyError) as e:
        raise StartupError("Could not retrieve home directory", e)


def expand_user(path) -> Path:
    """Path.expanduser() that fails with StartupError."""
    try:
        return Path(path).expanduser()
    except (RuntimeError, KeyError) as e:
        raise StartupError(f"Could not expand path {path}", e)


def default_config_dir() -> Path:
    return home_dir() / ".config" / "crow"


def default_log_dir() -> Path:
    return home_dir() / ".local" / "share" / "crow" / "logs"


def _config_candidates():
    """Config file locations in lookup order. The home one is resolved last."""
    yield Path("crow.yaml")
    yield default_config_dir() / "config.yaml"


class Config(BaseModel):
    """Main configuration for crow.

    Every field has a default, so crow runs without a config file. Defaults
    that live under the home directory are only resolved when used.
    """

    # Directory of the JSON store, None means ~/.config/crow/
    db_path: Optional[Path] = None
    db_file: str = DEFAULT_DB_FILE
    tick_rate_ms: int = 200
    # None means ~/.local/share/crow/logs
    log_dir: Optional[Path] = None
    log_level: str = "INFO"
    history_pick_limit: int = 10

    @field_validator('db_path', 'log_dir')
    @classmethod
    def expand_paths(cls, v: Optional[Path]) -> Optional[Path]:
        if v is None:
            return v
        return expand_user(v)

    @field_validator('tick_rate_ms', 'history_pick_limit')
    @classmethod
    def validate_positive(cls, v: int) -> int:
        if v <= 0:
            raise ValueError("value must be greater than 0")
        return v

    @field_validator('db_file')
    @classmethod
    def validate_db_file(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("db_file must not be empty")
        return v

    @classmethod
    def load(cls, config_path: Optional[Path] = None) -> "Config":
        """Load configuration from a YAML file.

        An explicit path has to exist. Otherwise the default locations are
        tried and the built-in defaults are used when none of them exists.
        """
        if config_path is None:
            for candidate in _config_candidates():
                if candidate.exists():
                    config_path = candidate
                    break
            else:
                logger.debug("No config file found, using defaults")
                return cls()
        elif not Path(config_path).exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        logger.debug(f"Loading config from: {config_path}")
        with open(config_path, 'r') as f:
            data = yaml.safe_load(f)

        return cls(**(data or {}))

    def with_overrides(self, db_path: Optional[str] = None, db_file: Optional[str] = None) -> "Config":
        """Return a copy with the CLI path/file overrides applied."""
        update = {}
        if db_path:
            update["db_path"] = expand_user(db_path)
        if db_file:
            update["db_file"] = db_file
        return self.model_copy(update=update)

    @property
    def tick_rate(self) -> float:
        """Tick interval in seconds."""
        return self.tick_rate_ms / 1000

    @property
    def log_directory(self) -> Path:
        """Directory of the log file, falling back to the default one."""
        return self.log_dir or default_log_dir()
