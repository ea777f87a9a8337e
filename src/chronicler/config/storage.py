"""Where chronicler keeps its SQLite store, and how to reach the database."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Final, Literal

from .env import bool_env_var, optional_env_var

APP_DIR_NAME: Final[str] = "chronicler"
DEFAULT_DB_FILENAME: Final[str] = "chronicler.db"

type DatabaseSource = Literal["explicit", "env", "data_dir"]


@dataclass(frozen=True, slots=True)
class StorageConfig:
    """Location of the local data directory holding the default SQLite database."""

    data_dir: Path
    database_filename: str = DEFAULT_DB_FILENAME

    def resolve_data_dir(self) -> Path:
        return self.data_dir.expanduser().resolve()

    def database_path(self, *, ensure: bool = True) -> Path:
        data_dir = self.resolve_data_dir()
        if ensure:
            data_dir.mkdir(parents=True, exist_ok=True)
        return data_dir / self.database_filename

    def database_uri(self) -> str:
        return f"sqlite+pysqlite:///{self.database_path()}"


@dataclass(frozen=True, slots=True)
class DatabaseConfig:
    """Connection settings handed to ``sqlalchemy.create_engine``."""

    uri: str
    source: DatabaseSource = "data_dir"
    echo: bool = False


def _platform_data_home() -> Path:
    if os.name == "nt":
        local = os.getenv("LOCALAPPDATA")
        return Path(local) if local else Path.home() / "AppData" / "Local"
    xdg = os.getenv("XDG_DATA_HOME")
    return Path(xdg) if xdg else Path.home() / ".local" / "share"


def get_storage_config() -> StorageConfig:
    """Honour ``CHRONICLER_DATA_DIR``, falling back to the platform data home."""

    override = optional_env_var("CHRONICLER_DATA_DIR")
    data_dir = Path(override) if override else _platform_data_home() / APP_DIR_NAME
    return StorageConfig(data_dir=data_dir.expanduser().resolve())


def get_database_config(
    *, uri: str | None = None, storage: StorageConfig | None = None
) -> DatabaseConfig:
    """Pick the database URI: explicit ``uri``, then ``DATABASE_URI``, then the data dir.

    ``CHRONICLER_SQL_ECHO`` turns on SQLAlchemy statement logging.
    """

    echo = bool_env_var("CHRONICLER_SQL_ECHO")
    if uri:
        return DatabaseConfig(uri=uri, source="explicit", echo=echo)
    env_uri = optional_env_var("DATABASE_URI")
    if env_uri:
        return DatabaseConfig(uri=env_uri, source="env", echo=echo)
    storage_config = storage or get_storage_config()
    return DatabaseConfig(uri=storage_config.database_uri(), echo=echo)
