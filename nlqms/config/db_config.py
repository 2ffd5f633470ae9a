# nlqms/config/db_config.py
"""
Connection configuration and the per-session context that carries it.

ConnectionConfig is stored as JSON in <app_dir>/db.config.json.
Missing fields fall back to defaults; a missing or corrupt file reads as defaults.
The active database name doubles as the history namespace and selects the
database file under <app_dir>/databases/.

SessionContext is passed explicitly to the executor, history store and services.
Nothing in the package reads the config file through module-level state.
"""
from __future__ import annotations

import json
import logging
import re
from dataclasses import asdict, dataclass, fields, replace
from pathlib import Path
from typing import Optional

from nlqms.core.constants import (
    APP_DIR,
    CONFIG_FILE_NAME,
    DATA_DIR_NAME,
    DATABASE_NAME_PATTERN,
    DB_FILE_SUFFIX,
    DEFAULT_HOST,
    DEFAULT_PORT,
    HISTORY_FILE_NAME,
    NO_DB_KEY,
)
from nlqms.core.exceptions import ConfigError

_log = logging.getLogger("nlqms.config.db_config")

_SAFE_DB_NAME = re.compile(DATABASE_NAME_PATTERN)


@dataclass(frozen=True)
class ConnectionConfig:
    host: str = DEFAULT_HOST
    port: int = DEFAULT_PORT
    user: str = ""
    password: str = ""
    database: str = ""

    @classmethod
    def from_dict(cls, data: Optional[dict]) -> "ConnectionConfig":
        """Merge data over defaults. Unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        merged = {k: v for k, v in (data or {}).items() if k in known and v is not None}
        return cls(**merged)

    def to_dict(self) -> dict:
        return asdict(self)

    def masked(self) -> dict:
        """Dict form safe for logs and display; the password is never shown."""
        data = self.to_dict()
        data["password"] = "****" if self.password else ""
        return data


def validate_database_name(name: str) -> str:
    """Return name unchanged if it is a plain identifier. Raises ConfigError otherwise."""
    if not name or not _SAFE_DB_NAME.match(name):
        raise ConfigError(f"Invalid database name: {name!r}")
    return name


class ConfigStore:
    """Reads and writes db.config.json. One instance per session."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def ensure_file(self) -> None:
        """Create the config file with defaults if it does not exist."""
        if self._path.exists():
            return
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(ConnectionConfig().to_dict(), indent=2), encoding="utf-8")
        _log.info("config file created: %s", self._path)

    def read(self) -> ConnectionConfig:
        if not self._path.exists():
            return ConnectionConfig()
        try:
            data = json.loads(self._path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            _log.warning("unreadable config file %s, using defaults: %s", self._path, exc)
            return ConnectionConfig()
        if not isinstance(data, dict):
            _log.warning("config file %s is not an object, using defaults", self._path)
            return ConnectionConfig()
        return ConnectionConfig.from_dict(data)

    def write(self, new_config: dict | ConnectionConfig) -> ConnectionConfig:
        """Merge over defaults and persist. Returns the stored config."""
        if isinstance(new_config, ConnectionConfig):
            merged = new_config
        else:
            merged = ConnectionConfig.from_dict(new_config)
        if merged.database:
            validate_database_name(merged.database)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._path.write_text(json.dumps(merged.to_dict(), indent=2), encoding="utf-8")
        _log.info("config saved: %s", merged.masked())
        return merged

    def set_database(self, name: str) -> ConnectionConfig:
        validate_database_name(name)
        return self.write(replace(self.read(), database=name))


class SessionContext:
    """
    Everything a session needs to resolve its configuration and files.
    The active namespace is read from the config store on every call,
    so a USE statement takes effect for the very next history operation.
    """

    def __init__(self, app_dir: Path = APP_DIR, config_store: Optional[ConfigStore] = None) -> None:
        self._app_dir = Path(app_dir)
        self._config_store = config_store or ConfigStore(self._app_dir / CONFIG_FILE_NAME)

    @property
    def app_dir(self) -> Path:
        return self._app_dir

    @property
    def config_store(self) -> ConfigStore:
        return self._config_store

    @property
    def data_dir(self) -> Path:
        return self._app_dir / DATA_DIR_NAME

    @property
    def history_path(self) -> Path:
        return self._app_dir / HISTORY_FILE_NAME

    @property
    def config(self) -> ConnectionConfig:
        return self._config_store.read()

    def namespace_key(self) -> str:
        return self.config.database or NO_DB_KEY

    def database_path(self, config: Optional[ConnectionConfig] = None) -> Path:
        """Database file for config (default: current config). NO_DB_KEY names the unselected file."""
        cfg = config or self.config
        name = validate_database_name(cfg.database) if cfg.database else NO_DB_KEY
        return self.data_dir / f"{name}{DB_FILE_SUFFIX}"

    def ensure_dirs(self) -> None:
        self.data_dir.mkdir(parents=True, exist_ok=True)
        self._config_store.ensure_file()
