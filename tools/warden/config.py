"""Configuration loading for warden.

Configuration lives in a JSON file (default ``.warden/config.json``). Every
key is optional; a missing file yields the defaults. The file is validated
against ``CONFIG_SCHEMA`` before use.
"""

from __future__ import annotations

import json
import warnings
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

import jsonschema

from .errors import ConfigError
from .schema import DB_NAME, UserRecord

DEFAULT_CONFIG_PATH = ".warden/config.json"
DEFAULT_DB_DIR = ".warden"
DEFAULT_EVENTS_PATH = f"{DEFAULT_DB_DIR}/auth-events.jsonl"

CONFIG_SCHEMA = {
    "type": "object",
    "properties": {
        "store": {
            "type": "object",
            "properties": {
                "db_dir": {"type": "string"},
                "db_name": {"type": "string", "minLength": 1},
                "db_path": {"type": "string", "minLength": 1},
                "timeout": {"type": "number", "exclusiveMinimum": 0},
            },
            "additionalProperties": False,
        },
        "seed": {
            "type": "object",
            "properties": {
                "enabled": {"type": "boolean"},
                "login_id": {"type": "string", "minLength": 1},
                "secret": {"type": "string", "minLength": 1},
                "full_name": {"type": ["string", "null"]},
                "contact": {"type": ["string", "null"]},
            },
            "additionalProperties": False,
        },
        "auth": {
            "type": "object",
            "properties": {
                "token_secret": {"type": "string"},
                "token_expiry_hours": {"type": "integer", "minimum": 1},
            },
            "additionalProperties": False,
        },
        "events": {
            "type": "object",
            "properties": {
                "path": {"type": ["string", "null"]},
            },
            "additionalProperties": False,
        },
    },
    "additionalProperties": False,
}


@dataclass(frozen=True)
class SeedConfig:
    """The well-known record created on first run."""

    enabled: bool = True
    login_id: str = "admin"
    secret: str = "admin"
    full_name: Optional[str] = "Admin User"
    contact: Optional[str] = "admin@example.com"

    def to_record(self) -> UserRecord:
        return UserRecord(
            login_id=self.login_id,
            secret=self.secret,
            full_name=self.full_name,
            contact=self.contact,
        )


@dataclass(frozen=True)
class WardenConfig:
    """Resolved configuration.

    Attributes:
        db_dir: Directory holding the database file.
        db_name: Store identifier; the file is ``<db_dir>/<db_name>.db``.
        db_path_override: Explicit database path (``":memory:"`` allowed).
        store_timeout: Seconds SQLite waits on a locked file.
        seed: Default record settings.
        token_secret: HS256 key for login tickets; empty disables them.
        token_expiry_hours: Login ticket lifetime.
        events_path: JSONL audit log path; ``None`` disables it.
    """

    db_dir: str = DEFAULT_DB_DIR
    db_name: str = DB_NAME
    db_path_override: Optional[str] = None
    store_timeout: float = 5.0
    seed: SeedConfig = field(default_factory=SeedConfig)
    token_secret: str = ""
    token_expiry_hours: int = 24
    events_path: Optional[str] = DEFAULT_EVENTS_PATH

    @property
    def db_path(self) -> str:
        if self.db_path_override:
            return self.db_path_override
        return str(Path(self.db_dir) / f"{self.db_name}.db")

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "WardenConfig":
        """Build a config from an already-parsed mapping.

        Raises:
            ConfigError: The mapping violates ``CONFIG_SCHEMA``.
        """
        try:
            jsonschema.validate(data, CONFIG_SCHEMA)
        except jsonschema.ValidationError as e:
            location = "/".join(str(p) for p in e.absolute_path) or "<root>"
            raise ConfigError(f"Invalid config at {location}: {e.message}") from e

        store = data.get("store", {})
        seed = data.get("seed", {})
        auth = data.get("auth", {})
        events = data.get("events", {})

        token_secret = auth.get("token_secret", "")
        if token_secret and "CHANGE-ME" in token_secret:
            warnings.warn("auth.token_secret contains placeholder value; login tickets will be insecure")

        defaults = SeedConfig()
        return cls(
            db_dir=store.get("db_dir", DEFAULT_DB_DIR),
            db_name=store.get("db_name", DB_NAME),
            db_path_override=store.get("db_path"),
            store_timeout=store.get("timeout", 5.0),
            seed=SeedConfig(
                enabled=seed.get("enabled", defaults.enabled),
                login_id=seed.get("login_id", defaults.login_id),
                secret=seed.get("secret", defaults.secret),
                full_name=seed.get("full_name", defaults.full_name),
                contact=seed.get("contact", defaults.contact),
            ),
            token_secret=token_secret,
            token_expiry_hours=auth.get("token_expiry_hours", 24),
            events_path=events.get("path", DEFAULT_EVENTS_PATH),
        )


def load_config(config_path: Optional[str] = None) -> WardenConfig:
    """Load configuration from a JSON file.

    A missing file is not an error: the defaults are returned.

    Raises:
        ConfigError: The file is not valid JSON or fails validation.
    """
    path = Path(config_path or DEFAULT_CONFIG_PATH)
    if not path.exists():
        return WardenConfig()

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, json.JSONDecodeError) as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config {path} must contain a JSON object")
    return WardenConfig.from_dict(data)
