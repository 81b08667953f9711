#!/usr/bin/env python3

import importlib
import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

config_module = importlib.import_module("warden.config")
ConfigError = importlib.import_module("warden.errors").ConfigError


def write_config(tmp_path, data):
    path = tmp_path / "config.json"
    path.write_text(json.dumps(data))
    return str(path)


def test_missing_file_returns_defaults(tmp_path):
    config = config_module.load_config(str(tmp_path / "absent.json"))

    assert config == config_module.WardenConfig()
    assert config.db_path == str(Path(".warden") / "user_db.db")
    assert config.seed.login_id == "admin"
    assert config.token_secret == ""


def test_values_override_defaults(tmp_path):
    path = write_config(tmp_path, {
        "store": {"db_dir": str(tmp_path), "db_name": "people", "timeout": 2.5},
        "seed": {"login_id": "root", "secret": "toor", "contact": None},
        "auth": {"token_secret": "s3cret", "token_expiry_hours": 2},
        "events": {"path": None},
    })

    config = config_module.load_config(path)

    assert config.db_path == str(tmp_path / "people.db")
    assert config.store_timeout == 2.5
    assert config.seed.login_id == "root"
    assert config.seed.full_name == "Admin User"
    assert config.seed.contact is None
    assert config.token_secret == "s3cret"
    assert config.token_expiry_hours == 2
    assert config.events_path is None


def test_explicit_db_path_wins(tmp_path):
    path = write_config(tmp_path, {"store": {"db_path": ":memory:", "db_name": "ignored"}})
    assert config_module.load_config(path).db_path == ":memory:"


def test_unknown_key_rejected(tmp_path):
    path = write_config(tmp_path, {"store": {"dbname": "typo"}})
    with pytest.raises(ConfigError, match="store"):
        config_module.load_config(path)


def test_wrong_type_rejected(tmp_path):
    path = write_config(tmp_path, {"auth": {"token_expiry_hours": "soon"}})
    with pytest.raises(ConfigError, match="auth/token_expiry_hours"):
        config_module.load_config(path)


def test_invalid_json_rejected(tmp_path):
    path = tmp_path / "config.json"
    path.write_text("{not json")
    with pytest.raises(ConfigError, match="Cannot read config"):
        config_module.load_config(str(path))


def test_placeholder_secret_warns(tmp_path):
    path = write_config(tmp_path, {"auth": {"token_secret": "CHANGE-ME"}})
    with pytest.warns(UserWarning, match="placeholder"):
        config_module.load_config(path)


def test_seed_config_to_record():
    record = config_module.SeedConfig(login_id="root", secret="toor").to_record()
    assert record.login_id == "root"
    assert record.secret == "toor"
