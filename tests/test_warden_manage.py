#!/usr/bin/env python3
"""Tests for the warden management CLI."""

import importlib
import json
import sys
from pathlib import Path

import pytest

sys.path.insert(0, str(Path(__file__).parent.parent / "tools"))

manage = importlib.import_module("warden.manage")
process_handle = importlib.import_module("warden.handle").process_handle


@pytest.fixture
def cli(tmp_path, monkeypatch):
    """Run the CLI against a database inside tmp_path."""
    monkeypatch.chdir(tmp_path)
    db_path = str(tmp_path / "users.db")

    def run(*args):
        return manage.main(["--db-path", db_path, *args])

    yield run
    process_handle().close()


def test_no_command_prints_help(capsys):
    assert manage.main([]) == 1
    assert "usage" in capsys.readouterr().out


def test_add_and_list_users(cli, capsys):
    assert cli("add-user", "--login-id", "bob", "--password", "pw1", "--full-name", "Bob B") == 0
    assert "User created: bob" in capsys.readouterr().out

    assert cli("list-users") == 0
    out = capsys.readouterr().out
    assert "bob" in out
    assert "Bob B" in out
    assert "pw1" not in out


def test_add_duplicate_fails(cli, capsys):
    cli("add-user", "--login-id", "bob", "--password", "pw1")
    capsys.readouterr()

    assert cli("add-user", "--login-id", "bob", "--password", "pw2") == 1
    assert "already exists" in capsys.readouterr().err


def test_add_prompts_for_password(cli, capsys, monkeypatch):
    monkeypatch.setattr(manage.getpass, "getpass", lambda prompt: "prompted")
    assert cli("add-user", "--login-id", "bob") == 0
    assert cli("login", "--login-id", "bob", "--password", "prompted") == 0


def test_empty_prompted_password_refused(cli, capsys, monkeypatch):
    monkeypatch.setattr(manage.getpass, "getpass", lambda prompt: "")
    assert cli("add-user", "--login-id", "bob") == 1
    assert "cannot be empty" in capsys.readouterr().err


def test_login_accept_and_reject(cli, capsys):
    cli("add-user", "--login-id", "bob", "--password", "pw1")
    capsys.readouterr()

    assert cli("login", "--login-id", "bob", "--password", "pw1") == 0
    assert "Accepted: bob" in capsys.readouterr().out

    assert cli("login", "--login-id", "bob", "--password", "nope") == 1
    wrong = capsys.readouterr().err
    assert cli("login", "--login-id", "ghost", "--password", "nope") == 1
    unknown = capsys.readouterr().err
    assert wrong == unknown == "Error: Invalid login credentials\n"


def test_login_prints_ticket_when_configured(tmp_path, cli, capsys):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"auth": {"token_secret": "cli-test-secret-of-sufficient-length"}}))
    cli("add-user", "--login-id", "bob", "--password", "pw1")
    capsys.readouterr()

    assert cli("--config", str(config_path), "login", "--login-id", "bob", "--password", "pw1") == 0
    lines = capsys.readouterr().out.strip().splitlines()
    assert lines[0] == "✓ Accepted: bob"
    assert lines[1].count(".") == 2


def test_update_keeps_unspecified_fields(cli, capsys):
    cli("add-user", "--login-id", "bob", "--password", "pw1", "--contact", "bob@example.com")
    assert cli("update-user", "--login-id", "bob", "--password", "pw2") == 0
    capsys.readouterr()

    assert cli("login", "--login-id", "bob", "--password", "pw1") == 1
    assert cli("login", "--login-id", "bob", "--password", "pw2") == 0
    cli("list-users")
    assert "bob@example.com" in capsys.readouterr().out


def test_update_missing_user_fails(cli, capsys):
    assert cli("update-user", "--login-id", "ghost", "--password", "x") == 1
    assert "not found" in capsys.readouterr().err


def test_remove_user(cli, capsys):
    cli("add-user", "--login-id", "bob", "--password", "pw1")
    assert cli("remove-user", "--login-id", "bob") == 0
    assert cli("remove-user", "--login-id", "bob") == 1
    assert "not found" in capsys.readouterr().err


def test_seed_is_idempotent(cli, capsys):
    assert cli("seed") == 0
    assert "Seeded default user admin" in capsys.readouterr().out
    assert cli("seed") == 0
    assert "already present" in capsys.readouterr().out
    assert cli("login", "--login-id", "admin", "--password", "admin") == 0


def test_login_events_written(tmp_path, cli):
    cli("seed")
    cli("login", "--login-id", "admin", "--password", "admin")

    events_file = tmp_path / ".warden" / "auth-events.jsonl"
    events = [json.loads(line) for line in events_file.read_text().splitlines()]
    assert [e["event_type"] for e in events] == ["seed_created", "login_accepted"]


def test_invalid_config_reported(tmp_path, cli, capsys):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"bogus": True}))

    assert cli("--config", str(config_path), "list-users") == 1
    assert "Invalid config" in capsys.readouterr().err


def test_seed_disabled_by_config(tmp_path, cli, capsys):
    config_path = tmp_path / "config.json"
    config_path.write_text(json.dumps({"seed": {"enabled": False}}))

    assert cli("--config", str(config_path), "seed") == 0
    out = capsys.readouterr().out
    assert "Seeding disabled" in out
    assert "already present" not in out

    assert cli("list-users") == 0
    assert "No users found" in capsys.readouterr().out


def test_add_user_with_padded_login_id_refused(cli, capsys):
    assert cli("add-user", "--login-id", "bob ", "--password", "pw1") == 1
    assert "whitespace" in capsys.readouterr().err
