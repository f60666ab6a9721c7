import json

import pytest
import typer
from typer.testing import CliRunner

from entity_service import config
from entity_service import main as main_module
from entity_service.errors import NotFoundError

runner = CliRunner()


def test_get_settings_defaults(monkeypatch):
    for name in ("DB_HOST", "DB_PORT", "DB_USER", "DB_NAME", "DB_STATEMENT_TIMEOUT_MS"):
        monkeypatch.delenv(name, raising=False)
    settings = config.Settings(_env_file=None)
    assert settings.db_host == "localhost"
    assert settings.db_port == 5432
    assert settings.db_user == "postgres"
    assert settings.db_name == "entity_service"
    assert settings.db_statement_timeout_ms == 0
    assert settings.db_pool_max_size >= settings.db_pool_min_size


def test_settings_read_environment(monkeypatch):
    monkeypatch.setenv("DB_HOST", "db.internal")
    monkeypatch.setenv("DB_PORT", "6543")
    monkeypatch.setenv("LOG_JSON", "true")
    settings = config.Settings(_env_file=None)
    assert settings.db_host == "db.internal"
    assert settings.db_port == 6543
    assert settings.log_json is True


def test_settings_dsn():
    settings = config.Settings(
        _env_file=None,
        db_host="h",
        db_port=1,
        db_user="u",
        db_password="p",
        db_name="d",
    )
    assert settings.dsn == "postgresql://u:p@h:1/d"


def test_parse_key_converts_digits():
    assert main_module._parse_key(["id=7", "tenant=acme"]) == {"id": 7, "tenant": "acme"}


def test_parse_key_keeps_zero_padded_values_as_text():
    assert main_module._parse_key(["code=007", "id=0"]) == {"code": "007", "id": 0}
    assert main_module._parse_key(["code=42"], as_text=True) == {"code": "42"}


def test_parse_key_rejects_malformed_pairs():
    with pytest.raises(typer.BadParameter):
        main_module._parse_key(["id"])


def test_info_command_prints_connection_target():
    result = runner.invoke(main_module.app, ["info"])
    assert result.exit_code == 0
    assert "DB=" in result.output


def test_find_one_command_prints_row(monkeypatch):
    seen = {}

    async def fake_find_one(service, key):
        seen["columns"] = service.column_names
        seen["key"] = key
        return {"id": key["id"], "name": "widget"}

    monkeypatch.setattr(main_module, "_find_one", fake_find_one)
    monkeypatch.setattr(main_module, "configure_logging", lambda **kwargs: None)

    result = runner.invoke(
        main_module.app,
        ["find-one", "--table", "widgets", "--key", "id=1", "--data-columns", "name", "--no-audit"],
    )

    assert result.exit_code == 0
    assert json.loads(result.output) == {"id": 1, "name": "widget"}
    assert seen == {"columns": ("id", "name"), "key": {"id": 1}}


def test_find_one_command_exits_nonzero_when_missing(monkeypatch):
    async def fake_find_one(service, key):
        raise NotFoundError("widgets", key)

    monkeypatch.setattr(main_module, "_find_one", fake_find_one)
    monkeypatch.setattr(main_module, "configure_logging", lambda **kwargs: None)

    result = runner.invoke(main_module.app, ["find-one", "-t", "widgets", "-k", "id=2"])

    assert result.exit_code == 1
    assert "Row not found" in result.output


def test_find_one_command_text_key_keeps_values_as_text(monkeypatch):
    seen = {}

    async def fake_find_one(service, key):
        seen["key"] = key
        return dict(key)

    monkeypatch.setattr(main_module, "_find_one", fake_find_one)
    monkeypatch.setattr(main_module, "configure_logging", lambda **kwargs: None)

    result = runner.invoke(
        main_module.app, ["find-one", "-t", "codes", "-k", "code=42", "--text-key", "--no-audit"]
    )

    assert result.exit_code == 0
    assert seen["key"] == {"code": "42"}
