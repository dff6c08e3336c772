"""Tests for configuration module."""

import json
from pathlib import Path

import pytest
from pydantic import SecretStr, ValidationError

from table_sync.config import DEFAULT_HISTORY_LIMIT, Settings, load_settings


def complete_settings() -> Settings:
    return Settings(
        oracle={"dsn": "db-host:1521/ORCLPDB1", "user": "app", "password": "tiger"},
        mysql={"host": "mysql-host", "user": "app", "password": "s3cret", "database": "shop"},
    )


class TestSettings:
    """Test Settings class."""

    def test_default_settings(self) -> None:
        """Test default settings creation."""
        settings = Settings()
        assert settings.oracle.name == "Oracle"
        assert settings.mysql.name == "MySQL"
        assert settings.mysql.port == 3306
        assert settings.sync.parameterized is True
        assert settings.sync.history_limit == DEFAULT_HISTORY_LIMIT
        assert settings.sync.history_file is None

    def test_settings_from_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test settings loading from nested environment variables."""
        monkeypatch.setenv("TABLE_SYNC_ORACLE__DSN", "db-host:1521/ORCLPDB1")
        monkeypatch.setenv("TABLE_SYNC_MYSQL__PORT", "3307")
        monkeypatch.setenv("TABLE_SYNC_MYSQL__PASSWORD", "from-env")

        settings = Settings()
        assert settings.oracle.dsn == "db-host:1521/ORCLPDB1"
        assert settings.mysql.port == 3307
        assert settings.mysql.password.get_secret_value() == "from-env"

    def test_password_is_secret(self) -> None:
        """Plain string passwords are wrapped as secrets."""
        settings = complete_settings()
        assert isinstance(settings.oracle.password, SecretStr)
        assert "tiger" not in repr(settings.oracle)

    def test_invalid_history_limit(self) -> None:
        """History limits must be positive."""
        with pytest.raises(ValidationError):
            Settings(sync={"history_limit": 0})

    def test_unbounded_history(self) -> None:
        """A null history limit means unbounded."""
        settings = Settings(sync={"history_limit": None})
        assert settings.sync.history_limit is None

    def test_validate_connections_missing(self) -> None:
        """Test connection validation with missing values."""
        errors = Settings().validate_connections()
        assert "oracle.dsn is required" in errors
        assert "oracle.user is required" in errors
        assert "mysql.user is required" in errors
        assert "mysql.database is required" in errors

    def test_validate_connections_complete(self) -> None:
        """Test connection validation with all values."""
        assert complete_settings().validate_connections() == []


class TestSettingsFiles:
    """Tests for reading and writing config files."""

    def test_to_file_json_redacts_passwords(self, tmp_path: Path) -> None:
        """Saved JSON keeps connection details but hides passwords."""
        output_path = tmp_path / "config.json"
        complete_settings().to_file(output_path)

        data = json.loads(output_path.read_text())
        assert data["oracle"]["dsn"] == "db-host:1521/ORCLPDB1"
        assert data["oracle"]["password"] == "***REDACTED***"
        assert data["mysql"]["password"] == "***REDACTED***"
        assert "tiger" not in output_path.read_text()

    def test_to_file_toml(self, tmp_path: Path) -> None:
        """Saved TOML can be read back."""
        output_path = tmp_path / "config.toml"
        settings = complete_settings()
        settings.sync.tables = ["products", "customers"]
        settings.to_file(output_path)

        loaded = Settings.from_file(output_path)
        assert loaded.mysql.host == "mysql-host"
        assert loaded.sync.tables == ["products", "customers"]
        assert loaded.mysql.password.get_secret_value() == "***REDACTED***"

    def test_from_file_json(self, tmp_path: Path) -> None:
        """Settings can be loaded from JSON."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({
            "oracle": {"dsn": "ora:1521/XE", "user": "scott"},
            "sync": {"tables": ["products"], "parameterized": False},
        }))

        settings = Settings.from_file(path)
        assert settings.oracle.user == "scott"
        assert settings.sync.tables == ["products"]
        assert settings.sync.parameterized is False

    def test_from_file_missing(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_file(tmp_path / "absent.toml")

    def test_from_file_unsupported(self, tmp_path: Path) -> None:
        path = tmp_path / "config.ini"
        path.write_text("[oracle]\n")
        with pytest.raises(ValueError, match="Unsupported config format"):
            Settings.from_file(path)

    def test_load_settings_overrides(self, tmp_path: Path) -> None:
        """Overrides take priority over file values."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"sync": {"tables": ["products"]}}))

        settings = load_settings(path, sync={"tables": ["orders"]})
        assert settings.sync.tables == ["orders"]

    def test_load_settings_without_file(self) -> None:
        settings = load_settings(mysql={"database": "shop"})
        assert settings.mysql.database == "shop"
