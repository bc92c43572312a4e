"""
Tests for the configuration loader.

Tests cover:
- Defaults
- System identity normalization
- Credential completeness
- Integer parsing and validation
- .env loading without override
"""

from pathlib import Path

import pytest

from r2vault.config import (
    DEFAULT_DATA_DIR,
    DEFAULT_SYSTEM_NAME,
    StorageCredentials,
    VaultConfig,
    load_config,
    normalize_namespace,
)
from r2vault.errors import ConfigurationError

FULL_ENV = {
    "SYSTEM_NAME": "beluga",
    "R2_ENDPOINT": "https://example.r2.cloudflarestorage.com",
    "R2_ACCESS_KEY_ID": "key",
    "R2_SECRET_ACCESS_KEY": "secret",
    "R2_BUCKET": "backups",
    "DATA_DIR": "/srv/data",
}


class TestDefaults:

    def test_empty_environment(self):
        config = load_config(env={})

        assert config.system_name == DEFAULT_SYSTEM_NAME
        assert config.system_name_configured is False
        assert config.data_dir == Path(DEFAULT_DATA_DIR)
        assert config.data_dir_configured is False
        assert config.audit_file == Path(DEFAULT_DATA_DIR) / "audit.jsonl"
        assert (config.backup_hour, config.backup_minute) == (9, 0)
        assert config.backup_timezone == "UTC"
        assert not config.storage.is_complete

    def test_full_environment(self):
        config = load_config(env=FULL_ENV)

        assert config.system_name_configured is True
        assert config.data_dir == Path("/srv/data")
        assert config.data_dir_configured is True
        assert config.storage.is_complete
        assert config.storage.bucket == "backups"

    def test_blank_values_count_as_unset(self):
        config = load_config(env={"SYSTEM_NAME": "   ", "R2_BUCKET": ""})
        assert config.system_name == DEFAULT_SYSTEM_NAME
        assert config.system_name_configured is False
        assert "R2_BUCKET" in config.storage.missing()


class TestNamespace:

    def test_lowercased_and_stripped(self):
        config = load_config(env={"SYSTEM_NAME": "  Beluga-Prod "})
        assert config.system_name == "beluga-prod"
        assert config.namespace == "beluga-prod"

    @pytest.mark.parametrize("value", ["", "   "])
    def test_empty_rejected(self, value):
        with pytest.raises(ConfigurationError):
            normalize_namespace(value)

    def test_slash_rejected(self):
        with pytest.raises(ConfigurationError):
            load_config(env={"SYSTEM_NAME": "beluga/prod"})

    @pytest.mark.parametrize("value", [".", "..", "..."])
    def test_dot_segments_rejected(self, value):
        with pytest.raises(ConfigurationError, match="dot segment"):
            load_config(env={"SYSTEM_NAME": value})

    @pytest.mark.parametrize("value", ["beluga prod", "beluga\tprod"])
    def test_inner_whitespace_rejected(self, value):
        with pytest.raises(ConfigurationError, match="whitespace"):
            normalize_namespace(value)

    def test_dots_inside_name_allowed(self):
        assert normalize_namespace("beluga.v2") == "beluga.v2"


class TestStorageCredentials:

    def test_missing_lists_env_names(self):
        creds = StorageCredentials(endpoint="https://x", bucket="b")
        assert creds.missing() == ["R2_ACCESS_KEY_ID", "R2_SECRET_ACCESS_KEY"]
        assert not creds.is_complete

    def test_repr_hides_secret(self):
        creds = StorageCredentials.from_env(FULL_ENV)
        assert "secret" not in repr(creds)


class TestSchedule:

    def test_invalid_integer_uses_default(self):
        config = load_config(env={"BACKUP_HOUR": "nine"})
        assert config.backup_hour == 9

    def test_out_of_range_rejected(self):
        with pytest.raises(ConfigurationError):
            load_config(env={"BACKUP_HOUR": "25"})

    def test_custom_time_and_zone(self):
        config = load_config(env={
            "BACKUP_HOUR": "3", "BACKUP_MINUTE": "30", "BACKUP_TIMEZONE": "America/Mexico_City",
        })
        assert (config.backup_hour, config.backup_minute) == (3, 30)
        assert config.backup_timezone == "America/Mexico_City"


class TestDotenv:

    def test_env_file_does_not_override(self, tmp_path, monkeypatch):
        env_file = tmp_path / ".env"
        env_file.write_text("SYSTEM_NAME=fromfile\nR2_BUCKET=filebucket\n")

        monkeypatch.setenv("SYSTEM_NAME", "fromenv")
        # register R2_BUCKET for restoration, then make sure it starts unset
        monkeypatch.setenv("R2_BUCKET", "placeholder")
        monkeypatch.delenv("R2_BUCKET")

        config = load_config(env_file=env_file)

        assert config.system_name == "fromenv"
        assert config.storage.bucket == "filebucket"

    def test_temp_dir_override(self, tmp_path):
        config = load_config(env={"BACKUP_TMP_DIR": str(tmp_path)})
        assert config.temp_dir == tmp_path

    def test_config_is_immutable(self):
        config = VaultConfig()
        with pytest.raises(AttributeError):
            config.system_name = "other"


class TestFallbackDir:

    def test_defaults_to_working_directory(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        assert load_config(env={}).fallback_dir.resolve() == tmp_path.resolve()
        assert VaultConfig().fallback_dir.resolve() == tmp_path.resolve()

    def test_env_override(self, tmp_path):
        config = load_config(env={"FALLBACK_DIR": str(tmp_path / "app")})
        assert config.fallback_dir == tmp_path / "app"

