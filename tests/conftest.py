"""
r2vault Test Configuration

Shared fixtures: temporary directory layout, config factory and a mocked
object storage client.
"""

import logging
import os
import sys
from datetime import datetime, timezone
from pathlib import Path
from unittest.mock import MagicMock

# Add project root to path FIRST
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from r2vault.backup.storage import ObjectStorage
from r2vault.config import StorageCredentials, VaultConfig
from r2vault.logging_utils import ROOT_LOGGER_NAME

FIXED_NOW = datetime(2026, 10, 19, 12, 30, tzinfo=timezone.utc)


@pytest.fixture(autouse=True)
def reset_package_logger():
    """setup_logging() disables propagation; restore it so caplog keeps working."""
    yield
    pkg_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in pkg_logger.handlers[:]:
        handler.close()
        pkg_logger.removeHandler(handler)
    pkg_logger.propagate = True
    pkg_logger.setLevel(logging.NOTSET)


@pytest.fixture
def credentials():
    return StorageCredentials(
        endpoint="https://account.r2.cloudflarestorage.com",
        access_key_id="test-access-key",
        secret_access_key="test-secret-key",
        bucket="test-bucket",
    )


@pytest.fixture
def make_config(tmp_path, credentials):
    """Factory for VaultConfig rooted in tmp_path."""
    def _make(**overrides):
        values = {
            "system_name": "beluga",
            "system_name_configured": True,
            "storage": credentials,
            "data_dir": tmp_path / "persistent",
            "data_dir_configured": True,
            "fallback_dir": tmp_path / "repo",
            "temp_dir": tmp_path / "tmp",
        }
        values.update(overrides)
        return VaultConfig(**values)
    return _make


@pytest.fixture
def mock_storage():
    storage = MagicMock(spec=ObjectStorage)
    storage.bucket = "test-bucket"
    storage.put_object.return_value = '"d41d8cd98f00b204e9800998ecf8427e"'
    return storage


@pytest.fixture
def fixed_now():
    return FIXED_NOW
