"""
Tests for process entry points.

Tests cover:
- Exit codes for backup and identity check
- Soft skips exit 0
"""

import logging
from unittest.mock import patch

from r2vault import cli
from r2vault.backup.archive_uploader import BackupResult, STATUS_SKIPPED_NO_DATA, STATUS_UPLOADED
from r2vault.config import StorageCredentials
from r2vault.diagnostics import DiagnosticReport
from r2vault.errors import ArchiveError, UploadError


class TestBackupMain:

    def test_success_exits_zero(self, make_config):
        with patch.object(cli, "ArchiveUploader") as uploader_cls:
            uploader_cls.return_value.run_backup.return_value = BackupResult(
                status=STATUS_UPLOADED, key="beluga/backup-beluga-2026-10-19.tar.gz"
            )
            assert cli.backup_main(make_config()) == 0

    def test_skip_exits_zero(self, make_config):
        with patch.object(cli, "ArchiveUploader") as uploader_cls:
            uploader_cls.return_value.run_backup.return_value = BackupResult(status=STATUS_SKIPPED_NO_DATA)
            assert cli.backup_main(make_config()) == 0

    def test_missing_credentials_exit_zero(self, make_config):
        config = make_config(storage=StorageCredentials())
        assert cli.backup_main(config) == 0

    def test_failure_exits_one(self, make_config):
        with patch.object(cli, "ArchiveUploader") as uploader_cls:
            uploader_cls.return_value.run_backup.side_effect = ArchiveError("tar failed")
            assert cli.backup_main(make_config()) == 1

    def test_upload_failure_exits_one(self, make_config):
        with patch.object(cli, "ArchiveUploader") as uploader_cls:
            uploader_cls.return_value.run_backup.side_effect = UploadError("timeout")
            assert cli.backup_main(make_config()) == 1


class TestVerifyMain:

    def test_success_prints_summary(self, make_config, capsys):
        report = DiagnosticReport(
            system_name="beluga",
            namespace="beluga",
            system_name_configured=True,
            key="beluga/diagnostics/identity_check.txt",
            etag='"e1"',
        )
        with patch.object(cli, "run_identity_check", return_value=report):
            assert cli.verify_main(make_config()) == 0

        out = capsys.readouterr().out
        assert "beluga/diagnostics/identity_check.txt" in out
        assert '"e1"' in out

    def test_missing_credentials_exit_one(self, make_config):
        assert cli.verify_main(make_config(storage=StorageCredentials())) == 1

    def test_bad_environment_exits_one(self):
        with patch.object(cli, "load_config", side_effect=ValueError("bad env")):
            assert cli.verify_main() == 1


class TestBackupMainLogging:

    def test_result_fields_are_logged(self, make_config):
        result = BackupResult(status=STATUS_UPLOADED, key="beluga/backup-beluga-2026-10-19.tar.gz")
        with patch.object(cli, "ArchiveUploader") as uploader_cls, \
                patch.object(cli, "log_event") as log_event:
            uploader_cls.return_value.run_backup.return_value = result
            cli.backup_main(make_config())

        _, level, message = log_event.call_args[0]
        assert level == logging.INFO
        assert "uploaded" in message
        assert log_event.call_args[1] == result.to_dict()

    def test_skip_logged_as_warning(self, make_config):
        with patch.object(cli, "log_event") as log_event:
            cli.backup_main(make_config(storage=StorageCredentials()))

        _, level, _ = log_event.call_args[0]
        assert level == logging.WARNING
        assert log_event.call_args[1]["status"] == "skipped_missing_config"

    def test_error_code_is_logged(self, make_config):
        with patch.object(cli, "ArchiveUploader") as uploader_cls, \
                patch.object(cli, "log_event") as log_event:
            uploader_cls.return_value.run_backup.side_effect = ArchiveError("tar failed")
            assert cli.backup_main(make_config()) == 1

        error = log_event.call_args[1]["error"]
        assert error == {"code": "IO_001", "message": "tar failed", "details": {}}
