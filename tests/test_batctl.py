"""Tests for batctl invocation and report parsing."""
from __future__ import annotations

import subprocess
from unittest.mock import patch

import pytest

from batadv_exporter.batctl import BatctlClient, SourceUnavailableError, parse_statistics
from batadv_exporter.config import CollectorConfig

from conftest import BATCTL_OUTPUT, completed


class TestParseStatistics:
    def test_parses_full_report(self):
        statistics = parse_statistics(BATCTL_OUTPUT)
        assert statistics["tx"] == 1500.0
        assert statistics["tx_bytes"] == 204800.0
        assert statistics["dat_cached_reply_tx"] == 2.0
        assert statistics["nc_code"] == 0.0
        assert len(statistics) == 29

    def test_keys_and_values_are_trimmed(self):
        statistics = parse_statistics("   tx   :   10  \n")
        assert statistics == {"tx": 10.0}

    def test_decimal_values(self):
        statistics = parse_statistics("ratio: 0.25\nbig: 1e6\nneg: -3.5\n")
        assert statistics == {"ratio": 0.25, "big": 1_000_000.0, "neg": -3.5}

    def test_blank_lines_are_ignored(self):
        assert parse_statistics("\n\n  \ntx: 1\n\n") == {"tx": 1.0}

    def test_lines_without_colon_are_ignored(self):
        assert parse_statistics("Statistics for bat0\ntx: 1\n") == {"tx": 1.0}

    def test_malformed_value_does_not_stop_parsing(self):
        statistics = parse_statistics("tx: notanumber\nrx: 7\ntx_bytes: 2048\n")
        assert "tx" not in statistics
        assert statistics == {"rx": 7.0, "tx_bytes": 2048.0}

    def test_extra_colon_is_skipped(self):
        statistics = parse_statistics("time: 12:30\nrx: 1\n")
        assert statistics == {"rx": 1.0}

    def test_empty_value_is_skipped(self):
        assert parse_statistics("tx:\nrx: 2\n") == {"rx": 2.0}

    def test_empty_output(self):
        assert parse_statistics("") == {}

    def test_last_duplicate_wins(self):
        assert parse_statistics("tx: 1\ntx: 2\n") == {"tx": 2.0}


class TestBatctlClient:
    @patch("subprocess.run")
    def test_collect_invokes_batctl(self, mock_run, batctl):
        mock_run.return_value = completed(stdout="tx: 10\ntx_bytes: 2048\n")

        statistics = batctl.collect("bat0")

        assert statistics == {"tx": 10.0, "tx_bytes": 2048.0}
        args, kwargs = mock_run.call_args
        assert args[0] == ["batctl", "-m", "bat0", "s"]
        assert kwargs["timeout"] == 5.0
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs["encoding"] == "utf-8"
        assert kwargs["errors"] == "replace"

    @patch("subprocess.run")
    def test_uses_configured_path(self, mock_run, sysfs_root):
        config = CollectorConfig(
            batctl_path="/usr/sbin/batctl",
            sysfs_root=str(sysfs_root),
            command_timeout_s=0,
        )
        mock_run.return_value = completed(stdout="")

        BatctlClient(config).collect("bat1")

        args, kwargs = mock_run.call_args
        assert args[0] == ["/usr/sbin/batctl", "-m", "bat1", "s"]
        assert kwargs["timeout"] is None

    @patch("subprocess.run", side_effect=FileNotFoundError("batctl"))
    def test_missing_binary(self, mock_run, batctl):
        with pytest.raises(SourceUnavailableError) as exc_info:
            batctl.collect("bat0")
        assert exc_info.value.device == "bat0"

    @patch("subprocess.run", side_effect=PermissionError("denied"))
    def test_permission_denied(self, mock_run, batctl):
        with pytest.raises(SourceUnavailableError):
            batctl.collect("bat0")

    @patch("subprocess.run")
    def test_non_zero_exit(self, mock_run, batctl):
        mock_run.return_value = completed(
            stdout="", returncode=1, stderr="Error - interface bat0 is not present"
        )
        with pytest.raises(SourceUnavailableError) as exc_info:
            batctl.collect("bat0")
        assert "exit status 1" in str(exc_info.value)

    @patch("subprocess.run")
    def test_timeout(self, mock_run, batctl):
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["batctl"], timeout=5.0)
        with pytest.raises(SourceUnavailableError) as exc_info:
            batctl.collect("bat0")
        assert "timed out" in exc_info.value.reason
