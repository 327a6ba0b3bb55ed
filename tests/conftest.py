"""Pytest configuration and shared fixtures."""
from __future__ import annotations

from pathlib import Path
import subprocess

import pytest

from batadv_exporter.batctl import BatctlClient
from batadv_exporter.config import CollectorConfig
from batadv_exporter.registry import MetricRegistry
from batadv_exporter.sysfs import MeshSettingsReader

BATCTL_OUTPUT = """\
\ttx: 1500
\ttx_bytes: 204800
\ttx_dropped: 3
\trx: 1400
\trx_bytes: 190000
\tforward: 12
\tforward_bytes: 4096
\tmgmt_tx: 320
\tmgmt_tx_bytes: 16000
\tmgmt_rx: 300
\tmgmt_rx_bytes: 15000
\tfrag_tx: 0
\tfrag_tx_bytes: 0
\tfrag_rx: 0
\tfrag_rx_bytes: 0
\tfrag_fwd: 0
\tfrag_fwd_bytes: 0
\ttt_request_tx: 4
\ttt_request_rx: 5
\ttt_response_tx: 5
\ttt_response_rx: 4
\ttt_roam_adv_tx: 0
\ttt_roam_adv_rx: 1
\tdat_get_tx: 7
\tdat_get_rx: 8
\tdat_put_tx: 9
\tdat_put_rx: 10
\tdat_cached_reply_tx: 2
\tnc_code: 0
"""

MESH_SETTINGS = {
    "aggregated_ogms": "enabled\n",
    "ap_isolation": "disabled\n",
    "bonding": "disabled\n",
    "bridge_loop_avoidance": "enabled\n",
    "distributed_arp_table": "enabled\n",
    "fragmentation": "enabled\n",
    "multicast_mode": "enabled\n",
    "gw_sel_class": "20\n",
    "hop_penalty": "30\n",
    "orig_interval": "1000\n",
}


def pytest_configure(config):
    """Configure pytest with custom markers."""
    config.addinivalue_line(
        "markers", "integration: mark test as integration test (starts an HTTP server)"
    )


def completed(stdout: str = "", returncode: int = 0, stderr: str = "") -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(
        args=["batctl"], returncode=returncode, stdout=stdout, stderr=stderr
    )


def write_mesh_settings(root: Path, device: str, settings: dict[str, str]) -> Path:
    mesh = root / device / "mesh"
    mesh.mkdir(parents=True, exist_ok=True)
    for name, content in settings.items():
        (mesh / name).write_text(content)
    return mesh


@pytest.fixture
def sysfs_root(tmp_path):
    """A fake /sys/class/net with a fully populated bat0."""
    root = tmp_path / "net"
    write_mesh_settings(root, "bat0", MESH_SETTINGS)
    return root


@pytest.fixture
def collector_config(sysfs_root):
    return CollectorConfig(
        batctl_path="batctl",
        sysfs_root=str(sysfs_root),
        command_timeout_s=5.0,
    )


@pytest.fixture
def registry():
    return MetricRegistry()


@pytest.fixture
def batctl(collector_config):
    return BatctlClient(collector_config)


@pytest.fixture
def settings(sysfs_root):
    return MeshSettingsReader(sysfs_root)
