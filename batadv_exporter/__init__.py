"""Prometheus exporter for batman-adv mesh interfaces."""

from batadv_exporter.batctl import BatctlClient, SourceUnavailableError, parse_statistics
from batadv_exporter.config import AppConfig, load_config
from batadv_exporter.device import DeviceStatistics, DeviceUpdateError
from batadv_exporter.refresh import RefreshOrchestrator
from batadv_exporter.registry import DuplicateMetricError, MetricRegistry
from batadv_exporter.server import ExpositionServer
from batadv_exporter.sysfs import MeshSettingsReader

__all__ = [
    "AppConfig",
    "BatctlClient",
    "DeviceStatistics",
    "DeviceUpdateError",
    "DuplicateMetricError",
    "ExpositionServer",
    "MeshSettingsReader",
    "MetricRegistry",
    "RefreshOrchestrator",
    "SourceUnavailableError",
    "load_config",
    "parse_statistics",
]
