from __future__ import annotations

from dataclasses import dataclass
import logging

from batadv_exporter.batctl import BatctlClient, SourceUnavailableError
from batadv_exporter.registry import GaugeHandle, MetricRegistry
from batadv_exporter.sysfs import MeshSettingsReader

NAMESPACE = "batadv"


@dataclass(frozen=True)
class TrafficMetric:
    name: str
    key: str
    description: str


@dataclass(frozen=True)
class SettingMetric:
    name: str
    setting: str
    description: str
    boolean: bool


# Counters reported by `batctl -m <device> s`
TRAFFIC_METRICS: tuple[TrafficMetric, ...] = (
    TrafficMetric("tx_packets_total", "tx", "Transmitted packets"),
    TrafficMetric("tx_bytes_total", "tx_bytes", "Transmitted bytes"),
    TrafficMetric("tx_dropped_packets_total", "tx_dropped", "Dropped transmit packets"),
    TrafficMetric("rx_packets_total", "rx", "Received packets"),
    TrafficMetric("rx_bytes_total", "rx_bytes", "Received bytes"),
    TrafficMetric("forward_packets_total", "forward", "Forwarded packets"),
    TrafficMetric("forward_bytes_total", "forward_bytes", "Forwarded bytes"),
    TrafficMetric("mgmt_tx_packets_total", "mgmt_tx", "Transmitted management packets"),
    TrafficMetric("mgmt_tx_bytes_total", "mgmt_tx_bytes", "Transmitted management bytes"),
    TrafficMetric("mgmt_rx_packets_total", "mgmt_rx", "Received management packets"),
    TrafficMetric("mgmt_rx_bytes_total", "mgmt_rx_bytes", "Received management bytes"),
    TrafficMetric("frag_tx_packets_total", "frag_tx", "Transmitted fragments"),
    TrafficMetric("frag_tx_bytes_total", "frag_tx_bytes", "Transmitted fragment bytes"),
    TrafficMetric("frag_rx_packets_total", "frag_rx", "Received fragments"),
    TrafficMetric("frag_rx_bytes_total", "frag_rx_bytes", "Received fragment bytes"),
    TrafficMetric("frag_fwd_packets_total", "frag_fwd", "Forwarded fragments"),
    TrafficMetric("tt_request_tx_packets_total", "tt_request_tx", "Transmitted translation table requests"),
    TrafficMetric("tt_request_rx_packets_total", "tt_request_rx", "Received translation table requests"),
    TrafficMetric("tt_response_rx_packets_total", "tt_response_rx", "Received translation table responses"),
    TrafficMetric("tt_roam_adv_tx_packets_total", "tt_roam_adv_tx", "Transmitted roaming advertisements"),
    TrafficMetric("tt_roam_adv_rx_packets_total", "tt_roam_adv_rx", "Received roaming advertisements"),
    TrafficMetric("dat_get_tx_packets_total", "dat_get_tx", "Transmitted DAT get requests"),
    TrafficMetric("dat_get_rx_packets_total", "dat_get_rx", "Received DAT get requests"),
    TrafficMetric("dat_put_tx_packets_total", "dat_put_tx", "Transmitted DAT put requests"),
    TrafficMetric("dat_put_rx_packets_total", "dat_put_rx", "Received DAT put requests"),
    TrafficMetric("dat_cached_reply_tx_packets_total", "dat_cached_reply_tx", "Transmitted DAT cached replies"),
)

# Files under /sys/class/net/<device>/mesh/
SETTING_METRICS: tuple[SettingMetric, ...] = (
    SettingMetric("aggregated_ogms_enabled", "aggregated_ogms", "OGM aggregation enabled", True),
    SettingMetric("ap_isolation_enabled", "ap_isolation", "AP isolation enabled", True),
    SettingMetric("bonding_enabled", "bonding", "Bonding enabled", True),
    SettingMetric("bridge_loop_avoidance_enabled", "bridge_loop_avoidance", "Bridge loop avoidance enabled", True),
    SettingMetric("distributed_arp_table_enabled", "distributed_arp_table", "Distributed ARP table enabled", True),
    SettingMetric("fragmentation_enabled", "fragmentation", "Fragmentation enabled", True),
    SettingMetric("multicast_mode_enabled", "multicast_mode", "Multicast optimizations enabled", True),
    SettingMetric("gw_sel_class", "gw_sel_class", "Gateway selection class", False),
    SettingMetric("hop_penalty", "hop_penalty", "Hop penalty", False),
    SettingMetric("orig_interval_milliseconds", "orig_interval", "Originator message interval in milliseconds", False),
)


def metric_name(name: str) -> str:
    return f"{NAMESPACE}_{name}"


class DeviceUpdateError(Exception):
    """One or more sources failed while refreshing a device."""

    def __init__(self, device: str, errors: list[Exception]) -> None:
        details = "; ".join(str(error) for error in errors)
        super().__init__(f"Update of {device} incomplete: {details}")
        self.device = device
        self.errors = errors


class DeviceStatistics:
    """Gauges of one batman-adv interface and the sources feeding them."""

    def __init__(
        self,
        device: str,
        registry: MetricRegistry,
        batctl: BatctlClient,
        settings: MeshSettingsReader,
    ) -> None:
        self._device = device
        self.batctl = batctl
        self.settings = settings
        self.logger = logging.getLogger(self.__class__.__name__)
        self.traffic: dict[str, GaugeHandle] = {
            metric.key: registry.register(metric_name(metric.name), metric.description, device)
            for metric in TRAFFIC_METRICS
        }
        self.configuration: dict[str, GaugeHandle] = {
            metric.setting: registry.register(metric_name(metric.name), metric.description, device)
            for metric in SETTING_METRICS
        }

    @property
    def device(self) -> str:
        return self._device

    def update(self) -> None:
        """Refresh traffic counters, then settings.

        Settings are read even when batctl fails. Raises DeviceUpdateError
        afterwards if anything went wrong; gauges of a failed source keep
        their previous values.
        """
        errors: list[Exception] = []
        try:
            self.update_traffic()
        except SourceUnavailableError as e:
            errors.append(e)
        self.update_settings()
        if errors:
            raise DeviceUpdateError(self.device, errors)

    def update_traffic(self) -> None:
        statistics = self.batctl.collect(self.device)
        for key, gauge in self.traffic.items():
            value = statistics.get(key)
            if value is None:
                self.logger.debug("%s: batctl did not report %s", self.device, key)
                value = 0.0
            gauge.set(value)

    def update_settings(self) -> None:
        for metric in SETTING_METRICS:
            if metric.boolean:
                value = self.settings.read_bool(self.device, metric.setting)
            else:
                value = self.settings.read_number(self.device, metric.setting)
            self.configuration[metric.setting].set(value)
