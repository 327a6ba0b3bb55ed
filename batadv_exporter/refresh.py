from __future__ import annotations

import logging
import threading
from typing import Iterable

from batadv_exporter.device import DeviceStatistics, DeviceUpdateError
from batadv_exporter.registry import MetricRegistry


class RefreshOrchestrator:
    """Owns the registry and the tracked devices, and serializes refreshes.

    A single lock covers the whole refresh, including batctl and the
    pseudo-file reads, so a scrape never sees gauges from two cycles.
    """

    def __init__(self, registry: MetricRegistry, devices: Iterable[DeviceStatistics]) -> None:
        self.registry = registry
        self._devices = list(devices)
        self._lock = threading.Lock()
        self.logger = logging.getLogger(self.__class__.__name__)

    @property
    def devices(self) -> tuple[DeviceStatistics, ...]:
        return tuple(self._devices)

    def refresh_all(self) -> None:
        with self._lock:
            self._refresh()

    def scrape(self) -> bytes:
        """Refresh every device and render the registry in one locked step."""
        with self._lock:
            self._refresh()
            return self.registry.render()

    def _refresh(self) -> None:
        for device in self._devices:
            try:
                device.update()
            except DeviceUpdateError as e:
                self.logger.warning("%s", e)
            except Exception:
                self.logger.exception("Unexpected error updating %s", device.device)
