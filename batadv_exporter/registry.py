from __future__ import annotations

from dataclasses import dataclass
import logging
import math

from prometheus_client import CollectorRegistry, Gauge, generate_latest

from batadv_exporter.logging_utils import TRACE_LEVEL

DEVICE_LABEL = "device"


class DuplicateMetricError(ValueError):
    def __init__(self, name: str, device: str) -> None:
        super().__init__(f"Metric {name} already registered for device {device}")
        self.name = name
        self.device = device


@dataclass(frozen=True)
class MetricSample:
    name: str
    labels: dict[str, str]
    value: float
    description: str


class GaugeHandle:
    """Write access to a single labeled gauge."""

    def __init__(self, name: str, device: str, child: Gauge, registry: CollectorRegistry) -> None:
        self.name = name
        self.device = device
        self._child = child
        self._registry = registry

    def set(self, value: float) -> None:
        self._child.set(value)

    def get(self) -> float:
        value = self._registry.get_sample_value(self.name, {DEVICE_LABEL: self.device})
        return value if value is not None else math.nan


class MetricRegistry:
    """Gauges for every tracked device, created once at startup.

    Each metric name is one gauge family labeled by ``device``. Families
    keep the description given at their first registration.
    """

    def __init__(self) -> None:
        self.registry = CollectorRegistry()
        self._families: dict[str, Gauge] = {}
        self._handles: dict[tuple[str, str], GaugeHandle] = {}
        self.logger = logging.getLogger(self.__class__.__name__)

    def register(self, name: str, description: str, device: str) -> GaugeHandle:
        key = (name, device)
        if key in self._handles:
            raise DuplicateMetricError(name, device)
        family = self._families.get(name)
        if family is None:
            family = Gauge(name, description, [DEVICE_LABEL], registry=self.registry)
            self._families[name] = family
        handle = GaugeHandle(name, device, family.labels(**{DEVICE_LABEL: device}), self.registry)
        self._handles[key] = handle
        self.logger.log(TRACE_LEVEL, "Registered %s{%s=%r}", name, DEVICE_LABEL, device)
        return handle

    def __len__(self) -> int:
        return len(self._handles)

    def snapshot(self) -> list[MetricSample]:
        samples: list[MetricSample] = []
        for metric in self.registry.collect():
            for sample in metric.samples:
                samples.append(
                    MetricSample(
                        name=sample.name,
                        labels=dict(sample.labels),
                        value=sample.value,
                        description=metric.documentation,
                    )
                )
        return samples

    def render(self) -> bytes:
        """Encode the same collection snapshot() reads, in the text exposition format."""
        return generate_latest(self.registry)
