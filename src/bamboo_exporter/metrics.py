"""Prometheus metrics for the Bamboo exporter."""

from typing import Optional

from prometheus_client import CollectorRegistry, Counter, Gauge, Info
from prometheus_client.core import GaugeMetricFamily

NAMESPACE = "bamboo"

AGENT_LABELS = ["id", "name", "type", "enabled", "active", "busy"]
BUILD_LABELS = ["project", "name"]

UP_HELP = "Whether the Bamboo API is reachable."


def up_metric(value: float) -> GaugeMetricFamily:
    return GaugeMetricFamily(f"{NAMESPACE}_up", UP_HELP, value=value)


class ExporterMetrics:
    """Live metric objects owned by a single collector.

    Nothing here is registered globally; the owning collector exposes
    them through its own describe/collect.
    """

    def __init__(self):
        # Scrape health
        self.failures = Counter(
            "scrape_failures_total",
            "Total number of scrape failures.",
            namespace=NAMESPACE,
            registry=None,
        )

        # Agents
        self.agents = Gauge(
            "agents_status",
            "Status of Bamboo agents (enabled/active/busy).",
            AGENT_LABELS,
            namespace=NAMESPACE,
            registry=None,
        )
        self.utilization = Gauge(
            "agent_utilization",
            "Utilization rate of Bamboo agents (busy/active ratio).",
            namespace=NAMESPACE,
            registry=None,
        )

        # Build queue
        self.queue = Gauge(
            "queue_size",
            "Number of builds in the Bamboo queue.",
            namespace=NAMESPACE,
            registry=None,
        )
        self.queue_change = Gauge(
            "queue_change",
            "Change in the Bamboo build queue size since the last scrape.",
            namespace=NAMESPACE,
            registry=None,
        )

        # Build results
        self.build_success = Counter(
            "build_success_total",
            "Successful builds per project version",
            BUILD_LABELS,
            namespace=NAMESPACE,
            registry=None,
        )
        self.build_failure = Counter(
            "build_failure_total",
            "Failed builds per project version",
            BUILD_LABELS,
            namespace=NAMESPACE,
            registry=None,
        )
        self.build_count = Gauge(
            "build_total",
            "Total builds executed per project version",
            BUILD_LABELS,
            namespace=NAMESPACE,
            registry=None,
        )

    def all(self):
        """Metrics in exposition order, after the failure counter."""
        return [
            self.failures,
            self.agents,
            self.queue,
            self.utilization,
            self.queue_change,
            self.build_success,
            self.build_failure,
            self.build_count,
        ]


def register_build_info(
    version: str, registry: Optional[CollectorRegistry] = None
) -> Info:
    """Register ``bamboo_exporter_build_info`` next to the collector."""
    kwargs = {} if registry is None else {"registry": registry}
    build_info = Info(
        "bamboo_exporter_build", "Build information for bamboo_exporter", **kwargs
    )
    build_info.info({"version": version})
    return build_info
