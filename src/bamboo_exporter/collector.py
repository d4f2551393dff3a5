"""Scrape-time collector that turns Bamboo API data into Prometheus metrics."""

import logging
import threading
import time
from enum import Enum
from typing import Any, Dict, List, Optional, Protocol

from prometheus_client.metrics_core import Metric

from .bamboo import AGENTS_ENDPOINT, QUEUE_ENDPOINT, RESULTS_ENDPOINT
from .errors import BambooError
from .labels import derive_labels
from .metrics import ExporterMetrics, up_metric
from .schemas import decode_agents, decode_queue, decode_results


logger = logging.getLogger(__name__)

RESULTS_PAGE_SIZE = 100
RESULTS_EXPAND = "results.result"
DEFAULT_MAX_PAGES = 1000


class Fetcher(Protocol):
    def fetch(self, path: str, params: Optional[Dict[str, Any]] = None) -> bytes: ...


class ScrapeStage(str, Enum):
    IDLE = "idle"
    FETCHING_AGENTS = "fetching_agents"
    FETCHING_QUEUE = "fetching_queue"
    FETCHING_RESULTS = "fetching_results"
    DONE = "done"
    ABORTED = "aborted"


def _flag(value: bool) -> str:
    return "true" if value else "false"


class BambooCollector:
    """Custom collector registered with a prometheus_client registry.

    Every ``collect()`` call performs one full scrape of Bamboo while
    holding ``self._lock``; concurrent scrapes wait for the running one.
    A failed step leaves every metric it did not reach at its previous value.
    """

    def __init__(self, client: Fetcher, max_pages: int = DEFAULT_MAX_PAGES):
        self.client = client
        self.max_pages = max_pages
        self.metrics = ExporterMetrics()
        self.previous_queue_size = 0
        self.stage = ScrapeStage.IDLE
        self.last_scrape_duration_seconds = 0.0
        self._lock = threading.Lock()

    def describe(self) -> List[Metric]:
        descriptors = [up_metric(0)]
        for metric in self.metrics.all():
            descriptors.extend(metric.describe())
        return descriptors

    def collect(self) -> List[Metric]:
        with self._lock:
            start_time = time.monotonic()
            success = self.scrape()
            self.last_scrape_duration_seconds = time.monotonic() - start_time
            logger.debug(
                f"Scrape finished in {self.last_scrape_duration_seconds:.3f}s "
                f"({self.stage.value})"
            )
            self.stage = ScrapeStage.IDLE

            collected = [up_metric(1 if success else 0)]
            for metric in self.metrics.all():
                collected.extend(metric.collect())
            return collected

    def scrape(self) -> bool:
        """Run agents, queue and build-result steps; stop at the first error."""
        steps = [
            (ScrapeStage.FETCHING_AGENTS, "agents", self.scrape_agents),
            (ScrapeStage.FETCHING_QUEUE, "queue", self.scrape_queue),
            (ScrapeStage.FETCHING_RESULTS, "build results", self.scrape_build_results),
        ]
        for stage, name, step in steps:
            self.stage = stage
            try:
                step()
            except BambooError as e:
                self.stage = ScrapeStage.ABORTED
                logger.error(
                    f"Failed to scrape {name}: {e}",
                    extra={
                        "extra_fields": {
                            "step": stage.value,
                            "error_kind": e.kind.value,
                            "context": e.context,
                        }
                    },
                )
                self.metrics.failures.inc()
                return False

        self.stage = ScrapeStage.DONE
        return True

    def scrape_agents(self):
        agents = decode_agents(self.client.fetch(AGENTS_ENDPOINT))

        self.metrics.agents.clear()
        active_count = 0
        busy_count = 0

        for agent in agents:
            if agent.active:
                active_count += 1
            if agent.busy:
                busy_count += 1
            self.metrics.agents.labels(
                str(agent.id),
                agent.name,
                agent.type,
                _flag(agent.enabled),
                _flag(agent.active),
                _flag(agent.busy),
            ).set(1)

        # No active agents: keep the last known utilization.
        if active_count > 0:
            self.metrics.utilization.set(busy_count / active_count)

    def scrape_queue(self):
        queue = decode_queue(self.client.fetch(QUEUE_ENDPOINT))

        current_size = queue.size
        self.metrics.queue.set(current_size)
        self.metrics.queue_change.set(current_size - self.previous_queue_size)
        self.previous_queue_size = current_size

    def scrape_build_results(self):
        start_index = 0
        total_size = 0

        for page_number in range(self.max_pages):
            params = {
                "start-index": start_index,
                "max-result": RESULTS_PAGE_SIZE,
                "expand": RESULTS_EXPAND,
            }
            page = decode_results(self.client.fetch(RESULTS_ENDPOINT, params))

            if page_number == 0:
                total_size = page.size

            for record in page.records:
                labels = derive_labels(record.plan_name)
                if record.successful:
                    self.metrics.build_success.labels(*labels).inc()
                else:
                    self.metrics.build_failure.labels(*labels).inc()
                self.metrics.build_count.labels(*labels).set(record.build_number)

            fetched_count = start_index + len(page.records)
            logger.debug(f"Fetched build results {fetched_count}/{total_size}")
            if fetched_count >= total_size or not page.records:
                return
            start_index = fetched_count

        logger.warning(
            f"Stopped paginating build results after {self.max_pages} pages "
            f"at index {start_index} of {total_size}"
        )
