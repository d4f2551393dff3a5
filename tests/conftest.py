import json
from typing import Any, Callable, Dict, List, Optional, Union

import pytest

from bamboo_exporter.bamboo import AGENTS_ENDPOINT, QUEUE_ENDPOINT, RESULTS_ENDPOINT
from bamboo_exporter.collector import BambooCollector


Response = Union[bytes, Exception, Callable[[Optional[Dict[str, Any]]], bytes]]


def agents_payload(*agents: Dict[str, Any]) -> bytes:
    return json.dumps(list(agents)).encode()


def agent(
    agent_id: int,
    name: str = "",
    active: bool = True,
    busy: bool = False,
    enabled: bool = True,
    agent_type: str = "LOCAL",
) -> Dict[str, Any]:
    return {
        "id": agent_id,
        "name": name or f"agent-{agent_id}",
        "type": agent_type,
        "enabled": enabled,
        "active": active,
        "busy": busy,
    }


def queue_payload(size: int) -> bytes:
    return json.dumps({"queuedBuilds": {"size": size, "max-result": 0}}).encode()


def result(plan_name: str, build_number: int, state: str = "Successful") -> Dict[str, Any]:
    return {
        "plan": {"name": plan_name, "key": "KEY"},
        "buildNumber": build_number,
        "state": state,
        "lifeCycleState": "Finished",
    }


def results_payload(size: int, records: List[Dict[str, Any]]) -> bytes:
    return json.dumps({"results": {"size": size, "result": records}}).encode()


class FakeFetcher:
    """Serves canned responses per endpoint and records every call.

    A list of responses for an endpoint is consumed one per call; the last
    entry is repeated once the list runs out.
    """

    def __init__(self, responses: Dict[str, Union[Response, List[Response]]]):
        self.responses = {
            path: list(value) if isinstance(value, list) else [value]
            for path, value in responses.items()
        }
        self.calls: List[tuple] = []
        self.on_fetch: Optional[Callable[[str], None]] = None

    def fetch(self, path: str, params: Optional[Dict[str, Any]] = None) -> bytes:
        self.calls.append((path, dict(params) if params else None))
        if self.on_fetch:
            self.on_fetch(path)

        queue = self.responses[path]
        response = queue.pop(0) if len(queue) > 1 else queue[0]
        if isinstance(response, Exception):
            raise response
        if callable(response):
            return response(params)
        return response

    def calls_to(self, path: str) -> List[Optional[Dict[str, Any]]]:
        return [params for called, params in self.calls if called == path]


def sample_value(metrics, name: str, labels: Optional[Dict[str, str]] = None):
    """Value of the first sample named ``name`` with exactly ``labels``."""
    labels = labels or {}
    for metric in metrics:
        for sample in metric.samples:
            if sample.name == name and sample.labels == labels:
                return sample.value
    return None


def samples_named(metrics, name: str):
    return [
        sample for metric in metrics for sample in metric.samples if sample.name == name
    ]


@pytest.fixture
def healthy_responses():
    return {
        AGENTS_ENDPOINT: agents_payload(
            agent(1, busy=True), agent(2), agent(3), agent(4)
        ),
        QUEUE_ENDPOINT: queue_payload(5),
        RESULTS_ENDPOINT: results_payload(
            2,
            [
                result("XXXX Releases - PB-XXXX-21.2", 12),
                result("XXXX Releases - PB-XXXX-21.2", 13, state="Failed"),
            ],
        ),
    }


@pytest.fixture
def fetcher(healthy_responses):
    return FakeFetcher(healthy_responses)


@pytest.fixture
def collector(fetcher):
    return BambooCollector(fetcher)
