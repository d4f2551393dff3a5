"""Typed views of the Bamboo REST API responses."""

from typing import Any, List, Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    model_validator,
)

from .errors import DecodeError


class _BambooModel(BaseModel):
    # Bamboo adds fields between releases; ignore what we don't read.
    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    @model_validator(mode="before")
    @classmethod
    def _null_is_default(cls, data: Any) -> Any:
        # null fields and objects fall back to their zero values.
        if data is None:
            return {}
        if isinstance(data, dict):
            return {key: value for key, value in data.items() if value is not None}
        return data


class Agent(_BambooModel):
    id: int = 0
    name: str = ""
    type: str = ""
    enabled: bool = False
    active: bool = False
    busy: bool = False


class QueueSnapshot(_BambooModel):
    size: int = 0


class _QueueResponse(_BambooModel):
    queued_builds: QueueSnapshot = Field(default_factory=QueueSnapshot, alias="queuedBuilds")


class Plan(_BambooModel):
    name: str = ""


class BuildResultRecord(_BambooModel):
    plan: Plan = Field(default_factory=Plan)
    build_number: int = Field(default=0, alias="buildNumber")
    state: str = ""

    @property
    def plan_name(self) -> str:
        return self.plan.name

    @property
    def successful(self) -> bool:
        return self.state == "Successful"


class BuildResults(_BambooModel):
    size: int = 0
    result: List[BuildResultRecord] = Field(default_factory=list)


class BuildResultPage(_BambooModel):
    results: BuildResults = Field(default_factory=BuildResults)

    @property
    def size(self) -> int:
        """Total number of results upstream reports across all pages."""
        return self.results.size

    @property
    def records(self) -> List[BuildResultRecord]:
        return self.results.result


_agent_list = TypeAdapter(Optional[List[Agent]])


def decode_agents(raw: bytes) -> List[Agent]:
    try:
        return _agent_list.validate_json(raw) or []
    except ValidationError as e:
        raise DecodeError("agents", f"error unmarshaling agents: {e}") from e


def decode_queue(raw: bytes) -> QueueSnapshot:
    try:
        return _QueueResponse.model_validate_json(raw).queued_builds
    except ValidationError as e:
        raise DecodeError("queue", f"error unmarshaling queue: {e}") from e


def decode_results(raw: bytes) -> BuildResultPage:
    try:
        return BuildResultPage.model_validate_json(raw)
    except ValidationError as e:
        raise DecodeError("results", f"error unmarshaling results: {e}") from e
