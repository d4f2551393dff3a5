"""Project/name labels derived from Bamboo plan names."""

from typing import NamedTuple

PLAN_SEPARATOR = " - "
UNKNOWN_PROJECT = "Unknown"


class PlanLabel(NamedTuple):
    project: str
    name: str


def derive_labels(plan_name: str) -> PlanLabel:
    """Split "Project - Plan" at the first separator.

    Plans without a separator are reported under the "Unknown" project.
    """
    project, separator, name = plan_name.partition(PLAN_SEPARATOR)
    if not separator:
        return PlanLabel(UNKNOWN_PROJECT, plan_name.strip())
    return PlanLabel(project.strip(), name.strip())
