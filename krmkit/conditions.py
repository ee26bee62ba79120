"""Package revision conditions."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable


@dataclass
class Condition:
    type: str = ""
    status: str = ""
    reason: str = ""
    message: str = ""


def porch_conditions(conditions: Iterable[Condition]) -> list[Condition]:
    """Convert package file conditions to package revision conditions."""
    return [
        Condition(type=c.type, status=str(c.status), reason=c.reason, message=c.message)
        for c in conditions
    ]


def has_specific_type_conditions(conditions: Iterable[Condition], condition_type: str) -> bool:
    """Return whether any condition's type starts with condition_type and a dot."""
    prefix = condition_type + "."
    return any(c.type.startswith(prefix) for c in conditions)