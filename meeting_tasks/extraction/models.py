"""Data models for extracted tasks."""

from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum


class Priority(StrEnum):
    """Four-level task priority, most urgent first."""

    P1 = "P1"  # urgent
    P2 = "P2"  # high
    P3 = "P3"  # normal
    P4 = "P4"  # low


DEFAULT_PRIORITY = Priority.P3


@dataclass(frozen=True)
class ParsedTask:
    """A validated task ready for persistence.

    ``assignee`` and ``due_date`` are empty strings when unknown.
    """

    description: str
    assignee: str = ""
    due_date: str = ""
    priority: Priority = DEFAULT_PRIORITY

    def to_dict(self) -> dict[str, str]:
        return {
            "description": self.description,
            "assignee": self.assignee,
            "due_date": self.due_date,
            "priority": self.priority.value,
        }
