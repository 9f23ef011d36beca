"""Pydantic request/response schemas for the Meeting Tasks API."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, Field

from meeting_tasks.extraction.models import DEFAULT_PRIORITY, Priority
from meeting_tasks.storage import TaskStatus


class TaskResponse(BaseModel):
    """A stored task in API responses."""

    id: str
    description: str
    assignee: str = ""
    due_date: str | None = None
    priority: Priority = DEFAULT_PRIORITY
    status: TaskStatus = TaskStatus.PENDING
    completed: bool = False
    created_at: str | None = None
    updated_at: str | None = None

    @classmethod
    def from_row(cls, row: dict[str, Any]) -> TaskResponse:
        return cls(
            id=str(row["id"]),
            description=row["description"],
            assignee=row.get("assignee") or "",
            due_date=row.get("due_date"),
            priority=row.get("priority") or DEFAULT_PRIORITY,
            status=row.get("status") or TaskStatus.PENDING,
            completed=bool(row.get("completed", False)),
            created_at=row.get("created_at"),
            updated_at=row.get("updated_at"),
        )


class CreateTasksResponse(BaseModel):
    """Response body for POST /api/tasks.

    ``failed`` counts extracted tasks that could not be stored; ``errors``
    carries one message per failure.
    """

    created: int
    failed: int
    total: int
    tasks: list[TaskResponse]
    errors: list[str] = []


class StatusUpdateRequest(BaseModel):
    """Request body for PATCH /api/tasks/{id}/status."""

    status: TaskStatus


class TaskUpdateRequest(BaseModel):
    """Request body for PUT /api/tasks/{id}; only the fields sent are changed."""

    description: str | None = Field(default=None, min_length=1, max_length=500)
    assignee: str | None = None
    due_date: str | None = None
    priority: Priority | None = None
    status: TaskStatus | None = None
    completed: bool | None = None
