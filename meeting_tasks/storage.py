"""Supabase storage helpers for tasks."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from enum import StrEnum
from typing import Any, cast

from supabase import Client, create_client

from meeting_tasks.config import settings
from meeting_tasks.errors import TaskNotFoundError
from meeting_tasks.extraction.models import ParsedTask

logger = logging.getLogger(__name__)

TASKS_TABLE = "tasks"


class TaskStatus(StrEnum):
    """Lifecycle of a stored task."""

    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    ARCHIVED = "archived"


# Listed when no status filter is given
OPEN_STATUSES = [TaskStatus.PENDING.value, TaskStatus.IN_PROGRESS.value]


def get_supabase_client() -> Client:
    """Create and return a Supabase client from the configured URL and key."""
    return create_client(settings.supabase_url, settings.supabase_key)


def _rows(result: Any) -> list[dict[str, Any]]:
    # Supabase .data is typed as JSON (broad union); cast to concrete type.
    return cast(list[dict[str, Any]], result.data or [])


def store_task(client: Client, task: ParsedTask) -> dict[str, Any]:
    """Insert a parsed task as a new pending task and return the stored row."""
    result = (
        client.table(TASKS_TABLE)
        .insert(
            {
                "description": task.description,
                "assignee": task.assignee,
                "due_date": task.due_date or None,
                "priority": task.priority.value,
                "status": TaskStatus.PENDING.value,
                "completed": False,
            }
        )
        .execute()
    )
    rows = _rows(result)
    if not rows:
        msg = f"Insert returned no row for task: {task.description[:50]!r}"
        raise RuntimeError(msg)
    logger.info("Stored task %s", rows[0].get("id"))
    return rows[0]


def list_tasks(
    client: Client,
    status: str | None = None,
    assignee: str | None = None,
) -> list[dict[str, Any]]:
    """List tasks newest first; open tasks only unless *status* is given."""
    query = client.table(TASKS_TABLE).select("*")
    if status:
        query = query.eq("status", status)
    else:
        query = query.in_("status", OPEN_STATUSES)
    if assignee:
        query = query.eq("assignee", assignee)
    return _rows(query.order("created_at", desc=True).execute())


def get_task(client: Client, task_id: str) -> dict[str, Any]:
    rows = _rows(client.table(TASKS_TABLE).select("*").eq("id", task_id).execute())
    if not rows:
        raise TaskNotFoundError(task_id)
    return rows[0]


def update_task(client: Client, task_id: str, updates: dict[str, Any]) -> dict[str, Any]:
    """Apply *updates* to a task and return the updated row.

    Raises:
        TaskNotFoundError: No task has *task_id*.
    """
    payload = {**updates, "updated_at": datetime.now(timezone.utc).isoformat()}
    rows = _rows(client.table(TASKS_TABLE).update(payload).eq("id", task_id).execute())
    if not rows:
        raise TaskNotFoundError(task_id)
    return rows[0]


def update_task_status(client: Client, task_id: str, status: TaskStatus) -> dict[str, Any]:
    return update_task(
        client,
        task_id,
        {"status": status.value, "completed": status is TaskStatus.COMPLETED},
    )


def delete_task(client: Client, task_id: str) -> None:
    rows = _rows(client.table(TASKS_TABLE).delete().eq("id", task_id).execute())
    if not rows:
        raise TaskNotFoundError(task_id)
