"""Shared fixtures: a fake OpenAI client, a recording sleep, and the API client."""

from __future__ import annotations

from collections.abc import Callable
from typing import Any
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from meeting_tasks.api.main import app


def _completion(content: str | None, total_tokens: int | None = 42) -> MagicMock:
    message = MagicMock()
    message.content = content
    choice = MagicMock()
    choice.message = message
    response = MagicMock()
    response.choices = [choice]
    response.usage.total_tokens = total_tokens
    return response


@pytest.fixture
def make_completion() -> Callable[..., MagicMock]:
    """Factory for chat-completion responses shaped like the OpenAI SDK's."""
    return _completion


@pytest.fixture
def openai_client() -> MagicMock:
    """An OpenAI client whose ``chat.completions.create`` is a MagicMock."""
    return MagicMock()


@pytest.fixture
def sleeps() -> list[float]:
    return []


@pytest.fixture
def fake_sleep(sleeps: list[float]) -> Callable[[float], None]:
    """A sleep that records its delays instead of blocking."""
    return sleeps.append


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


@pytest.fixture
def task_row() -> Callable[..., dict[str, Any]]:
    """Factory for rows as the tasks table returns them."""

    def _row(task_id: str = "t-1", **overrides: Any) -> dict[str, Any]:
        row: dict[str, Any] = {
            "id": task_id,
            "description": "Send the proposal",
            "assignee": "Alice",
            "due_date": None,
            "priority": "P3",
            "status": "pending",
            "completed": False,
            "created_at": "2024-06-05T10:00:00+00:00",
            "updated_at": "2024-06-05T10:00:00+00:00",
        }
        row.update(overrides)
        return row

    return _row
