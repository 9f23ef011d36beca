"""Exception hierarchy for task extraction and its collaborators."""

from __future__ import annotations


class MeetingTasksError(Exception):
    """Base class for all errors raised by this package."""


# ---------------------------------------------------------------------------
# Extraction pipeline
# ---------------------------------------------------------------------------


class ExtractionError(MeetingTasksError):
    """A single extraction attempt failed."""


class RemoteInvocationError(ExtractionError):
    """The language model provider call failed (network, auth, rate limit, ...)."""


class ModelTimeoutError(ExtractionError, TimeoutError):
    """The language model round-trip exceeded its time budget."""


class EmptyResponseError(ExtractionError):
    """The language model returned no content."""


class MalformedResponseError(ExtractionError):
    """The language model content is not valid JSON."""


class NoTasksExtractedError(ExtractionError):
    """Valid JSON, but no task survived normalization and resolution."""


class ExtractionFailedError(ExtractionError):
    """Terminal error raised once every retry attempt has failed.

    Carries the last underlying failure as ``cause`` so callers can report the
    failure category alongside the provider's message.
    """

    def __init__(self, cause: BaseException, attempts: int) -> None:
        self.cause = cause
        self.attempts = attempts
        super().__init__(
            f"Failed to parse tasks from conversation after {attempts} attempt(s): {cause}"
        )

    @property
    def category(self) -> str:
        return type(self.cause).__name__


# ---------------------------------------------------------------------------
# Collaborators
# ---------------------------------------------------------------------------


class UnsupportedFileTypeError(MeetingTasksError):
    """No text extractor exists for the declared MIME type."""


class DocumentExtractionError(MeetingTasksError):
    """The document is empty, corrupt, or yielded no text."""


class TranscriptionError(MeetingTasksError):
    """The transcription provider rejected the media or was unreachable."""


class TaskNotFoundError(MeetingTasksError):
    """No stored task has the requested identifier."""

    def __init__(self, task_id: str) -> None:
        self.task_id = task_id
        super().__init__(f"Task not found: {task_id}")
