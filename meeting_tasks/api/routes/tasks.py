"""Task endpoints: extract from minutes or uploads, list, update, delete."""

from __future__ import annotations

import asyncio
import logging
from typing import Annotated

from fastapi import APIRouter, File, Form, HTTPException, Response, UploadFile

from meeting_tasks.api.models import (
    CreateTasksResponse,
    StatusUpdateRequest,
    TaskResponse,
    TaskUpdateRequest,
)
from meeting_tasks.config import settings
from meeting_tasks.errors import (
    DocumentExtractionError,
    ExtractionFailedError,
    TaskNotFoundError,
    TranscriptionError,
    UnsupportedFileTypeError,
)
from meeting_tasks.extraction.extractor import extract_tasks
from meeting_tasks.ingestion.documents import SUPPORTED_MIME_TYPES, extract_text, is_media
from meeting_tasks.ingestion.transcription import transcribe_media
from meeting_tasks.storage import (
    TaskStatus,
    delete_task,
    get_supabase_client,
    get_task,
    list_tasks,
    store_task,
    update_task,
    update_task_status,
)

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_upload(file: UploadFile) -> str:
    """Turn an uploaded document, transcript or recording into minutes text.

    Raises:
        HTTPException(413): Upload exceeds ``settings.max_upload_bytes``.
        HTTPException(415): No text extractor for the file type.
        HTTPException(501): Audio/video upload without transcription configured.
        HTTPException(400): Empty, corrupt or untranscribable content.
    """
    raw = await file.read()
    if len(raw) > settings.max_upload_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size is {settings.max_upload_bytes // (1024 * 1024)} MB.",
        )

    filename = file.filename or ""
    content_type = file.content_type or ""
    logger.info("Processing file upload %s (%s, %d bytes)", filename, content_type, len(raw))

    if is_media(content_type, filename):
        if not settings.assemblyai_api_key:
            raise HTTPException(
                status_code=501,
                detail=(
                    "Audio/video transcription is not configured. "
                    "Please upload a text document (.txt, .pdf, .docx, .vtt, .json)."
                ),
            )
        try:
            # Synchronous SDK call, run in a thread.
            return await asyncio.to_thread(transcribe_media, raw)
        except TranscriptionError as exc:
            raise HTTPException(status_code=400, detail=str(exc)) from exc

    try:
        return extract_text(raw, content_type, filename)
    except UnsupportedFileTypeError as exc:
        raise HTTPException(
            status_code=415,
            detail=f"{exc}. Supported: {sorted(SUPPORTED_MIME_TYPES)}",
        ) from exc
    except DocumentExtractionError as exc:
        raise HTTPException(status_code=400, detail=f"Failed to process file: {exc}") from exc


@router.post("/api/tasks", response_model=CreateTasksResponse, status_code=201)
async def create_tasks(
    text: Annotated[str | None, Form()] = None,
    file: Annotated[UploadFile | None, File()] = None,
) -> CreateTasksResponse:
    """Extract tasks from meeting minutes and store them.

    Accepts either a ``text`` form field or a ``file`` upload (plain text,
    PDF, DOCX, VTT/JSON transcript, or audio/video when transcription is
    configured). Each extracted task is stored individually; tasks that fail
    to store are reported in ``errors`` without failing the request.
    """
    if file is not None:
        text = await _read_upload(file)

    if not text or not text.strip():
        raise HTTPException(status_code=400, detail="Text or file is required")

    try:
        # Blocks on the remote call and backoff sleeps.
        parsed = await asyncio.to_thread(extract_tasks, text)
    except ExtractionFailedError as exc:
        logger.error("All parsing attempts failed: %s", exc)
        raise HTTPException(
            status_code=502,
            detail={
                "error": "Failed to process the meeting minutes",
                "category": exc.category,
                "message": str(exc.cause),
            },
        ) from exc

    client = get_supabase_client()
    created: list[TaskResponse] = []
    errors: list[str] = []
    for index, task in enumerate(parsed, start=1):
        try:
            created.append(TaskResponse.from_row(store_task(client, task)))
        except Exception as exc:
            logger.exception("Error creating task %d/%d", index, len(parsed))
            errors.append(f"Task {index}: {exc}")

    if not created:
        raise HTTPException(status_code=500, detail="No tasks were created successfully")

    logger.info("Created %d of %d tasks", len(created), len(parsed))
    return CreateTasksResponse(
        created=len(created),
        failed=len(errors),
        total=len(parsed),
        tasks=created,
        errors=errors,
    )


@router.get("/api/tasks", response_model=list[TaskResponse])
async def get_tasks(
    status: TaskStatus | None = None,
    assignee: str | None = None,
) -> list[TaskResponse]:
    """List tasks newest first. Without ``status``, only pending and in-progress tasks."""
    client = get_supabase_client()
    rows = list_tasks(client, status=status.value if status else None, assignee=assignee)
    return [TaskResponse.from_row(row) for row in rows]


@router.get("/api/tasks/{task_id}", response_model=TaskResponse)
async def get_task_by_id(task_id: str) -> TaskResponse:
    client = get_supabase_client()
    try:
        return TaskResponse.from_row(get_task(client, task_id))
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Task not found") from exc


@router.patch("/api/tasks/{task_id}/status", response_model=TaskResponse)
async def patch_task_status(task_id: str, body: StatusUpdateRequest) -> TaskResponse:
    client = get_supabase_client()
    try:
        return TaskResponse.from_row(update_task_status(client, task_id, body.status))
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Task not found") from exc


@router.put("/api/tasks/{task_id}", response_model=TaskResponse)
async def put_task(task_id: str, body: TaskUpdateRequest) -> TaskResponse:
    """Update any subset of a task's editable fields."""
    updates = body.model_dump(exclude_unset=True, mode="json")
    if not updates:
        raise HTTPException(status_code=400, detail="No fields to update")

    client = get_supabase_client()
    try:
        return TaskResponse.from_row(update_task(client, task_id, updates))
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Task not found") from exc


@router.delete("/api/tasks/{task_id}", status_code=204)
async def remove_task(task_id: str) -> Response:
    client = get_supabase_client()
    try:
        delete_task(client, task_id)
    except TaskNotFoundError as exc:
        raise HTTPException(status_code=404, detail="Task not found") from exc
    return Response(status_code=204)
