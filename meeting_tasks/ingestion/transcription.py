"""Audio/video transcription via AssemblyAI."""

from __future__ import annotations

import logging

import assemblyai as aai  # type: ignore[import-untyped]

from meeting_tasks.config import settings
from meeting_tasks.errors import TranscriptionError
from meeting_tasks.ingestion.models import TranscriptSegment
from meeting_tasks.ingestion.parsers import segments_to_text

logger = logging.getLogger(__name__)


def transcribe_media(raw: bytes, api_key: str | None = None) -> str:
    """Transcribe audio or video bytes into ``Speaker X: text`` lines.

    The SDK accepts raw bytes, so no temp file is written.

    Raises:
        TranscriptionError: The provider rejected the media, was unreachable,
            or returned no speech.
    """
    aai.settings.api_key = api_key or settings.assemblyai_api_key
    transcriber = aai.Transcriber()
    # speaker_labels=True enables diarization so assignees can be read off speaker turns.
    config = aai.TranscriptionConfig(speaker_labels=True)

    try:
        transcript = transcriber.transcribe(raw, config=config)
    except Exception as exc:
        raise TranscriptionError(f"Transcription service unavailable: {exc}") from exc

    if transcript.status == aai.TranscriptStatus.error:
        raise TranscriptionError(f"Transcription failed: {transcript.error}")

    utterances = transcript.utterances or []
    if utterances:
        text = segments_to_text(
            [TranscriptSegment(speaker=f"Speaker {u.speaker}", text=u.text) for u in utterances]
        )
    else:
        text = (transcript.text or "").strip()

    if not text:
        raise TranscriptionError("Transcription produced no text")

    logger.info("Transcribed %d bytes into %d chars", len(raw), len(text))
    return text
