"""Plain-text extraction from uploaded documents and transcript files."""

from __future__ import annotations

import io
import logging
from collections.abc import Callable

import docx2txt  # type: ignore[import-untyped]
from pypdf import PdfReader

from meeting_tasks.errors import DocumentExtractionError, UnsupportedFileTypeError
from meeting_tasks.ingestion.parsers import parse_transcript

logger = logging.getLogger(__name__)

TEXT_MIME = "text/plain"
PDF_MIME = "application/pdf"
DOCX_MIME = "application/vnd.openxmlformats-officedocument.wordprocessingml.document"
VTT_MIME = "text/vtt"
JSON_MIME = "application/json"

# Declared types too generic to trust; the file extension decides instead.
GENERIC_MIME_TYPES = {"", "application/octet-stream"}

EXTENSION_MIME_TYPES = {
    "txt": TEXT_MIME,
    "pdf": PDF_MIME,
    "docx": DOCX_MIME,
    "vtt": VTT_MIME,
    "json": JSON_MIME,
}

# Audio/video extensions, routed to transcription
MEDIA_EXTENSIONS = {"mp3", "wav", "m4a", "mp4", "ogg", "flac", "webm", "mov"}


def _extension(filename: str) -> str:
    return filename.rsplit(".", 1)[-1].lower() if "." in filename else ""


def resolve_mime_type(mime_type: str, filename: str = "") -> str:
    """Normalise the declared MIME type, falling back to the file extension."""
    mime = (mime_type or "").split(";", 1)[0].strip().lower()
    if mime in GENERIC_MIME_TYPES:
        return EXTENSION_MIME_TYPES.get(_extension(filename), mime)
    return mime


def is_media(mime_type: str, filename: str = "") -> bool:
    """True for audio/video uploads, which need transcription rather than parsing."""
    mime = resolve_mime_type(mime_type, filename)
    return mime.startswith(("audio/", "video/")) or _extension(filename) in MEDIA_EXTENSIONS


def _read_text(content: bytes) -> str:
    return content.decode("utf-8-sig")


def _read_pdf(content: bytes) -> str:
    reader = PdfReader(io.BytesIO(content))
    return "\n".join(page.extract_text() or "" for page in reader.pages)


def _read_docx(content: bytes) -> str:
    return str(docx2txt.process(io.BytesIO(content)))


def _read_vtt(content: bytes) -> str:
    return parse_transcript(content.decode("utf-8-sig"), "vtt")


def _read_json(content: bytes) -> str:
    return parse_transcript(content.decode("utf-8-sig"), "json")


_READERS: dict[str, Callable[[bytes], str]] = {
    TEXT_MIME: _read_text,
    PDF_MIME: _read_pdf,
    DOCX_MIME: _read_docx,
    VTT_MIME: _read_vtt,
    JSON_MIME: _read_json,
}

SUPPORTED_MIME_TYPES = frozenset(_READERS)


def extract_text(content: bytes, mime_type: str, filename: str = "") -> str:
    """Extract plain text from an uploaded file.

    Args:
        content: Raw file bytes.
        mime_type: Declared MIME type of the upload.
        filename: Original filename, used when the MIME type is generic.

    Returns:
        The extracted text, stripped of surrounding whitespace.

    Raises:
        UnsupportedFileTypeError: No reader exists for the MIME type.
        DocumentExtractionError: The file is empty, corrupt, or has no text.
    """
    mime = resolve_mime_type(mime_type, filename)
    reader = _READERS.get(mime)
    if reader is None:
        raise UnsupportedFileTypeError(f"Unsupported file type: {mime or 'unknown'}")

    if not content:
        raise DocumentExtractionError("File is empty")

    try:
        text = reader(content)
    except Exception as exc:
        logger.exception("Error extracting text from %s (%s)", filename or "upload", mime)
        raise DocumentExtractionError(f"Failed to process file: {exc}") from exc

    text = text.strip()
    if not text:
        raise DocumentExtractionError("No text content could be extracted from the file")

    logger.info("Extracted %d chars from %s (%s)", len(text), filename or "upload", mime)
    return text
