"""Transcript parsers for VTT and JSON formats, flattened to minutes text."""

from __future__ import annotations

import json
import re
from collections.abc import Callable

from meeting_tasks.ingestion.models import TranscriptSegment

_TIMESTAMP_RE = re.compile(
    r"(\d{1,2}:)?\d{2}:\d{2}[.,]\d{3}\s*-->\s*(\d{1,2}:)?\d{2}:\d{2}[.,]\d{3}"
)
_SPEAKER_RE = re.compile(r"^(.+?):\s+(.+)$")
# Teams <v SpeakerName> tag; the closing </v> is optional per the WebVTT spec.
_TEAMS_VOICE_RE = re.compile(r"^<v ([^>]+)>(.*?)(?:</v>)?$", re.DOTALL)


def parse_vtt(content: str) -> list[TranscriptSegment]:
    """Parse a WebVTT file into transcript segments.

    Cue timings are dropped. Speaker labels are read from either form:

    - colon-style: ``Speaker 1: Hello``
    - Microsoft Teams voice tags: ``<v SpeakerName>Hello</v>``
    """
    segments: list[TranscriptSegment] = []

    lines = content.strip().splitlines()
    i = 0
    while i < len(lines):
        if not _TIMESTAMP_RE.search(lines[i]):
            i += 1
            continue

        # Collect text lines until blank line or next timestamp / end
        text_lines: list[str] = []
        i += 1
        while i < len(lines) and lines[i].strip() and not _TIMESTAMP_RE.search(lines[i]):
            text_lines.append(lines[i].strip())
            i += 1

        full_text = " ".join(text_lines)
        speaker: str | None = None

        teams_match = _TEAMS_VOICE_RE.match(full_text)
        if teams_match:
            speaker = teams_match.group(1).strip()
            full_text = teams_match.group(2).strip()
        else:
            speaker_match = _SPEAKER_RE.match(full_text)
            if speaker_match:
                speaker = speaker_match.group(1)
                full_text = speaker_match.group(2)

        if full_text:
            segments.append(TranscriptSegment(speaker=speaker, text=full_text))

    return segments


def parse_json(content: str) -> list[TranscriptSegment]:
    """Parse a JSON transcript.

    Supported formats:

    AssemblyAI utterances::

        {"utterances": [{"speaker": "A", "text": "..."}]}

    Generic segments::

        {"segments": [{"speaker": "...", "text": "..."}]}

    Plain transcript text::

        {"text": "..."}
    """
    data = json.loads(content)
    if not isinstance(data, dict):
        msg = "Unrecognized JSON transcript format: expected an object"
        raise ValueError(msg)

    if "utterances" in data:
        return [
            TranscriptSegment(speaker=utt.get("speaker"), text=utt["text"])
            for utt in data["utterances"]
        ]
    if "segments" in data:
        return [
            TranscriptSegment(speaker=seg.get("speaker"), text=seg["text"])
            for seg in data["segments"]
        ]
    if isinstance(data.get("text"), str):
        return [TranscriptSegment(speaker=None, text=data["text"])]

    msg = f"Unrecognized JSON transcript format. Keys: {list(data.keys())}"
    raise ValueError(msg)


def segments_to_text(segments: list[TranscriptSegment]) -> str:
    """Render segments as ``Speaker: text`` lines for the extraction prompt."""
    return "\n".join(segment.as_line() for segment in segments if segment.text.strip())


def parse_transcript(content: str, format: str) -> str:
    """Parse a transcript of the given *format* into plain minutes text.

    Args:
        content: Raw transcript text.
        format: ``"vtt"`` or ``"json"``.

    Raises:
        ValueError: If *format* is not recognized or the content is malformed.
    """
    dispatch: dict[str, Callable[[str], list[TranscriptSegment]]] = {
        "vtt": parse_vtt,
        "json": parse_json,
    }

    parser = dispatch.get(format)
    if parser is None:
        msg = f"Unknown transcript format: {format!r}. Supported: {list(dispatch.keys())}"
        raise ValueError(msg)

    return segments_to_text(parser(content))
