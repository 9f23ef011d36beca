"""Data models for transcript ingestion."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TranscriptSegment:
    """Uniform representation of one utterance in a transcript."""

    speaker: str | None
    text: str

    def as_line(self) -> str:
        return f"{self.speaker}: {self.text}" if self.speaker else self.text
