"""Transcript sources: where a video's caption text comes from."""

from __future__ import annotations

import logging
import re
from pathlib import Path
from typing import Protocol

from video_qa.errors import NotAvailableError
from video_qa.ingestion.models import CaptionSegment
from video_qa.ingestion.parsers import parse_captions

logger = logging.getLogger(__name__)

_VIDEO_ID_PATTERNS: list[re.Pattern[str]] = [
    re.compile(
        r"(?:youtube\.com/watch\?v=|youtu\.be/|youtube\.com/shorts/|youtube\.com/live/)"
        r"([a-zA-Z0-9_-]{11})"
    ),
    re.compile(r"youtube\.com/watch\?.*v=([a-zA-Z0-9_-]{11})"),
]
_BARE_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{11}$")

# Checked in order; the first existing file wins
CAPTION_EXTENSIONS: tuple[str, ...] = (".vtt", ".srt", ".json", ".txt")


class TranscriptSource(Protocol):
    """Anything that can produce the plain transcript text for a source id."""

    def extract(self, source_id: str) -> str:
        """Return the transcript, or raise :class:`NotAvailableError`."""
        ...


def extract_video_id(url_or_id: str) -> str | None:
    """Extract a YouTube video ID from a URL, or accept a bare 11-character ID.

    Supported formats:
    - https://www.youtube.com/watch?v=VIDEO_ID
    - https://youtu.be/VIDEO_ID
    - https://www.youtube.com/shorts/VIDEO_ID
    - https://www.youtube.com/live/VIDEO_ID
    """
    candidate = url_or_id.strip()
    if _BARE_ID_RE.match(candidate):
        return candidate

    for pattern in _VIDEO_ID_PATTERNS:
        match = pattern.search(candidate)
        if match:
            return match.group(1)
    return None


def join_segments(segments: list[CaptionSegment]) -> str:
    """Join caption cues into one transcript string separated by single spaces."""
    return " ".join(s.text.strip() for s in segments if s.text.strip())


class CaptionFileSource:
    """Reads ``<source_id>.<ext>`` caption files from a directory."""

    def __init__(self, directory: str | Path) -> None:
        self.directory = Path(directory)

    def find(self, source_id: str) -> Path | None:
        for ext in CAPTION_EXTENSIONS:
            path = self.directory / f"{source_id}{ext}"
            if path.is_file():
                return path
        return None

    def extract(self, source_id: str) -> str:
        # Guard against ids that would escape the directory
        if not source_id or Path(source_id).name != source_id:
            raise NotAvailableError(f"Invalid source id: {source_id!r}")

        path = self.find(source_id)
        if path is None:
            raise NotAvailableError(
                f"No transcript available for {source_id}. "
                "Transcripts are required for Q&A functionality."
            )

        fmt = path.suffix.lstrip(".")
        try:
            segments = parse_captions(path.read_text(encoding="utf-8"), fmt)
        except (ValueError, KeyError, TypeError, AttributeError) as exc:
            # Malformed files of a known format are treated like a missing transcript
            raise NotAvailableError(f"Could not parse captions in {path.name}: {exc}") from exc

        logger.info("Read %d caption segments from %s", len(segments), path)
        return join_segments(segments)
