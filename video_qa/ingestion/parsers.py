"""Caption parsers for WebVTT, SRT, plain text, and JSON formats."""

from __future__ import annotations

import html
import json
import re
from collections.abc import Callable
from typing import Any

from video_qa.ingestion.models import CaptionSegment

_TIMESTAMP_RE = re.compile(
    r"(\d{1,2}:\d{2}(?::\d{2})?[.,]\d{3})\s*-->\s*(\d{1,2}:\d{2}(?::\d{2})?[.,]\d{3})"
)
# Inline cue markup: <c>, </c>, <v Speaker>, karaoke timestamps <00:00:01.000>
_TAG_RE = re.compile(r"<[^>]+>")


def _parse_timestamp(ts: str) -> float:
    """Convert a caption timestamp (HH:MM:SS.mmm or MM:SS.mmm) to seconds."""
    parts = ts.strip().replace(",", ".").split(":")
    if len(parts) == 3:
        hours, minutes, seconds = parts
    elif len(parts) == 2:
        hours = "0"
        minutes, seconds = parts
    else:
        return 0.0
    return int(hours) * 3600 + int(minutes) * 60 + float(seconds)


def _clean_cue_text(lines: list[str]) -> str:
    text = " ".join(line.strip() for line in lines)
    text = html.unescape(_TAG_RE.sub("", text))
    return " ".join(text.split())


def _parse_timed_blocks(content: str) -> list[CaptionSegment]:
    """Shared cue walker for VTT and SRT: timestamp line, then text lines.

    Auto-generated captions repeat the previous line as the next cue rolls
    in, so a cue whose text equals the preceding cue is dropped.
    """
    segments: list[CaptionSegment] = []
    lines = content.strip().splitlines()
    i = 0
    while i < len(lines):
        match = _TIMESTAMP_RE.search(lines[i])
        if not match:
            i += 1
            continue

        start = _parse_timestamp(match.group(1))
        end = _parse_timestamp(match.group(2))

        # Collect text lines until blank line or next timestamp / end
        text_lines: list[str] = []
        i += 1
        while i < len(lines) and lines[i].strip() and not _TIMESTAMP_RE.search(lines[i]):
            text_lines.append(lines[i])
            i += 1

        text = _clean_cue_text(text_lines)
        if text and not (segments and segments[-1].text == text):
            segments.append(CaptionSegment(text=text, start_time=start, end_time=end))

    return segments


def parse_vtt(content: str) -> list[CaptionSegment]:
    """Parse a WebVTT caption file into segments.

    ``NOTE``, ``STYLE`` and ``REGION`` blocks carry no timestamp line and are
    skipped; inline markup such as ``<c>`` or ``<v Speaker>`` is stripped.
    """
    return _parse_timed_blocks(content)


def parse_srt(content: str) -> list[CaptionSegment]:
    """Parse a SubRip (``.srt``) caption file into segments.

    Numeric cue counters precede the timestamp line and are ignored.
    """
    return _parse_timed_blocks(content)


def parse_plain_text(content: str) -> list[CaptionSegment]:
    """Parse a plain-text transcript: one segment per non-blank line."""
    segments: list[CaptionSegment] = []
    for line in content.strip().splitlines():
        line = line.strip()
        if line:
            segments.append(CaptionSegment(text=line))
    return segments


def _json_list(data: dict[str, Any], key: str) -> list[dict[str, Any]]:
    """Return the object entries of the list under *key*; other entries are skipped."""
    entries = data[key]
    if not isinstance(entries, list):
        msg = f"Expected a list under {key!r}, got {type(entries).__name__}"
        raise ValueError(msg)
    return [entry for entry in entries if isinstance(entry, dict)]


def parse_json(content: str) -> list[CaptionSegment]:
    """Parse a JSON caption file (YouTube ``json3`` or internal segments format).

    YouTube ``json3`` (times in milliseconds)::

        {"events": [{"tStartMs": 0, "dDurationMs": 1500, "segs": [{"utf8": "..."}]}]}

    Internal segments format (times in seconds)::

        {"segments": [{"text": "...", "start_time": s, "end_time": s}]}
    """
    data = json.loads(content)
    segments: list[CaptionSegment] = []

    if isinstance(data, dict) and "events" in data:
        for event in _json_list(data, "events"):
            segs = event.get("segs")
            if not isinstance(segs, list) or not segs:
                # Window/style events carry no text
                continue
            text = " ".join(
                "".join(str(s.get("utf8", "")) for s in segs if isinstance(s, dict)).split()
            )
            if not text:
                continue
            start_ms = event.get("tStartMs", 0)
            segments.append(
                CaptionSegment(
                    text=text,
                    start_time=start_ms / 1000.0,
                    end_time=(start_ms + event.get("dDurationMs", 0)) / 1000.0,
                )
            )
    elif isinstance(data, dict) and "segments" in data:
        for seg in _json_list(data, "segments"):
            text = seg.get("text")
            if not isinstance(text, str):
                continue
            segments.append(
                CaptionSegment(
                    text=text.strip(),
                    start_time=seg.get("start_time"),
                    end_time=seg.get("end_time"),
                )
            )
    else:
        keys = list(data.keys()) if isinstance(data, dict) else type(data).__name__
        msg = f"Unrecognized JSON caption format. Keys: {keys}"
        raise ValueError(msg)

    return [s for s in segments if s.text]


def parse_captions(content: str, format: str) -> list[CaptionSegment]:
    """Dispatch to the correct parser based on *format*.

    Args:
        content: Raw caption file content.
        format: One of ``"vtt"``, ``"srt"``, ``"json"``, or
                ``"text"`` / ``"txt"``.

    Returns:
        Parsed caption segments.

    Raises:
        ValueError: If *format* is not recognized.
    """
    dispatch: dict[str, Callable[[str], list[CaptionSegment]]] = {
        "vtt": parse_vtt,
        "srt": parse_srt,
        "json": parse_json,
        "text": parse_plain_text,
        "txt": parse_plain_text,
    }

    parser = dispatch.get(format)
    if parser is None:
        msg = f"Unknown caption format: {format!r}. Supported: {list(dispatch.keys())}"
        raise ValueError(msg)

    return parser(content)
