"""Sentence-aware chunking of transcript text."""

from __future__ import annotations


def _split_index(text: str, max_chars: int) -> int:
    """Return the index of the last character of the next chunk.

    Prefers the furthest-back ``.``; falls back to ``!``/``?`` when the full
    stop lies in the first half of the window, then to the last space when the
    boundary is still in the first 30%, and finally to a hard cut.
    """
    # Punctuation stays in the chunk, so it must sit below max_chars
    split = text.rfind(".", 0, max_chars)

    if split < max_chars * 0.5:
        split = max(text.rfind("!", 0, max_chars), text.rfind("?", 0, max_chars), split)

    if split < max_chars * 0.3:
        # The space itself is trimmed off, so it may sit at max_chars
        split = text.rfind(" ", 0, max_chars + 1)

    if split < 0:
        split = max_chars - 1

    return split


def chunk_text(text: str, max_chars: int = 1000) -> list[str]:
    """Split *text* into chunks of at most *max_chars* characters.

    Chunks keep the original order, are stripped of surrounding whitespace
    and are never empty.

    Args:
        text: Full transcript text.
        max_chars: Maximum characters per chunk.

    Returns:
        Ordered list of chunk strings; empty for blank input.

    Raises:
        ValueError: If *max_chars* is not positive.
    """
    if max_chars <= 0:
        msg = f"max_chars must be positive, got {max_chars}"
        raise ValueError(msg)

    chunks: list[str] = []
    remaining = text.strip()

    while remaining:
        if len(remaining) <= max_chars:
            chunks.append(remaining)
            break

        split = _split_index(remaining, max_chars)
        chunks.append(remaining[: split + 1].strip())
        remaining = remaining[split + 1 :].strip()

    return [chunk for chunk in chunks if chunk]
