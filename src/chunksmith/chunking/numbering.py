"""
Sequence numbering for multi-part messages.
"""

import re
from typing import List

_NUMBER_PREFIX_RE = re.compile(r"^\[(\d+)/(\d+)\] ")


def _prefix(index: int, total: int) -> str:
    return f"[{index}/{total}] "


def prefix_width(total: int) -> int:
    """Characters added to every chunk of a ``total``-part message."""
    return len(_prefix(total, total)) if total > 1 else 0


def _already_numbered(chunks: List[str]) -> bool:
    total = len(chunks)
    return all(
        chunk.startswith(_prefix(index, total))
        for index, chunk in enumerate(chunks, start=1)
    )


def number_chunks(chunks: List[str]) -> List[str]:
    """
    Prefix each chunk with ``[i/N] ``.

    A single chunk (or none) is returned unchanged, as is a list that already
    carries the correct prefixes, so numbering twice is the same as once.
    """
    if len(chunks) <= 1 or _already_numbered(chunks):
        return list(chunks)

    total = len(chunks)
    return [
        f"{_prefix(index, total)}{chunk}"
        for index, chunk in enumerate(chunks, start=1)
    ]


def strip_chunk_number(chunk: str) -> str:
    """Remove a leading ``[i/N] `` marker, if present."""
    return _NUMBER_PREFIX_RE.sub("", chunk, count=1)
