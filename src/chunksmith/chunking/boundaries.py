"""
Boundary detection and splitting strategies for chunking.
"""

import re
from typing import List

TERMINAL_PUNCTUATION = ".!?…"

# Terminal punctuation, optionally closed by a quote or bracket
SENTENCE_END_RE = re.compile(r"[.!?…][\"'\])]?\Z")

_SENTENCE_SPLIT_RE = re.compile(r"(?<=[.!?…])\s+|(?<=[.!?…][\"'\])])\s+")
_PARAGRAPH_SPLIT_RE = re.compile(r"\n[ \t]*\n")
_LIST_MARKER_RE = re.compile(r"^\d+\.$")


def normalize_text(text: str) -> str:
    """Normalize line endings and squeeze runs of blank lines."""
    # Normalize line endings CRLF -> LF
    text = re.sub(r"\r\n?", "\n", text)
    # Remove any triple+ blank lines
    return re.sub(r"\n{3,}", "\n\n", text)


def ends_with_sentence(text: str) -> bool:
    """True when ``text`` ends with terminal punctuation."""
    return bool(SENTENCE_END_RE.search(text.rstrip()))


def split_by_paragraphs(text: str) -> List[str]:
    """Split text by paragraph boundaries."""
    # Split on blank lines (paragraph breaks)
    paragraphs = _PARAGRAPH_SPLIT_RE.split(text)
    return [p.strip() for p in paragraphs if p.strip()]


def split_by_lines(text: str) -> List[str]:
    """Split a paragraph into its lines, keeping list items whole."""
    return [line.rstrip() for line in text.split("\n") if line.strip()]


def split_by_sentences(text: str) -> List[str]:
    """Split text by sentence boundaries using simple heuristics."""
    sentences = [s.strip() for s in _SENTENCE_SPLIT_RE.split(text) if s.strip()]

    # "3." on its own is a list marker, not a sentence
    merged: List[str] = []
    pending = ""
    for sentence in sentences:
        if _LIST_MARKER_RE.match(sentence):
            pending = f"{pending} {sentence}".strip()
            continue
        merged.append(f"{pending} {sentence}".strip() if pending else sentence)
        pending = ""
    if pending:
        merged.append(pending)
    return merged


def split_by_words(text: str, max_length: int) -> List[str]:
    """Final fallback: greedy word packing, slicing words longer than the cap."""
    chunks = []
    current_words: List[str] = []
    current_length = 0

    for word in text.split():
        if len(word) > max_length:
            # Emit what we have, then hard-slice the oversized token
            if current_words:
                chunks.append(" ".join(current_words))
                current_words = []
                current_length = 0
            for start in range(0, len(word), max_length):
                chunks.append(word[start : start + max_length])
            continue

        added_length = current_length + len(word) + (1 if current_words else 0)
        if added_length > max_length and current_words:
            chunks.append(" ".join(current_words))
            current_words = [word]
            current_length = len(word)
        else:
            current_words.append(word)
            current_length = added_length

    # Add final chunk
    if current_words:
        chunks.append(" ".join(current_words))

    return chunks
