"""
Main chunking engine: layered length-bounded splitting plus the full
preprocess -> split -> repair -> validate -> number pipeline.
"""

from typing import Callable, List, NamedTuple, Optional, Tuple

from ..core.config import SETTINGS, effective_max_length
from ..core.errors import ChunkingConfigError, ErrorReporter, report_error
from ..core.logging import log
from .boundaries import split_by_lines, split_by_paragraphs, split_by_sentences, split_by_words
from .numbering import number_chunks, prefix_width
from .preprocess import preprocess_message
from .references import process_source_references
from .repair import fix_chunk_boundaries
from .urls import format_urls
from .verify import validate_chunk_boundaries


class Chunk(NamedTuple):
    """One delivered message segment."""

    ord: int
    text: str
    char_count: int


# (name, separator used to re-join units, splitter), coarsest first
_LAYERS: Tuple[Tuple[str, str, Callable[[str], List[str]]], ...] = (
    ("paragraph", "\n\n", split_by_paragraphs),
    ("line", "\n", split_by_lines),
    ("sentence", " ", split_by_sentences),
)


class _ChunkBuffer:
    """Greedy accumulator for the chunk currently being built."""

    def __init__(self, max_length: int):
        self.max_length = max_length
        self.chunks: List[str] = []
        self.current = ""

    def fits(self, unit: str, separator: str) -> bool:
        if not self.current:
            return len(unit) <= self.max_length
        return len(self.current) + len(separator) + len(unit) <= self.max_length

    def append(self, unit: str, separator: str) -> None:
        self.current = f"{self.current}{separator}{unit}" if self.current else unit

    def flush(self) -> None:
        text = self.current.strip()
        if text:
            self.chunks.append(text)
        self.current = ""


def _pack(buffer: _ChunkBuffer, text: str, depth: int) -> None:
    if depth == len(_LAYERS):
        # Last resort: word boundaries, then hard slices of oversized words
        for piece in split_by_words(text, buffer.max_length):
            if not buffer.fits(piece, " "):
                buffer.flush()
            buffer.append(piece, " ")
        return

    _, separator, splitter = _LAYERS[depth]
    for unit in splitter(text):
        if buffer.fits(unit, separator):
            buffer.append(unit, separator)
        elif len(unit) <= buffer.max_length:
            buffer.flush()
            buffer.append(unit, separator)
        else:
            buffer.flush()
            _pack(buffer, unit, depth + 1)


def split_message(text: str, max_length: int) -> List[str]:
    """
    Split text into chunks of at most ``max_length`` characters.

    Strategy order:
    1. Paragraphs (blank-line separated)
    2. Lines, so list items stay whole
    3. Sentences
    4. Words, slicing any single word longer than the cap

    Args:
        text: Text to split
        max_length: Hard ceiling for every chunk

    Returns:
        ``[text]`` unchanged when it already fits, otherwise stripped,
        non-empty chunks in source order.
    """
    if max_length <= 0:
        raise ChunkingConfigError(f"max_length must be positive, got {max_length}")

    if len(text) <= max_length:
        return [text]

    buffer = _ChunkBuffer(max_length)
    _pack(buffer, text, 0)
    buffer.flush()
    return buffer.chunks


def _fit_numbering(
    build: Callable[[int], List[str]], max_length: int, budget: int
) -> List[str]:
    """Rebuild with a smaller budget until every chunk still fits once numbered.

    A message of 100 or more parts needs a wider ``[i/N] `` prefix than the
    reserved overhead may allow; each retry shrinks the budget by the shortfall.
    """
    while True:
        chunks = build(budget)
        width = prefix_width(len(chunks))
        if budget + width <= max_length:
            return chunks
        log.debug("chunk.numbering.rebudget", chunk_count=len(chunks), prefix_width=width)
        budget = effective_max_length(max_length, width)


def chunk_message(
    text: Optional[str],
    max_length: Optional[int] = None,
    *,
    reporter: Optional[ErrorReporter] = None,
    format_references: Optional[bool] = None,
    format_links: Optional[bool] = None,
) -> List[str]:
    """
    Split a message for delivery through a transport with a length cap.

    Args:
        text: Message text. ``None`` and ``""`` yield ``[""]``.
        max_length: Transport limit (defaults to ``SETTINGS.MESSAGE_MAX_LENGTH``).
        reporter: Error reporter for recovered failures.
        format_references: Rewrite numbered source references as markdown
            links (defaults to ``SETTINGS.FORMAT_SOURCE_REFERENCES``).
        format_links: Tidy social, video and forum links and malformed
            markdown links (defaults to ``SETTINGS.FORMAT_URLS``).

    Returns:
        ``[text]`` when the message fits, otherwise ``[i/N]``-numbered chunks
        that each fit within ``max_length``, prefix included.

    Raises:
        ChunkingConfigError: ``max_length`` does not exceed the reserved
            overhead.
    """
    if max_length is None:
        max_length = SETTINGS.MESSAGE_MAX_LENGTH
    if format_references is None:
        format_references = SETTINGS.FORMAT_SOURCE_REFERENCES
    if format_links is None:
        format_links = SETTINGS.FORMAT_URLS

    safe_max_length = effective_max_length(max_length, SETTINGS.CHUNK_SAFE_OVERHEAD)

    if not text:
        return [""]
    if len(text) <= max_length:
        return [text]

    try:
        processed = preprocess_message(text, reporter=reporter)
        if format_references:
            processed = process_source_references(processed, reporter=reporter)
        if format_links:
            processed = format_urls(processed, reporter=reporter)

        def split_and_repair(budget: int) -> List[str]:
            parts = split_message(processed, budget)
            return fix_chunk_boundaries(parts, budget, reporter=reporter)

        chunks = _fit_numbering(split_and_repair, max_length, safe_max_length)

        if not validate_chunk_boundaries(chunks, reporter=reporter):
            log.warning("chunk.validate.failed", chunk_count=len(chunks))

        log.debug(
            "chunk.message.split",
            message_length=len(text),
            chunk_count=len(chunks),
            safe_max_length=safe_max_length,
        )
        # Whitespace-only input splits into nothing
        return number_chunks(chunks) or [""]
    except ChunkingConfigError:
        raise
    except Exception as e:
        report_error(
            e,
            "chunking message",
            reporter,
            message_length=len(text),
            max_length=max_length,
        )

    # Plain split without the formatting passes
    try:
        return number_chunks(
            _fit_numbering(lambda budget: split_message(text, budget), max_length, safe_max_length)
        )
    except ChunkingConfigError:
        raise
    except Exception as e:
        report_error(
            e,
            "chunking message fallback",
            reporter,
            message_length=len(text),
            max_length=max_length,
        )
        return [text]


def build_chunks(text: Optional[str], max_length: Optional[int] = None) -> List[Chunk]:
    """Chunk a message and wrap each part with its position and length."""
    return [
        Chunk(ord=index, text=part, char_count=len(part))
        for index, part in enumerate(chunk_message(text, max_length))
    ]
