"""
Message chunking for length-capped transports.

This package provides:
- Formatting fixes for lists and links before splitting
- Layered splitting (paragraphs, lines, sentences, words) under a hard cap
- Table-driven repair of sentences, URLs, domains, list markers and
  markdown links split across chunk boundaries
- Optional rewriting of source references and social, video and forum links
- Boundary validation, size statistics and [i/N] numbering
"""

from .boundaries import (
    normalize_text,
    split_by_lines,
    split_by_paragraphs,
    split_by_sentences,
    split_by_words,
)
from .engine import Chunk, build_chunks, chunk_message, split_message
from .numbering import number_chunks, strip_chunk_number
from .preprocess import preprocess_message
from .references import (
    collect_source_references,
    format_source_references,
    process_source_references,
)
from .repair import ChunkSequence, fix_chunk_boundaries
from .rules import DEFAULT_RULES, BoundaryRule, build_rules, current_rules
from .urls import fix_link_formatting, format_urls
from .verify import get_chunking_stats, validate_chunk_boundaries

__all__ = [
    "BoundaryRule",
    "Chunk",
    "ChunkSequence",
    "DEFAULT_RULES",
    "build_chunks",
    "build_rules",
    "chunk_message",
    "collect_source_references",
    "current_rules",
    "fix_link_formatting",
    "fix_chunk_boundaries",
    "format_source_references",
    "format_urls",
    "get_chunking_stats",
    "normalize_text",
    "number_chunks",
    "preprocess_message",
    "process_source_references",
    "split_by_lines",
    "split_by_paragraphs",
    "split_by_sentences",
    "split_by_words",
    "split_message",
    "strip_chunk_number",
    "validate_chunk_boundaries",
]
