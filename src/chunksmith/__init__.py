"""
chunksmith: length-bounded message chunking with boundary repair.
"""

from .chunking import (
    Chunk,
    build_chunks,
    chunk_message,
    fix_chunk_boundaries,
    get_chunking_stats,
    preprocess_message,
    validate_chunk_boundaries,
)

__version__ = "0.1.0"

__all__ = [
    "Chunk",
    "__version__",
    "build_chunks",
    "chunk_message",
    "fix_chunk_boundaries",
    "get_chunking_stats",
    "preprocess_message",
    "validate_chunk_boundaries",
]
