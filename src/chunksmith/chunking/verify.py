"""
Chunk verification utilities: boundary validation and size statistics.
"""

import statistics
from typing import Any, Dict, List, Optional, Sequence

from ..core.errors import ErrorReporter, report_error
from ..core.logging import log
from .rules import BoundaryRule, current_rules

# Spread between longest and shortest chunk, as a fraction of the mean
BALANCE_SPREAD = 0.5


def validate_chunk_boundaries(
    chunks: Optional[List[str]],
    rules: Optional[Sequence[BoundaryRule]] = None,
    reporter: Optional[ErrorReporter] = None,
) -> bool:
    """
    Check that no chunk ends inside a construct any rule recognises.

    Rules marked ``exempt_last`` are not applied to the final chunk. The first
    violation found is logged at the rule's severity. ``rules`` defaults to
    ``current_rules()``.

    Returns:
        True when every boundary is clean; False on a violation or on any
        internal error.
    """
    try:
        if rules is None:
            rules = current_rules()
        last = len(chunks) - 1  # type: ignore[arg-type]
        for index, chunk in enumerate(chunks):  # type: ignore[arg-type]
            following = chunks[index + 1] if index < last else None  # type: ignore[index]
            for rule in rules:
                if index == last and rule.exempt_last:
                    continue
                if rule.detect(chunk, following):
                    getattr(log, rule.severity)(
                        "chunk.validate.violation",
                        rule=rule.name,
                        chunk_index=index,
                        chunk_tail=chunk[-50:],
                    )
                    return False
        return True
    except Exception as e:
        report_error(
            e,
            "validating chunk boundaries",
            reporter,
            chunk_count=len(chunks) if isinstance(chunks, list) else 0,
        )
        return False


def get_chunking_stats(chunks: Optional[List[str]]) -> Dict[str, Any]:
    """Length statistics for a list of chunks; zeros for empty or invalid input."""
    if (
        not isinstance(chunks, list)
        or not chunks
        or not all(isinstance(chunk, str) for chunk in chunks)
    ):
        return {
            "chunk_count": 0,
            "total_length": 0,
            "avg_chunk_length": 0,
            "median_chunk_length": 0,
            "max_chunk_length": 0,
            "min_chunk_length": 0,
            "is_balanced": False,
        }

    lengths = [len(chunk) for chunk in chunks]
    longest = max(lengths)
    shortest = min(lengths)
    mean = statistics.mean(lengths)

    return {
        "chunk_count": len(chunks),
        "total_length": sum(lengths),
        "avg_chunk_length": round(mean),
        "median_chunk_length": int(statistics.median(lengths)),
        "max_chunk_length": longest,
        "min_chunk_length": shortest,
        "is_balanced": longest - shortest < mean * BALANCE_SPREAD,
    }
