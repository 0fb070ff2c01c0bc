"""
Boundary repair: move dangling fragments forward across chunk seams.
"""

from typing import Iterable, List, Optional, Sequence

from ..core.errors import ErrorReporter, report_error
from ..core.logging import log
from .rules import BoundaryRule, current_rules


class ChunkSequence:
    """Index-addressed working copy of a list of chunks.

    Repairs rewrite neighbouring slots in place; the caller's list is copied
    on construction and never touched.
    """

    def __init__(self, chunks: Iterable[str]):
        self._chunks: List[str] = list(chunks)

    def __len__(self) -> int:
        return len(self._chunks)

    def __getitem__(self, index: int) -> str:
        return self._chunks[index]

    def replace(self, index: int, text: str) -> None:
        self._chunks[index] = text

    def to_list(self) -> List[str]:
        return list(self._chunks)


def _repair_pair(
    sequence: ChunkSequence,
    index: int,
    safe_max_length: int,
    rules: Sequence[BoundaryRule],
) -> Optional[str]:
    current = sequence[index]
    following = sequence[index + 1]

    for rule in rules:
        if not rule.detect(current, following):
            continue
        repaired = rule.apply(current, following, safe_max_length)
        if repaired is None:
            # Detected but the fix would overflow or strand nothing; try the next rule
            continue
        sequence.replace(index, repaired[0])
        sequence.replace(index + 1, repaired[1])
        return rule.name
    return None


def fix_chunk_boundaries(
    chunks: Optional[List[str]],
    safe_max_length: int,
    rules: Optional[Sequence[BoundaryRule]] = None,
    reporter: Optional[ErrorReporter] = None,
) -> Optional[List[str]]:
    """
    Repair constructs split across adjacent chunks.

    Pairs are visited left to right; at most one rule is applied per pair, and
    a repaired chunk is seen by the next pair in its repaired form.

    Args:
        chunks: Chunk texts in order.
        safe_max_length: Upper bound for any chunk produced by a repair.
        rules: Ordered rule table (defaults to ``current_rules()``).
        reporter: Error reporter for recovered failures.

    Returns:
        A new list of chunks, or ``chunks`` itself if repair failed.
    """
    try:
        if rules is None:
            rules = current_rules()
        sequence = ChunkSequence(chunks)  # type: ignore[arg-type]
        for index in range(len(sequence) - 1):
            rule_name = _repair_pair(sequence, index, safe_max_length, rules)
            if rule_name:
                log.debug("chunk.boundary.repaired", rule=rule_name, chunk_index=index)
        return sequence.to_list()
    except Exception as e:
        report_error(
            e,
            "fixing chunk boundaries",
            reporter,
            chunk_count=len(chunks) if isinstance(chunks, list) else 0,
            safe_max_length=safe_max_length,
        )
        return chunks
