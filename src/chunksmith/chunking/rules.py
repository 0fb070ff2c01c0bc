"""
Boundary rules: one declarative record per class of boundary violation.

The repair engine and the validator both walk the rule table in order
(sentence, url, domain, numbered-list, markdown-link). Adding a rule means
adding a record here; neither loop branches on rule names. Unless a table is
passed in, both use ``current_rules()``, built from the suffixes configured in
``SETTINGS`` at call time.
"""

import re
from dataclasses import dataclass
from functools import lru_cache
from typing import Iterable, Literal, Optional, Tuple

from ..core.config import SETTINGS

# "2." at a line start or after a sentence terminator, at the end of the text
_TRAILING_LIST_MARKER_RE = re.compile(r"(?:^|(?<=[.!?:])\s)[ \t]*\d+\.\Z", re.M)


@dataclass(frozen=True)
class BoundaryRule:
    """Detects and repairs one kind of construct split across two chunks.

    ``end_pattern`` is searched in the right-stripped current chunk; the rule
    fires when it matches, ``exclude_pattern`` does not, and ``start_pattern``
    (if any) matches the following chunk.

    ``split_pattern`` must define a ``dangling`` group. Each match is a
    candidate cut, tried right to left: everything from the start of
    ``dangling`` to the end of the chunk moves to the front of the next chunk,
    joined by ``separator``. A cut is rejected when it leaves nothing behind
    or when the kept part matches ``safe_reject``.
    """

    name: str
    end_pattern: re.Pattern[str]
    split_pattern: re.Pattern[str]
    separator: str = " "
    start_pattern: Optional[re.Pattern[str]] = None
    exclude_pattern: Optional[re.Pattern[str]] = None
    safe_reject: Optional[re.Pattern[str]] = None
    severity: Literal["debug", "warning"] = "debug"
    exempt_last: bool = True  # a trailing fragment in the final chunk is fine

    def __post_init__(self) -> None:
        if self.severity not in ("debug", "warning"):
            raise ValueError(f"rule {self.name!r}: unknown severity {self.severity!r}")

    def detect(self, current: str, following: Optional[str] = None) -> bool:
        tail = current.rstrip()
        if not self.end_pattern.search(tail):
            return False
        if self.exclude_pattern is not None and self.exclude_pattern.search(tail):
            return False
        if self.start_pattern is not None:
            if following is None or not self.start_pattern.search(following):
                return False
        return True

    def split(self, current: str) -> Optional[Tuple[str, str]]:
        """Return ``(safe, dangling)``, or None when no cut keeps anything."""
        tail = current.rstrip()
        for match in reversed(list(self.split_pattern.finditer(tail))):
            cut = match.start("dangling")
            safe = tail[:cut].strip()
            dangling = tail[cut:].strip()
            if not safe or not dangling:
                continue
            if self.safe_reject is not None and self.safe_reject.search(safe):
                continue
            return safe, dangling
        return None

    def apply(
        self, current: str, following: str, max_length: int
    ) -> Optional[Tuple[str, str]]:
        """Return the repaired pair, or None if the move would overflow."""
        parts = self.split(current)
        if parts is None:
            return None
        safe, dangling = parts
        merged = dangling + self.separator + following if following else dangling
        if len(merged) > max_length:
            return None
        return safe, merged


def build_rules(domain_suffixes: Optional[Iterable[str]] = None) -> Tuple[BoundaryRule, ...]:
    """Construct the ordered rule table."""
    if domain_suffixes is None:
        domain_suffixes = SETTINGS.SPLIT_DOMAIN_SUFFIXES
    suffixes = "|".join(re.escape(s) for s in domain_suffixes if s)
    # "com/forum ...", "org ..."; never matches when no suffixes are configured
    suffix_head = rf"(?:{suffixes})(?=[/\s]|\Z)" if suffixes else r"(?!)"

    sentence = BoundaryRule(
        name="sentence",
        end_pattern=re.compile(r"(?<![.!?…])(?<![.!?…][\"'\])])\Z"),
        split_pattern=re.compile(r"[.!?…][\"'\])]?\s+(?P<dangling>)(?=\S)"),
        # "2." ends a list marker, not a sentence
        safe_reject=_TRAILING_LIST_MARKER_RE,
        severity="debug",
    )
    url = BoundaryRule(
        name="url",
        # a URL closing its sentence ("... https://x.io/a.") is complete
        end_pattern=re.compile(r"https?://\S*(?<![.!?…])\Z"),
        split_pattern=re.compile(r"(?P<dangling>\S*https?://\S*)\Z"),
        # "https://example." + "com/..." is left to the domain rule
        start_pattern=re.compile(rf"\A(?!{suffix_head})"),
        severity="warning",
    )
    domain = BoundaryRule(
        name="domain",
        end_pattern=re.compile(r"\.\S*\Z"),
        split_pattern=re.compile(r"(?P<dangling>\S+)\Z"),
        separator="",
        start_pattern=re.compile(rf"\A{suffix_head}"),
        severity="warning",
    )
    numbered_list = BoundaryRule(
        name="numbered_list",
        end_pattern=_TRAILING_LIST_MARKER_RE,
        split_pattern=re.compile(r"(?:^|(?<=[.!?:])\s)[ \t]*(?P<dangling>\d+\.)\Z", re.M),
        severity="warning",
    )
    markdown_link = BoundaryRule(
        name="markdown_link",
        end_pattern=re.compile(r"\[[^\]]*\Z|\[[^\[\]]*\]\Z|\([^)]*\Z"),
        split_pattern=re.compile(
            r"(?P<dangling>\[[^\[\]]*\](?:\([^)]*)?|\[[^\]]*|\([^)]*)\Z"
        ),
        # [3] at the end of a chunk is a citation, not half a link
        exclude_pattern=re.compile(r"\[\d+\]\Z"),
        severity="debug",
        exempt_last=False,
    )
    return (sentence, url, domain, numbered_list, markdown_link)


@lru_cache(maxsize=8)
def _rules_for(domain_suffixes: Tuple[str, ...]) -> Tuple[BoundaryRule, ...]:
    return build_rules(domain_suffixes)


def current_rules() -> Tuple[BoundaryRule, ...]:
    """Rule table for the split-domain suffixes configured right now."""
    return _rules_for(tuple(SETTINGS.SPLIT_DOMAIN_SUFFIXES))


# Table for the default suffixes, fixed at import
DEFAULT_RULES: Tuple[BoundaryRule, ...] = build_rules()
