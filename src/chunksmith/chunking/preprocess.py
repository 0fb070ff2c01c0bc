"""
Formatting fixes applied to a message before it is split.

Every pass only moves or inserts whitespace, so the visible content of the
message is unchanged. Failures are reported and the original text returned.
"""

import re
from typing import Iterable, Optional

from ..core.config import SETTINGS
from ..core.errors import ErrorReporter, report_error
from .boundaries import normalize_text

_LIST_GAP_RE = re.compile(r"^([ \t]*\d+\.[^\n]*)\n(?:[ \t]*\n)+(?=[ \t]*\d+\.)", re.M)
_LIST_MARKER_SPACE_RE = re.compile(r"^([ \t]*\d+\.)(?=[^\s\d])", re.M)
_GLUED_LIST_ITEM_RE = re.compile(r"(?<=[.!?:])[ \t]*(?=\d+\.[ \t]+\S)")


def url_start_pattern(known_domains: Optional[Iterable[str]] = None) -> str:
    """Regex source matching the start of a link token."""
    domains = SETTINGS.KNOWN_BARE_DOMAINS if known_domains is None else known_domains
    alternatives = [r"www\.", r"\[?https?://", r"\[?youtu\.?be"]
    escaped = [re.escape(domain) for domain in domains if domain]
    if escaped:
        alternatives.append(r"\[?(?:%s)" % "|".join(escaped))
    return "(?:%s)" % "|".join(alternatives)


def _collapse_list_gaps(text: str) -> str:
    # "1. X\n\n2. Y" -> "1. X\n2. Y"
    return _LIST_GAP_RE.sub(r"\1\n", text)


def _space_list_markers(text: str) -> str:
    # "1.X" -> "1. X"; "1.5" is a number and stays
    return _LIST_MARKER_SPACE_RE.sub(r"\1 ", text)


def _break_glued_list_items(text: str) -> str:
    # "Steps: 1. First" -> "Steps:\n1. First"; "Python3. It" is left alone
    return _GLUED_LIST_ITEM_RE.sub("\n", text)


def _join_url_lines(text: str, url_start: str) -> str:
    # "Check this out\nwww.example.com" -> "Check this out www.example.com"
    return re.sub(rf"(?<=\S)[ \t]*\n(?={url_start})", " ", text)


def _join_url_after_period(text: str, url_start: str) -> str:
    # "end.\n\nhttps://..." -> "end. https://..."
    return re.sub(rf"\.\s*\n(?={url_start})", ". ", text)


def preprocess_message(
    text: Optional[str],
    reporter: Optional[ErrorReporter] = None,
    known_domains: Optional[Iterable[str]] = None,
) -> Optional[str]:
    """
    Fix list and link formatting that would otherwise confuse the splitter.

    Args:
        text: Raw message text. ``None`` is returned unchanged.
        reporter: Error reporter for recovered failures.
        known_domains: Bare domains treated like links (defaults to
            ``SETTINGS.KNOWN_BARE_DOMAINS``).

    Returns:
        The processed text, or ``text`` itself if any pass failed.
    """
    if text is None:
        return text

    try:
        url_start = url_start_pattern(known_domains)

        processed = normalize_text(text)
        processed = _collapse_list_gaps(processed)
        processed = _space_list_markers(processed)
        processed = _break_glued_list_items(processed)
        processed = _join_url_lines(processed, url_start)
        processed = _join_url_after_period(processed, url_start)
        return processed
    except Exception as e:
        report_error(
            e,
            "preprocessing message",
            reporter,
            message_length=len(text) if isinstance(text, str) else 0,
        )
        return text
