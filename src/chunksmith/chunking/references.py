"""
Source reference handling.

Answers cite their sources as ``(1) https://...``, ``([1][https://...])`` and
similar ad hoc forms. Rewriting them into markdown links before splitting
keeps each citation a single token that the boundary rules recognise.
"""

import re
from typing import Dict, Optional

from ..core.errors import ErrorReporter, report_error

# (n) url, (n)(url), (n) (url)
_PAREN_REFERENCE_RE = re.compile(r"\((\d+)\)(?:\s*(?:\(|\s))?(https?://[^\s)]+)")
# ([n][url]) and ([n] url)
_BRACKET_REFERENCE_RE = re.compile(r"\(\[(\d+)\](?:\[([^\]]+)\]|\s*([^\s)]+))\)")
# ([n][url with the closing brackets lost
_BROKEN_REFERENCE_RE = re.compile(r"\(\[(\d+)\]\[([^\]\s]+)(?=$|\s)", re.M)


def _with_scheme(url: str) -> str:
    return url if url.startswith("http") else "https://" + url


def _link_label(number: str, url: str) -> str:
    if "youtube.com" in url or "youtu.be" in url:
        return "YouTube Video"
    return f"Source {number}"


def collect_source_references(text: str) -> Dict[str, str]:
    """
    Collect numbered source references and their URLs.

    Args:
        text: Message text

    Returns:
        Mapping of reference number (as a string) to absolute URL. Later
        occurrences of the same number win.
    """
    sources: Dict[str, str] = {}

    for match in _PAREN_REFERENCE_RE.finditer(text):
        sources[match.group(1)] = match.group(2)

    for match in _BRACKET_REFERENCE_RE.finditer(text):
        url = match.group(2) or match.group(3)
        if url:
            sources[match.group(1)] = _with_scheme(url.rstrip(")"))

    for match in _BROKEN_REFERENCE_RE.finditer(text):
        sources[match.group(1)] = _with_scheme(match.group(2))

    return sources


def format_source_references(text: str, source_map: Dict[str, str]) -> str:
    """Rewrite every known reference as a markdown link."""
    formatted = text

    for number, url in source_map.items():
        link = f"[({number})]({url})"
        num = re.escape(number)

        # ([n][url]), ([n] url) and the broken ([n][url form
        formatted = re.sub(
            rf"\(\[{num}\](?:[^)\n]*\)|\[[^\]\s]*(?=\s|$))",
            lambda _m: link,
            formatted,
            flags=re.M,
        )
        # (n) (url) / (n)(url) / (n) url
        formatted = re.sub(
            rf"\({num}\)(?:\s*\(https?://[^\s)]+\)|\s*https?://[^\s)]+)",
            lambda _m: link,
            formatted,
        )
        # Bare (n) not already inside a link
        formatted = re.sub(
            rf"(?<!\[)\({num}\)(?!\]\()",
            lambda _m: link,
            formatted,
        )
        # Citation [n]
        formatted = re.sub(
            rf"\[{num}\](?!\()",
            lambda _m: f"[{_link_label(number, url)}]({_with_scheme(url)})",
            formatted,
        )

    return formatted


def process_source_references(
    text: Optional[str], reporter: Optional[ErrorReporter] = None
) -> Optional[str]:
    """Collect then format source references; the input is returned on failure."""
    try:
        return format_source_references(text, collect_source_references(text))  # type: ignore[arg-type]
    except Exception as e:
        report_error(
            e,
            "processing source references",
            reporter,
            text_length=len(text) if isinstance(text, str) else 0,
        )
        return text
