"""
Link tidying for generated answers.

Models write links in many half-finished shapes: bare ``github.com/...``
paths, ``r/subreddit`` mentions, YouTube URLs on a line of their own, forum
URLs with a doubled ``.com`` or a stray space in the topic number, markdown
links missing their closing parenthesis. ``format_urls`` rewrites them into
complete links before the message is split.
"""

import re
from typing import Dict, Optional

from ..core.errors import ErrorReporter, report_error

# Not already inside a link, a path or a longer host name
_NOT_LINKED = r"(?<![(\[/\w.])"
_PATH = r"[^\s.,;!?()\[\]]+"

_REDDIT_RE = re.compile(rf"{_NOT_LINKED}(?:https?://)?(www\.)?(reddit\.com/r/{_PATH})", re.I)
_SUBREDDIT_RE = re.compile(rf"{_NOT_LINKED}(r/\w+)(?=[\s.,;!?]|$)", re.M)
_IMGUR_RE = re.compile(rf"{_NOT_LINKED}(?:https?://)?((?:www\.)?imgur\.com/[^\s()\[\]]+)", re.I)
_GITHUB_RE = re.compile(rf"{_NOT_LINKED}(?:https?://)?(www\.)?(github\.com/{_PATH})", re.I)
_TWITTER_RE = re.compile(
    rf"{_NOT_LINKED}(?:https?://)?(?:www\.)?((?:twitter|x)\.com/{_PATH})", re.I
)

_YOUTUBE_HEAD = r"(?:https?://(?:www\.)?youtube\.com|www\.youtube|youtube\.com)"
_YOUTUBE_ON_OWN_LINE_RE = re.compile(rf"\n(?={_YOUTUBE_HEAD})")
_YOUTUBE_BARE_RE = re.compile(
    r"(?<!\S)((?:https?://)?(?:www\.)?youtube\.com/watch\?v=[^\s&.,;!?]+"
    r"|(?:https?://)?youtu\.be/[^\s.,;!?]+)(?=[\s.,;!?]|$)"
)
_YOUTUBE_BRACKETED_RE = re.compile(
    r"\[((?:https?://)?(?:www\.)?youtube\.com/watch\?v=[^\s&\]]+[^\s\]]*"
    r"|(?:https?://)?youtu\.be/[^\s\]]+)\](?!\()"
)
_YOUTUBE_NO_SCHEME_RE = re.compile(r"\((?!https?://)(?=www\.youtube|youtube\.com)")

_UNCLOSED_LINK_RE = re.compile(r"\[([^\]\n]+)\]\((https?://[^\s)]+)(?=\s|$)", re.M)
_GLUED_BRACKET_RE = re.compile(r"\](?=[\w\[])")
_GLUED_AFTER_LINK_RE = re.compile(r"(\]\([^)\s]+\))(?=[\w\[])")
_PADDED_REFERENCE_RE = re.compile(r"\[\((\d+)\) \]\((https?://[^)]+)\)")
_DOUBLE_CLOSE_RE = re.compile(r"(\(https?://[^)\s]+\))\)")
_REPEATED_TARGET_RE = re.compile(r"\]\(([^)]+)\)\(([^)]+)\)")
_WRAPPED_CITATION_RE = re.compile(r"\(\[(\d+)\]\)\(([^)]+)\)")

_TOPIC_SPACE_RE = re.compile(r"topic=(\d+)\.\s+(\d+)")

# Forum host -> site name used for link labels
FORUM_SITES: Dict[str, str] = {"fractalsoftworks.com": "Starsector"}


def _with_scheme(url: str) -> str:
    return url if url.startswith("http") else "https://" + url


def format_social_links(text: str) -> str:
    """Wrap Reddit, Imgur, GitHub and Twitter/X links; link ``r/name`` mentions."""
    formatted = _REDDIT_RE.sub(
        lambda m: f"(https://{m.group(1) or ''}{m.group(2).lower()})", text
    )
    formatted = _SUBREDDIT_RE.sub(r"[Reddit: \1](https://reddit.com/\1)", formatted)
    formatted = _IMGUR_RE.sub(r"(https://\1)", formatted)
    formatted = _GITHUB_RE.sub(
        lambda m: f"(https://{m.group(1) or ''}{m.group(2).lower()})", formatted
    )
    return _TWITTER_RE.sub(r"(https://\1)", formatted)


def format_youtube_links(text: str) -> str:
    """Label YouTube links ``[YouTube Video](...)`` and pull them onto the prose line."""
    formatted = _YOUTUBE_ON_OWN_LINE_RE.sub(" ", text)
    formatted = _YOUTUBE_BARE_RE.sub(
        lambda m: f"[YouTube Video]({_with_scheme(m.group(1))})", formatted
    )
    formatted = _YOUTUBE_BRACKETED_RE.sub(
        lambda m: f"[YouTube Video]({_with_scheme(m.group(1))})", formatted
    )
    return _YOUTUBE_NO_SCHEME_RE.sub("(https://", formatted)


def format_forum_links(text: str, sites: Optional[Dict[str, str]] = None) -> str:
    """
    Repair and label links to known forum hosts.

    Args:
        text: Message text
        sites: Host to site name (defaults to ``FORUM_SITES``)

    Returns:
        Text with mangled host names repaired and topic links rewritten as
        ``[<site> Forum](https://<host>/forum/index.php?topic=n.m)``.
    """
    formatted = _TOPIC_SPACE_RE.sub(r"topic=\1.\2", text)

    for host, site in (FORUM_SITES if sites is None else sites).items():
        name, _, tld = host.rpartition(".")
        h, n, t = re.escape(host), re.escape(name), re.escape(tld)

        # "name.comcom", "name.com.com", "name.c\ncom", "https://name/.com"
        formatted = re.sub(rf"{h}(?:\.?{t})+(?!\w)", host, formatted)
        formatted = re.sub(rf"{n}\.{re.escape(tld[:1])}\s+{t}(?!\w)", host, formatted)
        formatted = re.sub(rf"(https?://){n}/\.{t}", rf"\g<1>{host}", formatted)

        topic = rf"{h}/forum/index\.php\?topic=(\d+)\.(\d+)"

        def forum_link(m: "re.Match[str]", host: str = host, site: str = site) -> str:
            return f"[{site} Forum](https://{host}/forum/index.php?topic={m.group(1)}.{m.group(2)})"

        formatted = re.sub(
            rf"\[(?:https?://)?(?:www\.)?{topic}\](?!\()", forum_link, formatted
        )
        formatted = re.sub(
            rf"\((?:www\.)?{topic}\)", lambda m: f"({forum_link(m)})", formatted
        )
        formatted = re.sub(
            rf"{_NOT_LINKED}(?:https?://)?(?:www\.)?{topic}", forum_link, formatted
        )
        formatted = re.sub(rf"\((?={h})", "(https://", formatted)
        formatted = re.sub(
            rf"\[{h}\](?!\()", f"[{site} Website](https://{host})", formatted
        )

    return formatted


def _drop_extra_close(line: str) -> str:
    # "[a](https://x))" loses one ")" only when the line has more ")" than "("
    if line.count(")") <= line.count("("):
        return line
    return _DOUBLE_CLOSE_RE.sub(r"\1", line)


def fix_link_formatting(text: str) -> str:
    """
    Repair malformed markdown links.

    - ``[a](https://x`` gets its closing parenthesis
    - ``[a][b]`` and ``[a](url)b`` get a separating space
    - ``[(1) ](url)`` loses the padding
    - ``[a](url))`` loses the unbalanced parenthesis
    - ``[a](url)(url)`` loses the repeated target
    - ``([1])(url)`` becomes ``[(Source 1)](url)``
    """
    formatted = _UNCLOSED_LINK_RE.sub(r"[\1](\2)", text)
    formatted = _GLUED_BRACKET_RE.sub("] ", formatted)
    formatted = _GLUED_AFTER_LINK_RE.sub(r"\1 ", formatted)
    formatted = _PADDED_REFERENCE_RE.sub(r"[(\1)](\2)", formatted)
    formatted = "\n".join(_drop_extra_close(line) for line in formatted.split("\n"))
    formatted = _REPEATED_TARGET_RE.sub(r"](\1)", formatted)
    return _WRAPPED_CITATION_RE.sub(r"[(Source \1)](\2)", formatted)


def format_urls(
    text: Optional[str], reporter: Optional[ErrorReporter] = None
) -> Optional[str]:
    """Apply every link pass, link repair last; the input is returned on failure."""
    try:
        formatted = format_social_links(text)  # type: ignore[arg-type]
        formatted = format_youtube_links(formatted)
        formatted = format_forum_links(formatted)
        return fix_link_formatting(formatted)
    except Exception as e:
        report_error(
            e,
            "formatting urls",
            reporter,
            text_length=len(text) if isinstance(text, str) else 0,
        )
        return text
