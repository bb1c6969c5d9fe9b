"""
Pattern Compilation and HTML Highlighting

DESIGN DECISION: Compiling a user-typed pattern NEVER raises.
The search box is evaluated on every keystroke, so a pattern is often
half-typed and invalid ("(", "[a-"). An invalid pattern is reported back
as a CompileResult with an error and callers fall back to "no filter".

KNOWN QUIRK: highlighting escapes the text FIRST and matches against the
escaped text. A pattern for "&" therefore matches inside "&amp;", and the
matched entity is escaped again ("<mark>&amp;amp;</mark>"). This is the
long-standing display behaviour and is kept as-is.
"""

import re
from dataclasses import dataclass
from typing import Any, Optional

import structlog


logger = structlog.get_logger(__name__)

MARK_OPEN = "<mark>"
MARK_CLOSE = "</mark>"


@dataclass(frozen=True)
class CompileResult:
    """
    Either a compiled matcher or a compile error, never both.

    Both are None for an empty pattern (no active search).
    """
    matcher: Optional[re.Pattern] = None
    error: Optional[str] = None

    @property
    def active(self) -> bool:
        """True when there is a usable matcher."""
        return self.matcher is not None


def compile_pattern(pattern: Optional[str], case_insensitive: bool = True) -> CompileResult:
    """
    Compile a raw search pattern.

    Args:
        pattern: Untrusted regular expression typed by the user
        case_insensitive: Match regardless of letter case

    Returns:
        CompileResult with a matcher, or with an error message on bad syntax
    """
    if not pattern:
        return CompileResult()

    flags = re.IGNORECASE if case_insensitive else 0
    try:
        return CompileResult(matcher=re.compile(pattern, flags))
    except (re.error, OverflowError, RecursionError) as e:
        logger.debug("search_pattern_invalid", pattern=pattern, error=str(e))
        return CompileResult(error=str(e))


def escape_html(value: Any) -> str:
    """
    Escape &, <, > and " for safe insertion into HTML.

    None becomes "". Single quotes are left alone.
    """
    if value is None:
        return ""
    return (
        str(value)
        .replace("&", "&amp;")
        .replace("<", "&lt;")
        .replace(">", "&gt;")
        .replace('"', "&quot;")
    )


def highlight_html(text: Any, matcher: Optional[re.Pattern]) -> tuple[str, int]:
    """
    Escape text and wrap every match in <mark>.

    Matches are found left to right without overlap on the ESCAPED text.

    Returns:
        (markup, number_of_highlights)
    """
    escaped = escape_html(text)
    if matcher is None:
        return escaped, 0

    count = 0

    def _mark(match: re.Match) -> str:
        nonlocal count
        count += 1
        return f"{MARK_OPEN}{escape_html(match.group(0))}{MARK_CLOSE}"

    return matcher.sub(_mark, escaped), count
