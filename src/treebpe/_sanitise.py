"""
Utilities for converting element spans to displayable strings.
"""

from collections.abc import Hashable, Sequence
import unicodedata


def _escape_ctrl_chars(s: str) -> str:
    """Replace all Unicode control characters with their escape sequences."""
    cleaned = []
    for c in s:
        # control category codes vary: Cc, Cf, Cn etc.
        # so check via first character
        if unicodedata.category(c)[0] != "C":
            cleaned.append(c)
        else:
            cleaned.append(f"\\u{ord(c):04x}")
    return "".join(cleaned)


def render_span(span: Sequence[Hashable]) -> str:
    """
    Render a run of elements for the human-readable vocab file.

    Character spans are joined into one string; anything else is shown as
    the space separated ``repr`` of each element.
    """
    if all(isinstance(el, str) for el in span):
        return _escape_ctrl_chars("".join(span))
    return _escape_ctrl_chars(" ".join(repr(el) for el in span))
