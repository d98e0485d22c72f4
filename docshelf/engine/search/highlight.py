"""Text helpers for building previews and highlighting matches."""

import html
import re

_TAG = re.compile(r"<[^>]*>")


def strip_html(markup: str) -> str:
    """Remove tags and decode entities, keeping line breaks."""
    if not markup:
        return ""
    return html.unescape(_TAG.sub("", markup)).strip()


def make_preview(text: str, length: int = 200) -> str:
    """First ``length`` characters of ``text``, with '...' if truncated."""
    if len(text) <= length:
        return text
    return text[:length] + "..."


def highlight(text: str, term: str, tag: str = "mark") -> str:
    """Wrap every case-insensitive occurrence of ``term`` in ``<tag>``.

    The matched text keeps its original casing.
    """
    if not term:
        return text
    pattern = re.compile(f"({re.escape(term)})", re.IGNORECASE)
    return pattern.sub(lambda m: f"<{tag}>{m.group(1)}</{tag}>", text)
