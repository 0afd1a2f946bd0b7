"""Unicode normalization and byte rendering helpers."""

from __future__ import annotations

import unicodedata
from typing import Literal

NormalizationForm = Literal["NFC", "NFKC", "NFD", "NFKD", "none"]


def normalize_text(text: str, form: NormalizationForm = "none") -> str:
    """
    Normalize text before it is converted to bytes.

    Args:
        text: Text to normalize.
        form: Unicode normalization form, or "none" to pass text through.

    Returns:
        Normalized text.
    """
    if form == "none":
        return text
    return unicodedata.normalize(form, text)


def _escape_ctrl_chars(s: str) -> str:
    # control category codes vary (Cc, Cf, Cn ...) so check the first letter
    return "".join(
        f"\\u{ord(c):04x}" if unicodedata.category(c)[0] == "C" else c for c in s
    )


def render_bytes(b: bytes) -> str:
    """
    Decode bytes as UTF-8 for display and escape control characters.

    Invalid UTF-8 (e.g. a piece holding half of a multi-byte character) is
    replaced with U+FFFD.
    """
    return _escape_ctrl_chars(b.decode("utf-8", errors="replace"))
