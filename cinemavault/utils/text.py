from __future__ import annotations

import re

_WHITESPACE_RE = re.compile(r"\s+")


def normalize_text(text: str | None) -> str:
    """Lowercase, trim and collapse runs of whitespace to a single space."""
    return _WHITESPACE_RE.sub(" ", (text or "").lower().strip())
