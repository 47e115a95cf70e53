"""Word splitting shared by identifier derivation and structural checks."""

from __future__ import annotations

import re
from typing import List

_WORD_RE = re.compile(r"[A-Z]+(?![a-z])|[A-Z]?[a-z]+|[0-9]+")


def split_words(text: str) -> List[str]:
    """Lower-cased ASCII words of ``text``; every generated identifier is built from these."""
    return [word.lower() for word in _WORD_RE.findall(text)]


def identifier_key(text: str) -> str:
    """Casing-independent key: two names with the same key map to the same identifiers and paths."""
    return "_".join(split_words(text))


__all__ = ["identifier_key", "split_words"]
