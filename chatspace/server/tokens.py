"""Token counting for workspace instructions and file text.

The accountant only needs ``(text) -> int``; :class:`TiktokenCounter` is the
production implementation and tests substitute any callable.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Protocol

import tiktoken


class TokenCounter(Protocol):
    def __call__(self, text: str) -> int: ...


@lru_cache(maxsize=8)
def _get_encoding(name: str) -> tiktoken.Encoding:
    return tiktoken.get_encoding(name)


class TiktokenCounter:
    """Count tokens with a named tiktoken encoding (loaded once per process)."""

    def __init__(self, encoding_name: str = "o200k_base") -> None:
        self.encoding_name = encoding_name

    def __call__(self, text: str) -> int:
        if not text:
            return 0
        # User text may legitimately contain special-token strings.
        return len(_get_encoding(self.encoding_name).encode(text, disallowed_special=()))
