"""Token estimate for the context a workspace injects.

Text (instructions, extracted file text) is counted exactly with the
supplied token counter.  Images without text are estimated from their pixel
count, approximating the tiling cost of vision models::

    tokens = min(ceil(width * height / 750), 1600)

Files with neither text nor image dimensions cannot be estimated; their
sizes are summed into ``unknown_bytes`` instead.

Everything here is pure: callers fetch the files, this module only does
arithmetic, so per-file estimates are independent and order does not matter.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Protocol

from chatspace.server.tokens import TokenCounter

PIXELS_PER_IMAGE_TOKEN = 750
MAX_IMAGE_TOKENS = 1600


class AccountableFile(Protocol):
    file_id: str
    type: str
    bytes: int
    width: int | None
    height: int | None
    text: str | None


@dataclass
class ContextUsage:
    instructions_tokens: int = 0
    files_tokens: int = 0
    file_tokens: dict[str, int] = field(default_factory=dict)
    unknown_bytes: int = 0

    @property
    def total_tokens(self) -> int:
        return self.instructions_tokens + self.files_tokens


def estimate_image_tokens(width: int, height: int) -> int:
    return min(math.ceil((width * height) / PIXELS_PER_IMAGE_TOKEN), MAX_IMAGE_TOKENS)


def estimate_file_tokens(file: AccountableFile, count_tokens: TokenCounter) -> int | None:
    """Token estimate for one file, or None when it cannot be estimated."""
    if file.text:
        return count_tokens(file.text)
    if file.type and file.type.startswith("image/") and file.width and file.height:
        return estimate_image_tokens(file.width, file.height)
    return None


def compute_context(
    instructions: str | None,
    files: list[AccountableFile],
    count_tokens: TokenCounter,
) -> ContextUsage:
    """Sum instruction and per-file token estimates.

    ``file_tokens`` only lists files with a positive estimate; files that
    cannot be estimated contribute their byte size to ``unknown_bytes`` and
    nothing to ``files_tokens``.
    """
    usage = ContextUsage()
    if instructions:
        usage.instructions_tokens = count_tokens(instructions)

    for file in files:
        tokens = estimate_file_tokens(file, count_tokens)
        if tokens is None:
            usage.unknown_bytes += file.bytes or 0
            continue
        if tokens > 0:
            usage.file_tokens[file.file_id] = tokens
            usage.files_tokens += tokens

    return usage
