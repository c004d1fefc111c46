"""Query-string helpers shared by the list operations."""

from __future__ import annotations

from collections.abc import Mapping


def paging_params(flags: Mapping[str, str]) -> dict[str, str | int]:
    """Translate ``--limit`` / ``--offset`` flags into query parameters.

    The values were already validated as non-negative integers during
    parameter extraction.
    """
    return {name: int(flags[name]) for name in ("limit", "offset") if flags.get(name)}
