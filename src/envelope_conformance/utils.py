"""Utility functions for envelope-conformance.

Helpers for building and resolving JSON pointers (RFC 6901) over decoded
JSON documents.
"""

from typing import Any, Mapping, Sequence

MISSING = object()


def escape_token(token: Any) -> str:
    """Escapes a single reference token for use in a JSON pointer."""
    return str(token).replace("~", "~0").replace("/", "~1")


def join_pointer(base: str, *tokens: Any) -> str:
    """Appends reference tokens to an existing pointer.

    Args:
        base: The parent pointer ("" for the document root).
        *tokens: Keys or array indices to append.

    Returns:
        The extended pointer string.
    """
    return base + "".join(f"/{escape_token(t)}" for t in tokens)


def pointer(tokens: Sequence[Any]) -> str:
    """Builds a pointer from a sequence of keys and indices."""
    return join_pointer("", *tokens)


def resolve(document: Any, tokens: Sequence[str]) -> Any:
    """Walks `tokens` through nested mappings.

    Args:
        document: The decoded JSON document.
        tokens: Object keys to follow, outermost first.

    Returns:
        The value found at the end of the walk, or `MISSING` when any key
        along the way is absent or a non-object is met.
    """
    cur = document
    for token in tokens:
        if isinstance(cur, Mapping) and token in cur:
            cur = cur[token]
        else:
            return MISSING
    return cur
