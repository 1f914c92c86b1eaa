"""Base-identifier derivation for near-duplicate detection.

A base identifier is the first N underscore-delimited tokens of an identifying
string. Identifiers with fewer than N tokens are returned unchanged so that they
form their own group instead of being padded or rejected.
"""

from __future__ import annotations

TOKEN_SEPARATOR = "_"


def count_tokens(identifier: str) -> int:
    """Return the number of underscore-delimited tokens in `identifier`."""
    return len(identifier.split(TOKEN_SEPARATOR))


def normalize_identifier(identifier: str, token_count: int) -> str:
    """Return the base identifier made of the first `token_count` tokens.

    Examples:
        ("msdos_PacMan_1983_A", 3) -> "msdos_PacMan_1983"
        ("Pitfall", 4) -> "Pitfall"
    """
    if not identifier or token_count <= 0:
        return identifier
    tokens = identifier.split(TOKEN_SEPARATOR)
    if len(tokens) >= token_count:
        return TOKEN_SEPARATOR.join(tokens[:token_count])
    return identifier
