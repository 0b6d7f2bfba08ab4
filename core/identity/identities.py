"""
Custody Identity — Party Identities
======================================
A party identity is an opaque, non-empty string (an account address,
a party key, a user id). The registry never interprets it beyond
equality and the null check below.

The null identity is the "nobody" value: custody may never be handed
to it. Three spellings are treated as null:
    - None
    - the empty or whitespace-only string
    - the zero address 0x0000000000000000000000000000000000000000
"""

from __future__ import annotations

from typing import Any

NULL_IDENTITY = "0x0000000000000000000000000000000000000000"


def is_null_identity(identity: Any) -> bool:
    """True if identity cannot hold custody."""
    if identity is None:
        return True
    if not isinstance(identity, str):
        return True
    text = identity.strip()
    if not text:
        return True
    return text.lower() == NULL_IDENTITY


def same_identity(left: Any, right: Any) -> bool:
    """
    Exact identity match. Null identities never match anything,
    including each other.
    """
    if is_null_identity(left) or is_null_identity(right):
        return False
    return left == right
