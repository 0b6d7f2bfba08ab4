"""
Custody Identity - Public API
=============================
Party identity helpers shared by guards and services.
"""

from core.identity.identities import (
    NULL_IDENTITY,
    is_null_identity,
    same_identity,
)

__all__ = [
    "NULL_IDENTITY",
    "is_null_identity",
    "same_identity",
]
