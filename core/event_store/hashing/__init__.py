"""
Custody Event Store — Hash-Chain Public API
==============================================
"""

from core.event_store.hashing.errors import (
    HashRejectionCode,
    HashViolatedRule,
)
from core.event_store.hashing.hasher import (
    GENESIS_HASH,
    canonical_serialize,
    compute_audit_event_hash,
    compute_event_hash,
    event_hash_material,
)
from core.event_store.hashing.verifier import verify_chain

__all__ = [
    "GENESIS_HASH",
    "canonical_serialize",
    "compute_event_hash",
    "compute_audit_event_hash",
    "event_hash_material",
    "verify_chain",
    "HashRejectionCode",
    "HashViolatedRule",
]
