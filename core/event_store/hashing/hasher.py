"""
Custody Event Store — Hash Computation
=========================================
Computes event_hash using SHA-256.

Formula:
    event_hash = SHA256(canonical_json(material) + previous_event_hash)

    material = {"event_type", "sequence", "payload"}

Rules:
- Canonical JSON: sorted keys, no whitespace variability
- No salt, no randomness — determinism is mandatory
- First event uses GENESIS_HASH as previous_event_hash
- Same input ALWAYS produces same output

This module ONLY computes. It does not verify or persist.
"""

import hashlib
import json
from typing import Any

GENESIS_HASH = "GENESIS"


def canonical_serialize(payload: Any) -> str:
    """
    Deterministic JSON string for payload.

    Keys sorted at all levels, compact separators, ASCII only,
    str() for non-JSON types (UUID, datetime).
    """
    return json.dumps(
        payload,
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=True,
        default=str,
    )


def compute_event_hash(payload: Any, previous_event_hash: str) -> str:
    """64-character lowercase hex SHA-256 of payload chained to its predecessor."""
    canonical = canonical_serialize(payload)
    hash_input = canonical + previous_event_hash
    return hashlib.sha256(hash_input.encode("utf-8")).hexdigest()


def event_hash_material(event_type: str, sequence: int, payload: dict) -> dict:
    """
    What an event's hash covers. Binding the type and the sequence
    means a reordered or relabelled event breaks the chain too.
    """
    return {
        "event_type": event_type,
        "sequence": sequence,
        "payload": payload,
    }


def compute_audit_event_hash(
    *,
    event_type: str,
    sequence: int,
    payload: dict,
    previous_event_hash: str,
) -> str:
    return compute_event_hash(
        event_hash_material(event_type, sequence, payload),
        previous_event_hash,
    )
