"""
Custody Event Store — Hash-Chain Errors
=========================================
Rejection codes for hash-chain integrity violations.
"""


class HashRejectionCode:
    HASH_CHAIN_BROKEN = "HASH_CHAIN_BROKEN"
    HASH_COMPUTATION_MISMATCH = "HASH_COMPUTATION_MISMATCH"


class HashViolatedRule:
    EVENT_HASH_CHAIN = "EVENT_HASH_CHAIN"
