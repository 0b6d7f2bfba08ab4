"""
Custody Core Transactions — Public API
=========================================
In-memory unit of work shared by the product store and the audit log.
"""

from core.transactions.memory import InMemoryTransactionManager

__all__ = [
    "InMemoryTransactionManager",
]
