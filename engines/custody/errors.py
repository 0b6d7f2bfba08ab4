"""
Custody Engine — Errors
==========================
Exceptions for reads and for store-level safety nets.

Guard failures on register/transfer are NOT exceptions: they come
back as REJECTED outcomes with a RejectionReason. The exceptions here
cover reads (verify on an unknown id) and the store's own uniqueness
and existence checks, which only fire if a write slips past the
guards (e.g. a race between processes sharing one database).
"""

from core.commands.rejection import ReasonCode


class CustodyError(Exception):
    """Base error for the custody engine. Carries a ReasonCode."""

    code = "CUSTODY_ERROR"


class ProductNotFoundError(CustodyError):
    """No product is registered under this id."""

    code = ReasonCode.NOT_FOUND

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product '{product_id}' is not registered.")


class DuplicateProductError(CustodyError):
    """A product is already registered under this id."""

    code = ReasonCode.DUPLICATE_ID

    def __init__(self, product_id: str):
        self.product_id = product_id
        super().__init__(f"Product '{product_id}' is already registered.")


class HistoryReplayError(CustodyError):
    """Replayed events do not form a valid custody chain."""

    code = "HISTORY_REPLAY_ERROR"

    def __init__(self, product_id: str, sequence: int, message: str):
        self.product_id = product_id
        self.sequence = sequence
        super().__init__(
            f"Custody history of '{product_id}' is inconsistent at "
            f"event #{sequence}: {message}"
        )
