"""
Manual smoke runner for the custody registry.

Walks one product from the manufacturer to a distributor to a
consumer on an in-memory registry, then prints the verification
result, the replayed history and the log integrity check.

Usage:
    python scripts/smoke_custody_flow.py
    python scripts/smoke_custody_flow.py --product-id SKU-42 --verbose
"""

from __future__ import annotations

import argparse
import json
import logging

from engines.custody.config import RegistryConfig
from engines.custody.wiring import build_in_memory_registry


DEV_MANUFACTURER = "did:custody:manufacturer"
DEV_DISTRIBUTOR = "did:custody:distributor"
DEV_CONSUMER = "did:custody:consumer"


def _print_case(label: str, payload: dict) -> None:
    print(f"\n[{label}]")
    print(json.dumps(payload, indent=2, sort_keys=True, default=str))


def _outcome(result) -> dict:
    if result.is_accepted:
        return {"status": "ACCEPTED", "sequence": result.execution_result.event.sequence}
    return {"status": "REJECTED", "reason": result.reason.to_dict()}


def run(product_id: str) -> None:
    registry = build_in_memory_registry(
        RegistryConfig(authority_id=DEV_MANUFACTURER)
    )

    _print_case("register", _outcome(registry.register(
        DEV_MANUFACTURER, product_id, f"ipfs://{product_id}"
    )))
    _print_case("register duplicate", _outcome(registry.register(
        DEV_MANUFACTURER, product_id, f"ipfs://{product_id}"
    )))
    _print_case("transfer to distributor", _outcome(registry.transfer(
        DEV_MANUFACTURER, product_id, "In Transit", DEV_DISTRIBUTOR
    )))
    _print_case("transfer by former owner", _outcome(registry.transfer(
        DEV_MANUFACTURER, product_id, "Hijacked", DEV_MANUFACTURER
    )))
    _print_case("transfer to consumer", _outcome(registry.transfer(
        DEV_DISTRIBUTOR, product_id, "Sold", DEV_CONSUMER
    )))

    result = registry.verify(product_id)
    _print_case("verify", {
        "is_genuine": result.is_genuine,
        "status": result.status,
        "current_owner": result.current_owner,
        "details_uri": result.details_uri,
        "registration_timestamp": result.registration_timestamp.isoformat(),
    })
    _print_case("history", {
        "steps": [
            {"sequence": s.sequence, "owner": s.owner, "status": s.status}
            for s in registry.history(product_id)
        ],
    })

    integrity = registry.verify_log_integrity()
    _print_case("log integrity", {
        "accepted": integrity.accepted,
        "checked": integrity.checked,
    })


def main() -> None:
    parser = argparse.ArgumentParser(description="Custody registry smoke runner.")
    parser.add_argument("--product-id", default="SKU-0001")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )
    run(args.product_id)


if __name__ == "__main__":
    main()
