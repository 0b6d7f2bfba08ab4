"""
Custody Engine — Registry Configuration
==========================================
The authority identity is configuration, fixed once at construction
and handed to the guard by reference. There is no setter.
"""

from __future__ import annotations

from dataclasses import dataclass

from core.identity.identities import is_null_identity

# Status of every product at registration.
INITIAL_STATUS = "Registered at Manufacturing"


@dataclass(frozen=True)
class RegistryConfig:
    """
    Fields:
        authority_id: The only identity allowed to register products.
                      It also becomes the first custodian of each product.
    """

    authority_id: str

    def __post_init__(self):
        if is_null_identity(self.authority_id):
            raise ValueError("authority_id must be a non-null identity.")


def load_registry_config(settings=None) -> RegistryConfig:
    """Build RegistryConfig from Django settings (CUSTODY_AUTHORITY_ID)."""
    if settings is None:
        from django.conf import settings

    authority_id = getattr(settings, "CUSTODY_AUTHORITY_ID", None)
    if not authority_id:
        raise ValueError(
            "CUSTODY_AUTHORITY_ID is not configured; the registry "
            "cannot start without a registering authority."
        )

    return RegistryConfig(authority_id=authority_id)
