# core/roles.py

from enum import IntEnum

from core.config import settings


# ============================================================
# ROLE IDENTITIES
# ============================================================
class Role(IntEnum):
    """
    Role ids as stored by the identity provider.

    Only ADMIN bypasses the grant matrix. Every other id, including ids
    not listed here, is resolved through role_page_permissions.
    """

    ADMIN = 1
    SUPER_ADMIN = 2
    MANAGER = 3
    STAFF = 4
    OWNER = 5
    TENANT = 6


ADMIN_ROLE_ID = int(Role.ADMIN)


def is_superuser_role(role_id: int) -> bool:
    return role_id == ADMIN_ROLE_ID


def is_ownership_scoped_role(role_id: int) -> bool:
    """Roles narrowed to the buildings, villas and tenants assigned to them."""
    if is_superuser_role(role_id):
        return False
    return role_id in settings.OWNERSHIP_SCOPED_ROLE_IDS


def role_name(role_id: int) -> str:
    try:
        return Role(role_id).name.lower()
    except ValueError:
        return f"role_{role_id}"
