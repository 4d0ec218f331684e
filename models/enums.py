from enum import Enum


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# PERMISSION TYPE
# -----------------------------------------------------
class PermissionType(BaseStrEnum):
    """Actions a page can support. A page need not support all five."""

    view = "view"
    create = "create"
    update = "update"
    delete = "delete"
    assign = "assign"


# -----------------------------------------------------
# SCOPE KIND
# -----------------------------------------------------
class ScopeKind(BaseStrEnum):
    """Entity families narrowed by ownership assignments."""

    buildings = "buildings"
    apartments = "apartments"
    villas = "villas"
    tenants = "tenants"


# -----------------------------------------------------
# DENY REASON
# -----------------------------------------------------
class DenyReason(BaseStrEnum):
    """Why a decision came back DENY. Never exposed to clients."""

    no_grant_row = "no_grant_row"
    grant_not_granted = "grant_not_granted"
    page_not_found = "page_not_found"
    not_in_scope = "not_in_scope"
    store_unavailable = "store_unavailable"
