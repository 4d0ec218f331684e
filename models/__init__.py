# -------------------------
# Enums
# -------------------------
from .enums import (
    PermissionType,
    ScopeKind,
    DenyReason,
)

# -------------------------
# Page Models
# -------------------------
from .page import (
    Page,
    PageWrite,
    PagePermission,
    PageWithPermissions,
)

# -------------------------
# Grant Models
# -------------------------
from .grant import (
    RoleGrant,
    GrantEntry,
    PageGrants,
    BulkGrantRequest,
    PageGrantRequest,
    PermissionState,
    RolePagePermissions,
)

__all__ = [
    # enums
    "PermissionType",
    "ScopeKind",
    "DenyReason",

    # pages
    "Page",
    "PageWrite",
    "PagePermission",
    "PageWithPermissions",

    # grants
    "RoleGrant",
    "GrantEntry",
    "PageGrants",
    "BulkGrantRequest",
    "PageGrantRequest",
    "PermissionState",
    "RolePagePermissions",
]
