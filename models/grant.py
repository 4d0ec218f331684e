# models/grant.py

from typing import List, Optional
from pydantic import Field

from models.page import CamelModel


# -------------------------------------------------
# Flat grant row: (page, permission type) → granted
# -------------------------------------------------
class RoleGrant(CamelModel):
    page_id: int
    permission_type: str
    is_granted: bool = False


# -------------------------------------------------
# Request payloads
#
# page_id / permission_type stay optional here so that malformed
# entries reach the grant store's validation and are rejected there
# with a single error shape.
# -------------------------------------------------
class GrantEntry(CamelModel):
    permission_type: Optional[str] = None
    is_granted: bool = False


class PageGrants(CamelModel):
    page_id: Optional[int] = None
    permissions: List[GrantEntry] = Field(default_factory=list)


class BulkGrantRequest(CamelModel):
    page_permissions: List[PageGrants]


class PageGrantRequest(CamelModel):
    permissions: List[GrantEntry]


# -------------------------------------------------
# Role-editor matrix (grouped by page)
# -------------------------------------------------
class PermissionState(CamelModel):
    permission_type: str
    permission_name: Optional[str] = None
    is_granted: bool = False


class RolePagePermissions(CamelModel):
    page_id: int
    page_name: str
    permissions: List[PermissionState] = Field(default_factory=list)
