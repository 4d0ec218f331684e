# core/permission_resolver.py

from typing import Dict, List

from core.decisions import Allow, Decision, Deny
from core.errors import store_errors
from core.grant_store import get_grants_for_role, granted_pairs
from core.logging_config import logger
from core.permission_catalog import (
    get_page_by_url,
    list_active_pages,
    list_catalog_entries,
)
from core.roles import is_superuser_role
from core.supabase_client import require_supabase_client
from dependencies.auth import CurrentUser
from models.enums import DenyReason, PermissionType
from models.grant import PermissionState, RolePagePermissions
from models.page import Page


# -----------------------------------------------------
# Sidebar: pages the identity may see
# -----------------------------------------------------
def get_visible_pages(user: CurrentUser) -> List[Page]:
    """
    Admin sees every active page. Any other role sees the active pages
    it holds a granted 'view' row for, in display order.
    """
    pages = list_active_pages()
    if user.is_superuser:
        return pages

    viewable = {
        page_id
        for page_id, _ in granted_pairs(user.role_id, PermissionType.view.value)
    }
    return [page for page in pages if page.page_id in viewable]


# -----------------------------------------------------
# Single (page, action) check
# -----------------------------------------------------
def check_permission(user: CurrentUser, page_url: str, permission_type: str = PermissionType.view.value) -> Decision:
    """
    Admin bypass is checked first and cannot be overridden by any row.
    Unknown / inactive pages, missing rows and rows stored as not
    granted are all DENY, each with its own reason.
    """
    if user.is_superuser:
        return Allow()

    page = get_page_by_url(page_url)
    if page is None:
        return Deny(reason=DenyReason.page_not_found, detail=page_url)

    client = require_supabase_client()
    with store_errors("Failed to check page permission"):
        res = (
            client.table("role_page_permissions")
            .select("is_granted")
            .eq("role_id", user.role_id)
            .eq("page_id", page.page_id)
            .eq("permission_type", permission_type)
            .limit(1)
            .execute()
        )

    if not res.data:
        return Deny(reason=DenyReason.no_grant_row, detail=f"{page_url}:{permission_type}")
    if not res.data[0].get("is_granted"):
        return Deny(reason=DenyReason.grant_not_granted, detail=f"{page_url}:{permission_type}")
    return Allow()


def has_permission(user: CurrentUser, page_url: str, permission_type: str = PermissionType.view.value) -> bool:
    return bool(check_permission(user, page_url, permission_type))


# -----------------------------------------------------
# Role editor matrix
# -----------------------------------------------------
def get_role_page_permissions(role_id: int) -> List[RolePagePermissions]:
    """
    Every active page with every supported permission type and its
    grant state for the role. Pages without grants are still listed,
    all types ungranted. The admin role shows everything granted.
    """
    pages = list_active_pages()
    names = {
        (page_id, entry.permission_type): entry.permission_name
        for page_id, entries in list_catalog_entries(p.page_id for p in pages).items()
        for entry in entries
    }

    if is_superuser_role(role_id):
        grants = [(page_id, ptype, True) for (page_id, ptype) in names]
    else:
        grants = [(g.page_id, g.permission_type, g.is_granted) for g in get_grants_for_role(role_id)]

    grouped: Dict[int, RolePagePermissions] = {
        page.page_id: RolePagePermissions(page_id=page.page_id, page_name=page.page_name)
        for page in pages
    }
    for page_id, ptype, granted in grants:
        if page_id in grouped:
            grouped[page_id].permissions.append(
                PermissionState(
                    permission_type=ptype,
                    permission_name=names.get((page_id, ptype)),
                    is_granted=granted,
                )
            )

    return [grouped[page.page_id] for page in pages]


# -----------------------------------------------------
# Caller's effective permissions (page url → granted types)
# -----------------------------------------------------
def get_effective_permissions(user: CurrentUser) -> Dict[str, List[str]]:
    pages = list_active_pages()
    catalog = list_catalog_entries(p.page_id for p in pages)

    if user.is_superuser:
        return {
            page.page_url: [entry.permission_type for entry in catalog.get(page.page_id, [])]
            for page in pages
        }

    granted = granted_pairs(user.role_id)
    result = {}
    for page in pages:
        types = [
            entry.permission_type
            for entry in catalog.get(page.page_id, [])
            if (page.page_id, entry.permission_type) in granted
        ]
        if types:
            result[page.page_url] = types

    logger.debug(f"Effective permissions for user {user.user_id}: {len(result)} pages")
    return result
