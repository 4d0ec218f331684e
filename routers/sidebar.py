# routers/sidebar.py

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from core import grant_store, permission_catalog
from core.authorization import authorize, requires_page_permission
from core.permission_resolver import (
    get_effective_permissions,
    get_role_page_permissions,
    get_visible_pages,
)
from dependencies.auth import CurrentUser, get_current_user
from models.enums import PermissionType
from models.grant import BulkGrantRequest, PageGrantRequest
from models.page import PageWrite


router = APIRouter(
    prefix="/sidebar",
    tags=["Sidebar & Permissions"],
)

PERMISSIONS_PAGE = "/permissions"


def _dump(items):
    return [item.model_dump(by_alias=True) for item in items]


# ============================================================
# CALLER'S OWN VIEW (any authenticated identity)
# ============================================================
@router.get(
    "/my-pages",
    summary="Sidebar pages visible to the caller",
)
def my_pages(current_user: CurrentUser = Depends(get_current_user)):
    pages = get_visible_pages(current_user)
    return {"success": True, "count": len(pages), "data": _dump(pages)}


@router.get(
    "/check-permission",
    summary="Check one page permission for the caller",
    description="""
    Returns `hasPermission` for (`pageUrl`, `permissionType`).
    Unknown pages and any store failure answer `false`.
    """,
)
def check_page_permission(
    page_url: Optional[str] = Query(None, alias="pageUrl"),
    permission_type: str = Query(PermissionType.view.value, alias="permissionType"),
    current_user: CurrentUser = Depends(get_current_user),
):
    if not page_url:
        raise HTTPException(400, "Page URL is required")
    if permission_type not in PermissionType.list():
        raise HTTPException(400, f"Unknown permission type '{permission_type}'")

    decision = authorize(current_user, page_url, permission_type)

    return {
        "success": True,
        "data": {
            "hasPermission": bool(decision),
            "pageUrl": page_url,
            "permissionType": permission_type,
            "userId": current_user.user_id,
        },
    }


@router.get(
    "/my-permissions",
    summary="Every page the caller holds permissions on, with the granted types",
)
def my_permissions(current_user: CurrentUser = Depends(get_current_user)):
    permissions = get_effective_permissions(current_user)
    return {"success": True, "count": len(permissions), "data": permissions}


# ============================================================
# MANAGEMENT VIEWS
# ============================================================
@router.get(
    "/pages",
    summary="List all active pages",
    dependencies=[Depends(requires_page_permission(PERMISSIONS_PAGE, "view"))],
)
def list_pages():
    pages = permission_catalog.list_active_pages()
    return {"success": True, "count": len(pages), "data": _dump(pages)}


@router.get(
    "/pages-with-permissions",
    summary="List active pages with their supported permission types",
    dependencies=[Depends(requires_page_permission(PERMISSIONS_PAGE, "view"))],
)
def list_pages_with_permissions():
    pages = permission_catalog.list_pages_with_permissions()
    return {"success": True, "count": len(pages), "data": _dump(pages)}


@router.get(
    "/role-permissions/{role_id}",
    summary="One role's grant state on every page",
    dependencies=[Depends(requires_page_permission(PERMISSIONS_PAGE, "view"))],
)
def role_permissions(role_id: int):
    matrix = get_role_page_permissions(role_id)
    return {"success": True, "count": len(matrix), "data": _dump(matrix)}


@router.put(
    "/role-permissions/{role_id}",
    summary="Replace all of a role's grants",
    dependencies=[Depends(requires_page_permission(PERMISSIONS_PAGE, "assign"))],
)
def replace_role_permissions(role_id: int, payload: BulkGrantRequest):
    stored = grant_store.replace_all_grants_for_role(role_id, payload.page_permissions)
    return {
        "success": True,
        "data": {"roleId": role_id, "granted": stored},
        "message": "Role permissions updated successfully",
    }


@router.put(
    "/role-permissions/{role_id}/pages/{page_id}",
    summary="Replace a role's grants on one page",
    dependencies=[Depends(requires_page_permission(PERMISSIONS_PAGE, "assign"))],
)
def replace_role_page_permissions(role_id: int, page_id: int, payload: PageGrantRequest):
    grants = grant_store.replace_grants_for_page(role_id, page_id, payload.permissions)
    return {
        "success": True,
        "data": _dump(grants),
        "message": "Role page permissions updated successfully",
    }


# ============================================================
# PAGE MANAGEMENT
# ============================================================
@router.post(
    "/pages",
    status_code=201,
    summary="Create a sidebar page",
    dependencies=[Depends(requires_page_permission(PERMISSIONS_PAGE, "create"))],
)
def create_page(payload: PageWrite):
    page = permission_catalog.create_page(payload)
    return {
        "success": True,
        "data": page.model_dump(by_alias=True),
        "message": "Sidebar page created successfully",
    }


@router.put(
    "/pages/{page_id}",
    summary="Update a sidebar page",
    dependencies=[Depends(requires_page_permission(PERMISSIONS_PAGE, "update"))],
)
def update_page(page_id: int, payload: PageWrite):
    page = permission_catalog.update_page(page_id, payload)
    return {
        "success": True,
        "data": page.model_dump(by_alias=True),
        "message": "Sidebar page updated successfully",
    }


@router.delete(
    "/pages/{page_id}",
    summary="Deactivate a sidebar page",
    dependencies=[Depends(requires_page_permission(PERMISSIONS_PAGE, "delete"))],
)
def delete_page(page_id: int):
    permission_catalog.deactivate_page(page_id)
    return {"success": True, "message": "Sidebar page deleted successfully"}
