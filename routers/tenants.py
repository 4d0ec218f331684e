# routers/tenants.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.authorization import AuthorizationContext, requires_page_permission
from core.errors import handle_supabase_error
from core.supabase_client import require_supabase_client
from models.enums import ScopeKind


router = APIRouter(
    prefix="/tenants",
    tags=["Tenants"],
)


def fetch_tenant(tenant_id: int) -> Optional[dict]:
    client = require_supabase_client()
    try:
        res = (
            client.table("tenants")
            .select("*")
            .eq("tenant_id", tenant_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch tenant", 500)

    return res.data[0] if res.data else None


# -------------------------------------------------------------
# Owners see tenants housed in their buildings OR linked to them
# directly; the scope already holds that union.
# -------------------------------------------------------------
@router.get("", summary="List Tenants")
def list_tenants(
    limit: int = Query(100, ge=1, le=1000),
    ctx: AuthorizationContext = Depends(
        requires_page_permission("/tenants", "view", ScopeKind.tenants)
    ),
):
    scoped_ids = ctx.scoped_ids(ScopeKind.tenants)
    if scoped_ids is not None and not scoped_ids:
        return {"success": True, "count": 0, "data": []}

    client = require_supabase_client()
    try:
        query = client.table("tenants").select("*").order("tenant_id").limit(limit)
        if scoped_ids is not None:
            query = query.in_("tenant_id", scoped_ids)
        res = query.execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch tenants", 500)

    data = ctx.filter_rows(ScopeKind.tenants, res.data or [], "tenant_id")
    return {"success": True, "count": len(data), "data": data}


@router.get("/{tenant_id}", summary="Get Tenant")
def get_tenant(
    tenant_id: int,
    ctx: AuthorizationContext = Depends(
        requires_page_permission("/tenants", "view", ScopeKind.tenants)
    ),
):
    tenant = ctx.fetch_in_scope(ScopeKind.tenants, tenant_id, fetch_tenant)
    return {"success": True, "data": tenant}
