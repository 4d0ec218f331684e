# routers/villas.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.authorization import AuthorizationContext, requires_page_permission
from core.errors import handle_supabase_error
from core.supabase_client import require_supabase_client
from models.enums import ScopeKind


router = APIRouter(
    prefix="/villas",
    tags=["Villas"],
)


def fetch_villa(villa_id: int) -> Optional[dict]:
    client = require_supabase_client()
    try:
        res = (
            client.table("villas")
            .select("*")
            .eq("villa_id", villa_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch villa", 500)

    return res.data[0] if res.data else None


@router.get("", summary="List Villas")
def list_villas(
    limit: int = Query(25, ge=1, le=1000),
    ctx: AuthorizationContext = Depends(
        requires_page_permission("/villas", "view", ScopeKind.villas)
    ),
):
    scoped_ids = ctx.scoped_ids(ScopeKind.villas)
    if scoped_ids is not None and not scoped_ids:
        return {"success": True, "count": 0, "data": []}

    client = require_supabase_client()
    try:
        query = client.table("villas").select("*").order("villa_id").limit(limit)
        if scoped_ids is not None:
            query = query.in_("villa_id", scoped_ids)
        res = query.execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch villas", 500)

    data = ctx.filter_rows(ScopeKind.villas, res.data or [], "villa_id")
    return {"success": True, "count": len(data), "data": data}


@router.get("/{villa_id}", summary="Get Villa")
def get_villa(
    villa_id: int,
    ctx: AuthorizationContext = Depends(
        requires_page_permission("/villas", "view", ScopeKind.villas)
    ),
):
    villa = ctx.fetch_in_scope(ScopeKind.villas, villa_id, fetch_villa)
    return {"success": True, "data": villa}
