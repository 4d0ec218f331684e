# routers/buildings.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.authorization import AuthorizationContext, requires_page_permission
from core.errors import handle_supabase_error
from core.supabase_client import require_supabase_client
from models.enums import ScopeKind


router = APIRouter(
    prefix="/buildings",
    tags=["Buildings"]
)


def fetch_building(building_id: int) -> Optional[dict]:
    client = require_supabase_client()
    try:
        res = (
            client.table("buildings")
            .select("*")
            .eq("building_id", building_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch building", 500)

    return res.data[0] if res.data else None


# ============================================================
# LIST BUILDINGS
# ============================================================
@router.get(
    "",
    summary="List Buildings",
    description="""
    **Permissions:** Requires `view` on `/buildings`.
    **Filtering:** Ownership-scoped roles only see buildings assigned to
    them; no assignments returns an empty list.
    """,
)
def list_buildings(
    limit: int = Query(100, ge=1, le=1000),
    ctx: AuthorizationContext = Depends(
        requires_page_permission("/buildings", "view", ScopeKind.buildings)
    ),
):
    scoped_ids = ctx.scoped_ids(ScopeKind.buildings)
    if scoped_ids is not None and not scoped_ids:
        return {"success": True, "count": 0, "data": []}

    client = require_supabase_client()
    try:
        query = client.table("buildings").select("*").order("building_id").limit(limit)
        if scoped_ids is not None:
            query = query.in_("building_id", scoped_ids)
        res = query.execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch buildings", 500)

    data = ctx.filter_rows(ScopeKind.buildings, res.data or [], "building_id")
    return {"success": True, "count": len(data), "data": data}


# ============================================================
# GET BUILDING
# ============================================================
@router.get("/{building_id}", summary="Get Building")
def get_building(
    building_id: int,
    ctx: AuthorizationContext = Depends(
        requires_page_permission("/buildings", "view", ScopeKind.buildings)
    ),
):
    building = ctx.fetch_in_scope(ScopeKind.buildings, building_id, fetch_building)
    return {"success": True, "data": building}
