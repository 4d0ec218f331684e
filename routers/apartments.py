# routers/apartments.py

from typing import Optional

from fastapi import APIRouter, Depends, Query

from core.authorization import AuthorizationContext, requires_page_permission
from core.errors import handle_supabase_error
from core.supabase_client import require_supabase_client
from models.enums import ScopeKind


router = APIRouter(
    prefix="/apartments",
    tags=["Apartments"],
)

# Apartments have no sidebar page of their own; they are building
# contents and ride on the buildings page grant. Owners see only the
# apartments on floors of their assigned buildings.
APARTMENTS_PAGE = "/buildings"


def fetch_apartment(apartment_id: int) -> Optional[dict]:
    client = require_supabase_client()
    try:
        res = (
            client.table("apartments")
            .select("*")
            .eq("apartment_id", apartment_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch apartment", 500)

    return res.data[0] if res.data else None


@router.get("", summary="List Apartments")
def list_apartments(
    floor_id: Optional[int] = Query(None),
    limit: int = Query(25, ge=1, le=1000),
    ctx: AuthorizationContext = Depends(
        requires_page_permission(APARTMENTS_PAGE, "view", ScopeKind.apartments)
    ),
):
    scoped_ids = ctx.scoped_ids(ScopeKind.apartments)
    if scoped_ids is not None and not scoped_ids:
        return {"success": True, "count": 0, "data": []}

    client = require_supabase_client()
    try:
        query = client.table("apartments").select("*")
        if floor_id is not None:
            query = query.eq("floor_id", floor_id)
        if scoped_ids is not None:
            query = query.in_("apartment_id", scoped_ids)
        res = query.order("apartment_id").limit(limit).execute()
    except Exception as e:
        raise handle_supabase_error(e, "Failed to fetch apartments", 500)

    data = ctx.filter_rows(ScopeKind.apartments, res.data or [], "apartment_id")
    return {"success": True, "count": len(data), "data": data}


@router.get("/{apartment_id}", summary="Get Apartment")
def get_apartment(
    apartment_id: int,
    ctx: AuthorizationContext = Depends(
        requires_page_permission(APARTMENTS_PAGE, "view", ScopeKind.apartments)
    ),
):
    apartment = ctx.fetch_in_scope(ScopeKind.apartments, apartment_id, fetch_apartment)
    return {"success": True, "data": apartment}
