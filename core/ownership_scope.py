# core/ownership_scope.py

"""
Ownership scope resolution.

Assignment edges are owned by other subsystems and read fresh on every
call; nothing here is cached between requests. An identity with no
assignments resolves to empty sets, never to "everything".
"""

from typing import FrozenSet, Iterable

from pydantic import BaseModel, ConfigDict

from core.decisions import OwnershipScope
from core.errors import store_errors
from core.logging_config import logger
from core.supabase_client import require_supabase_client
from models.enums import ScopeKind


class TenantFilter(BaseModel):
    """
    Tenants visible to an owner: those living in one of building_ids,
    plus those directly linked in tenant_ids. The two tests are OR'ed.
    """
    model_config = ConfigDict(frozen=True)

    building_ids: FrozenSet[int] = frozenset()
    tenant_ids: FrozenSet[int] = frozenset()


# ============================================================
# Low-level helpers
# ============================================================
def _column_set(table: str, column: str, match_column: str, values, operation: str) -> FrozenSet[int]:
    """
    SELECT column FROM table WHERE match_column = values (or IN values).
    An empty `values` collection short-circuits to an empty set.
    """
    if isinstance(values, (set, frozenset, list, tuple)):
        values = list(values)
        if not values:
            return frozenset()

    client = require_supabase_client()
    with store_errors(operation):
        query = client.table(table).select(column)
        if isinstance(values, list):
            query = query.in_(match_column, values)
        else:
            query = query.eq(match_column, values)
        res = query.execute()

    return frozenset(row[column] for row in (res.data or []) if row.get(column) is not None)


# ============================================================
# Direct assignments
# ============================================================
def resolve_owner_buildings(user_id: int) -> FrozenSet[int]:
    return _column_set(
        "building_assigned", "building_id", "user_id", user_id,
        "Failed to resolve owner buildings",
    )


def resolve_owner_villas(user_id: int) -> FrozenSet[int]:
    return _column_set(
        "villa_assigned", "villa_id", "user_id", user_id,
        "Failed to resolve owner villas",
    )


# ============================================================
# Derived scopes
# ============================================================
def apartments_in_buildings(building_ids: Iterable[int]) -> FrozenSet[int]:
    floor_ids = _column_set(
        "floors", "floor_id", "building_id", frozenset(building_ids),
        "Failed to resolve building floors",
    )
    return _column_set(
        "apartments", "apartment_id", "floor_id", floor_ids,
        "Failed to resolve floor apartments",
    )


def resolve_owner_apartments(user_id: int) -> FrozenSet[int]:
    return apartments_in_buildings(resolve_owner_buildings(user_id))


def resolve_tenant_filter(user_id: int) -> TenantFilter:
    """
    building_ids: the owner's buildings.
    tenant_ids: tenants linked to the owner directly (tenants.created_by).
    """
    return TenantFilter(
        building_ids=resolve_owner_buildings(user_id),
        tenant_ids=_column_set(
            "tenants", "tenant_id", "created_by", user_id,
            "Failed to resolve owner tenants",
        ),
    )


def resolve_visible_tenants(user_id: int) -> FrozenSet[int]:
    """Union of tenants housed in the owner's buildings and directly linked tenants."""
    tenant_filter = resolve_tenant_filter(user_id)

    housed = _column_set(
        "apartment_assigned", "tenant_id", "apartment_id",
        apartments_in_buildings(tenant_filter.building_ids),
        "Failed to resolve housed tenants",
    )
    return housed | tenant_filter.tenant_ids


# ============================================================
# Scope for one request
# ============================================================
def resolve_scope(user_id: int, kind: ScopeKind) -> OwnershipScope:
    """Resolve only the entity family the request touches."""
    kind = ScopeKind(kind)

    if kind == ScopeKind.buildings:
        scope = OwnershipScope(building_ids=resolve_owner_buildings(user_id))
    elif kind == ScopeKind.apartments:
        scope = OwnershipScope(apartment_ids=resolve_owner_apartments(user_id))
    elif kind == ScopeKind.villas:
        scope = OwnershipScope(villa_ids=resolve_owner_villas(user_id))
    else:
        scope = OwnershipScope(tenant_ids=resolve_visible_tenants(user_id))

    logger.info(f"Ownership scope for user {user_id} ({kind}): {len(scope.ids_for(kind))} ids")
    return scope
