# core/decisions.py

from typing import FrozenSet, Iterable, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field

from core.errors import ForbiddenError
from models.enums import DenyReason, ScopeKind


# ============================================================
# OWNERSHIP SCOPE
# ============================================================
class OwnershipScope(BaseModel):
    """
    Entity ids an ownership-scoped identity may touch.

    A family left as None was not resolved for this request and is
    treated as empty. An empty set is a valid scope ("nothing assigned"),
    not an error.
    """
    model_config = ConfigDict(frozen=True)

    building_ids: Optional[FrozenSet[int]] = None
    apartment_ids: Optional[FrozenSet[int]] = None
    villa_ids: Optional[FrozenSet[int]] = None
    tenant_ids: Optional[FrozenSet[int]] = None

    def ids_for(self, kind: ScopeKind) -> FrozenSet[int]:
        ids = {
            ScopeKind.buildings: self.building_ids,
            ScopeKind.apartments: self.apartment_ids,
            ScopeKind.villas: self.villa_ids,
            ScopeKind.tenants: self.tenant_ids,
        }[ScopeKind(kind)]
        return ids or frozenset()

    def contains(self, kind: ScopeKind, entity_id: int) -> bool:
        return entity_id in self.ids_for(kind)

    def filter_rows(self, kind: ScopeKind, rows: Iterable[dict], key: str) -> List[dict]:
        allowed = self.ids_for(kind)
        return [row for row in rows if row.get(key) in allowed]

    def require(self, kind: ScopeKind, entity_id: int) -> None:
        if not self.contains(kind, entity_id):
            raise ForbiddenError(f"Access denied. You can only access your assigned {ScopeKind(kind).value}.")


# ============================================================
# DECISIONS
# ============================================================
class Allow(BaseModel):
    """scope=None means unrestricted."""
    model_config = ConfigDict(frozen=True)

    scope: Optional[OwnershipScope] = None

    def __bool__(self) -> bool:
        return True


class Deny(BaseModel):
    model_config = ConfigDict(frozen=True)

    reason: DenyReason
    detail: str = Field(default="")

    def __bool__(self) -> bool:
        return False


Decision = Union[Allow, Deny]
