# core/authorization.py

from typing import Callable, Iterable, List, Optional

from fastapi import Depends
from pydantic import BaseModel, ConfigDict

from core.decisions import Allow, Decision, Deny, OwnershipScope
from core.errors import ForbiddenError, NotFoundError, StoreUnavailable
from core.logging_config import logger
from core.ownership_scope import resolve_scope
from core.permission_resolver import check_permission
from dependencies.auth import CurrentUser, get_current_user
from models.enums import DenyReason, PermissionType, ScopeKind


# ============================================================
# AUTHORIZATION CONTEXT
# ============================================================
class AuthorizationContext(BaseModel):
    """
    Produced once per request by the gate and handed explicitly to the
    query functions that need it. scope=None means unrestricted.
    """
    model_config = ConfigDict(frozen=True)

    user: CurrentUser
    page_url: str
    permission_type: str
    scope: Optional[OwnershipScope] = None

    @property
    def is_unrestricted(self) -> bool:
        return self.scope is None

    def scoped_ids(self, kind: ScopeKind) -> Optional[List[int]]:
        """Ids to filter a list query by, or None when no filter applies."""
        if self.scope is None:
            return None
        return sorted(self.scope.ids_for(kind))

    def filter_rows(self, kind: ScopeKind, rows: Iterable[dict], key: str) -> List[dict]:
        rows = list(rows)
        if self.scope is None:
            return rows
        return self.scope.filter_rows(kind, rows, key)

    def require(self, kind: ScopeKind, entity_id: int) -> None:
        if self.scope is None or self.scope.contains(kind, entity_id):
            return
        _log_denial(
            self.user, self.page_url, self.permission_type,
            Deny(reason=DenyReason.not_in_scope, detail=f"{ScopeKind(kind).value}={entity_id}"),
        )
        self.scope.require(kind, entity_id)

    def fetch_in_scope(self, kind: ScopeKind, entity_id: int, fetch: Callable[[int], Optional[dict]]) -> dict:
        """
        Single-entity check: missing → NotFound, outside scope → Forbidden.
        """
        entity = fetch(entity_id)
        if entity is None:
            raise NotFoundError(f"{ScopeKind(kind).value[:-1].capitalize()} not found with id of {entity_id}")
        self.require(kind, entity_id)
        return entity


# ============================================================
# THE GATE
# ============================================================
def authorize(
    user: CurrentUser,
    page_url: str,
    permission_type: str = PermissionType.view.value,
    scope_kind: Optional[ScopeKind] = None,
) -> Decision:
    """
    1. admin → ALLOW, no scope
    2. no grant for (page_url, permission_type) → DENY
    3. ownership-scoped role on a scoped resource → ALLOW with the
       resolved id set (possibly empty)

    Any store failure along the way is a DENY.
    """
    if user.is_superuser:
        return Allow()

    try:
        decision = check_permission(user, page_url, permission_type)
        if not decision:
            return decision

        if scope_kind is None or not user.is_ownership_scoped:
            return Allow()

        return Allow(scope=resolve_scope(user.user_id, scope_kind))

    except StoreUnavailable as e:
        return Deny(reason=DenyReason.store_unavailable, detail=e.message)


def _log_denial(user: CurrentUser, page_url: str, permission_type: str, decision: Deny) -> None:
    logger.warning(
        f"DENY user={user.user_id} role={user.role} page={page_url} "
        f"permission={permission_type} reason={decision.reason} {decision.detail}".rstrip()
    )


def authorize_or_raise(
    user: CurrentUser,
    page_url: str,
    permission_type: str = PermissionType.view.value,
    scope_kind: Optional[ScopeKind] = None,
) -> AuthorizationContext:
    decision = authorize(user, page_url, permission_type, scope_kind)
    if not decision:
        _log_denial(user, page_url, permission_type, decision)
        raise ForbiddenError("Insufficient permission")

    return AuthorizationContext(
        user=user,
        page_url=page_url,
        permission_type=permission_type,
        scope=decision.scope,
    )


# -----------------------------------------------------
# FastAPI dependency wrapper
# -----------------------------------------------------
def requires_page_permission(
    page_url: str,
    permission_type: str = PermissionType.view.value,
    scope_kind: Optional[ScopeKind] = None,
):
    """
    Usage:
        @router.get("")
        def list_villas(ctx: AuthorizationContext = Depends(
            requires_page_permission("/villas", "view", ScopeKind.villas)
        )):
            ...
    """
    permission_type = PermissionType(permission_type).value
    scope_kind = ScopeKind(scope_kind) if scope_kind is not None else None

    def dependency(current_user: CurrentUser = Depends(get_current_user)) -> AuthorizationContext:
        return authorize_or_raise(current_user, page_url, permission_type, scope_kind)

    return dependency
