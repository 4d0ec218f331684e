# core/grant_store.py

"""
Grant matrix store: the only mutation surface of the authorization core.

Replaces run as PostgreSQL functions (see sql/authorization_schema.sql)
called through Supabase rpc(). Each function body is one transaction:
the delete of the affected scope and the insert of the new rows commit
together or not at all, so a role is never observed half-updated and a
failed insert leaves the previous grants in place.
"""

from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from pydantic import ValidationError

from core.errors import InvalidGrantPayload, NotFoundError, store_errors
from core.logging_config import logger
from core.permission_catalog import get_page, list_active_pages, list_catalog_entries
from core.roles import is_superuser_role
from core.supabase_client import require_supabase_client
from models.enums import PermissionType
from models.grant import GrantEntry, PageGrants, RoleGrant


REPLACE_PAGE_FN = "replace_role_page_grants"
REPLACE_ALL_FN = "replace_role_grants"


# ============================================================
# READ
# ============================================================
def get_grants_for_role(role_id: int) -> List[RoleGrant]:
    """
    Every (active page, supported permission type) pair with the role's
    grant state. Pairs without a stored row come back is_granted=False.
    """
    pages = list_active_pages()
    catalog = list_catalog_entries(p.page_id for p in pages)

    client = require_supabase_client()
    with store_errors("Failed to load role grants"):
        res = (
            client.table("role_page_permissions")
            .select("page_id, permission_type, is_granted")
            .eq("role_id", role_id)
            .execute()
        )

    stored = {
        (row["page_id"], row["permission_type"]): bool(row["is_granted"])
        for row in (res.data or [])
    }

    grants = []
    for page in pages:
        for entry in catalog.get(page.page_id, []):
            key = (page.page_id, entry.permission_type)
            grants.append(
                RoleGrant(
                    page_id=page.page_id,
                    permission_type=entry.permission_type,
                    is_granted=stored.get(key, False),
                )
            )
    return grants


# ============================================================
# VALIDATION (runs before any write)
# ============================================================
def _check_role(role_id: Any) -> int:
    if not isinstance(role_id, int) or isinstance(role_id, bool) or role_id < 1:
        raise InvalidGrantPayload("A valid role id is required")
    if is_superuser_role(role_id):
        raise InvalidGrantPayload("Admin permissions are implicit and cannot be edited")
    return role_id


def _coerce(model, raw):
    if isinstance(raw, model):
        return raw
    try:
        return model.model_validate(raw)
    except ValidationError as e:
        raise InvalidGrantPayload(f"Malformed permission entry: {e.errors()[0]['msg']}")


def _normalize_entries(page_id: int, permissions: Iterable[Any]) -> List[Tuple[int, str, bool]]:
    rows = []
    for raw in permissions or []:
        entry = _coerce(GrantEntry, raw)
        if not entry.permission_type:
            raise InvalidGrantPayload(f"Permission type is required (page {page_id})")
        if entry.permission_type not in PermissionType.list():
            raise InvalidGrantPayload(f"Unknown permission type '{entry.permission_type}'")
        rows.append((page_id, entry.permission_type, entry.is_granted))
    return rows


def _check_against_catalog(rows: List[Tuple[int, str, bool]]) -> None:
    """Every (page, type) must be an active catalog entry; no duplicates."""
    if not rows:
        return

    seen: Set[Tuple[int, str]] = set()
    for page_id, permission_type, _ in rows:
        if (page_id, permission_type) in seen:
            raise InvalidGrantPayload(
                f"Duplicate permission '{permission_type}' for page {page_id}"
            )
        seen.add((page_id, permission_type))

    page_ids = {page_id for page_id, _ in seen}
    active_ids = {p.page_id for p in list_active_pages()}
    unknown = page_ids - active_ids
    if unknown:
        raise InvalidGrantPayload(
            f"Unknown or inactive page ids: {', '.join(str(i) for i in sorted(unknown))}"
        )

    catalog = list_catalog_entries(page_ids)
    for page_id, permission_type in seen:
        supported = {c.permission_type for c in catalog.get(page_id, [])}
        if permission_type not in supported:
            raise InvalidGrantPayload(
                f"Page {page_id} does not support permission '{permission_type}'"
            )


def validate_page_grants(role_id: Any, page_permissions: Iterable[Any]) -> List[Tuple[int, str, bool]]:
    """Normalize a bulk payload into (page_id, permission_type, is_granted) rows."""
    _check_role(role_id)
    if page_permissions is None or isinstance(page_permissions, (str, bytes, dict)):
        raise InvalidGrantPayload("Page permissions array is required")

    rows: List[Tuple[int, str, bool]] = []
    for raw in page_permissions:
        page = _coerce(PageGrants, raw)
        if page.page_id is None:
            raise InvalidGrantPayload("Page id is required for every entry")
        rows.extend(_normalize_entries(page.page_id, page.permissions))

    _check_against_catalog(rows)
    return rows


# ============================================================
# REPLACE (atomic)
# ============================================================
def _rpc(fn: str, params: Dict[str, Any], operation: str) -> None:
    client = require_supabase_client()
    with store_errors(operation):
        client.rpc(fn, params).execute()


def replace_grants_for_page(role_id: int, page_id: int, grants: Iterable[Any]) -> List[RoleGrant]:
    """
    Replace one role's grants on one page.

    Explicit is_granted=False rows are persisted as sent so the role
    editor reads back exactly what it saved.
    """
    _check_role(role_id)
    if get_page(page_id) is None:
        raise NotFoundError("Sidebar page not found")
    if grants is None or isinstance(grants, (str, bytes, dict)):
        raise InvalidGrantPayload("Permissions array is required")

    rows = _normalize_entries(page_id, grants)
    _check_against_catalog(rows)

    payload = [
        {"permission_type": permission_type, "is_granted": is_granted}
        for _, permission_type, is_granted in rows
    ]
    _rpc(
        REPLACE_PAGE_FN,
        {"p_role_id": role_id, "p_page_id": page_id, "p_grants": payload},
        f"Failed to replace grants for role {role_id} on page {page_id}",
    )

    logger.info(
        f"Grants replaced: role={role_id} page={page_id} rows={len(payload)} "
        f"granted={sum(1 for g in payload if g['is_granted'])}"
    )
    return [RoleGrant(page_id=p, permission_type=t, is_granted=g) for p, t, g in rows]


def replace_all_grants_for_role(role_id: int, page_permissions: Iterable[Any]) -> int:
    """
    Replace every grant of a role. Only granted entries are stored;
    absence of a row already means deny. Returns the stored row count.
    """
    rows = validate_page_grants(role_id, page_permissions)

    payload = [
        {"page_id": page_id, "permission_type": permission_type}
        for page_id, permission_type, is_granted in rows
        if is_granted
    ]
    _rpc(
        REPLACE_ALL_FN,
        {"p_role_id": role_id, "p_grants": payload},
        f"Failed to replace grants for role {role_id}",
    )

    logger.info(f"Grants replaced: role={role_id} scope=all pages granted={len(payload)}")
    return len(payload)


def granted_pairs(role_id: int, permission_type: Optional[str] = None) -> Set[Tuple[int, str]]:
    """(page_id, permission_type) pairs stored as granted for a role."""
    client = require_supabase_client()

    with store_errors("Failed to load role grants"):
        query = (
            client.table("role_page_permissions")
            .select("page_id, permission_type")
            .eq("role_id", role_id)
            .eq("is_granted", True)
        )
        if permission_type:
            query = query.eq("permission_type", permission_type)
        res = query.execute()

    return {(row["page_id"], row["permission_type"]) for row in (res.data or [])}
