# core/permission_catalog.py

from typing import Dict, Iterable, List, Optional

from core.errors import InvalidPagePayload, NotFoundError, is_unique_violation, store_errors
from core.logging_config import logger
from core.supabase_client import require_supabase_client
from models.page import Page, PagePermission, PageWithPermissions, PageWrite


PAGE_COLUMNS = "page_id, page_name, page_url, page_icon, display_order, description"
CATALOG_COLUMNS = "page_id, permission_type, permission_name, description"


# ============================================================
# READS
# ============================================================
def list_active_pages() -> List[Page]:
    """Active pages ordered by display_order. Empty catalog → []."""
    client = require_supabase_client()

    with store_errors("Failed to list sidebar pages"):
        res = (
            client.table("sidebar_pages")
            .select(PAGE_COLUMNS)
            .eq("is_active", True)
            .order("display_order")
            .execute()
        )

    return [Page(**row) for row in (res.data or [])]


def get_page(page_id: int) -> Optional[Page]:
    """Active page by id, or None for inactive / unknown ids."""
    client = require_supabase_client()

    with store_errors("Failed to fetch sidebar page"):
        res = (
            client.table("sidebar_pages")
            .select(PAGE_COLUMNS)
            .eq("page_id", page_id)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )

    return Page(**res.data[0]) if res.data else None


def get_page_by_url(page_url: str) -> Optional[Page]:
    client = require_supabase_client()

    with store_errors("Failed to resolve page url"):
        res = (
            client.table("sidebar_pages")
            .select(PAGE_COLUMNS)
            .eq("page_url", page_url)
            .eq("is_active", True)
            .limit(1)
            .execute()
        )

    return Page(**res.data[0]) if res.data else None


def list_catalog_entries(page_ids: Iterable[int]) -> Dict[int, List[PagePermission]]:
    """
    Supported permission types keyed by page id.
    Every requested page id is present in the result, possibly with [].
    """
    page_ids = list(page_ids)
    grouped: Dict[int, List[PagePermission]] = {pid: [] for pid in page_ids}
    if not page_ids:
        return grouped

    client = require_supabase_client()

    with store_errors("Failed to load page permission catalog"):
        res = (
            client.table("page_permissions")
            .select(CATALOG_COLUMNS)
            .in_("page_id", page_ids)
            .order("page_id")
            .order("permission_type")
            .execute()
        )

    for row in res.data or []:
        page_id = row["page_id"]
        if page_id in grouped:
            grouped[page_id].append(PagePermission(**row))

    return grouped


def list_pages_with_permissions() -> List[PageWithPermissions]:
    """
    Each active page once, with its catalog entries nested.

    Pages and catalog rows are fetched separately and grouped by page id
    so a page with several permission types is never repeated.
    """
    pages = list_active_pages()
    catalog = list_catalog_entries(p.page_id for p in pages)

    return [
        PageWithPermissions(**page.model_dump(), permissions=catalog.get(page.page_id, []))
        for page in pages
    ]


# ============================================================
# WRITES (admin management UI)
# ============================================================
def _check_url_available(page_url: str, page_id: Optional[int] = None) -> None:
    """
    page_url is unique across every page, deactivated ones included,
    so a soft-deleted page keeps its url reserved.
    """
    client = require_supabase_client()

    with store_errors("Failed to check page url"):
        res = (
            client.table("sidebar_pages")
            .select("page_id, is_active")
            .eq("page_url", page_url)
            .execute()
        )

    for row in res.data or []:
        if row["page_id"] == page_id:
            continue
        if row.get("is_active"):
            raise InvalidPagePayload(f"Page url {page_url} is already in use")
        raise InvalidPagePayload(f"Page url {page_url} belongs to a deactivated page")


def _write_page(operation: str, page_url: str, execute):
    """Run a page insert/update; a unique violation on page_url is a 400, anything else a store failure."""
    with store_errors(operation):
        try:
            return execute()
        except Exception as e:
            if is_unique_violation(e):
                raise InvalidPagePayload(f"Page url {page_url} is already in use") from e
            raise


def create_page(payload: PageWrite) -> Page:
    _check_url_available(payload.page_url)

    client = require_supabase_client()
    data = payload.model_dump()
    data["is_active"] = True

    res = _write_page(
        "Failed to create sidebar page",
        payload.page_url,
        lambda: client.table("sidebar_pages").insert(data).execute(),
    )

    if not res.data:
        raise NotFoundError("Inserted sidebar page not found")

    logger.info(f"Sidebar page created: {payload.page_url}")
    return Page(**res.data[0])


def update_page(page_id: int, payload: PageWrite) -> Page:
    """Replace the editable columns of an active page."""
    if get_page(page_id) is None:
        raise NotFoundError("Sidebar page not found")
    _check_url_available(payload.page_url, page_id)

    client = require_supabase_client()

    res = _write_page(
        "Failed to update sidebar page",
        payload.page_url,
        lambda: (
            client.table("sidebar_pages")
            .update(payload.model_dump())
            .eq("page_id", page_id)
            .eq("is_active", True)
            .execute()
        ),
    )

    if not res.data:
        raise NotFoundError("Sidebar page not found")

    logger.info(f"Sidebar page {page_id} updated")
    return Page(**res.data[0])


def deactivate_page(page_id: int) -> None:
    """
    Soft delete. Pages are never physically removed so existing
    role_page_permissions rows stay referentially valid.
    """
    if get_page(page_id) is None:
        raise NotFoundError("Sidebar page not found")

    client = require_supabase_client()

    with store_errors("Failed to deactivate sidebar page"):
        res = (
            client.table("sidebar_pages")
            .update({"is_active": False})
            .eq("page_id", page_id)
            .execute()
        )

    if not res.data:
        raise NotFoundError("Sidebar page not found")

    logger.info(f"Sidebar page {page_id} deactivated")
