# core/supabase_client.py

from supabase import create_client, Client, ClientOptions
from core.config import settings
from core.errors import StoreUnavailable, extract_supabase_error
from core.logging_config import logger


# ============================================================
# Supabase Client Factory (ALWAYS service role)
# ============================================================

def get_supabase_client() -> Client:
    """
    Creates a Supabase client using the SERVICE ROLE KEY.
    REQUIRED for:
        - reading the permission catalog and grant matrix
        - calling the grant-replace functions (rpc)
        - reading assignment tables owned by other subsystems

    Returns None when credentials are missing; authorization callers
    must treat that as an unavailable store.
    """
    try:
        supabase_url = settings.SUPABASE_URL
        supabase_key = settings.SUPABASE_SERVICE_ROLE_KEY  # MUST be service-role

        if not supabase_url or not supabase_key:
            logger.error("Missing Supabase credentials")
            logger.error(f"   URL: {supabase_url}")
            logger.error(f"   SERVICE ROLE KEY: {'SET' if supabase_key else 'MISSING'}")
            return None

        options = ClientOptions(
            postgrest_client_timeout=settings.AUTHZ_STORE_TIMEOUT_SECONDS,
        )
        return create_client(supabase_url, supabase_key, options=options)

    except Exception as e:
        logger.error(f"Supabase Init Error: {e}", exc_info=True)
        return None


# ============================================================
# Authorization store health
# ============================================================

# Every table the gate may read while deciding a request
AUTHZ_TABLES = (
    "sidebar_pages",
    "page_permissions",
    "role_page_permissions",
    "building_assigned",
    "villa_assigned",
    "floors",
    "apartments",
    "apartment_assigned",
    "tenants",
)


def check_authorization_store() -> dict:
    """
    Read one row from each table in AUTHZ_TABLES. While any of them
    fails, requests that need it are denied, so the store is reported
    as degraded rather than ok.
    """
    client = get_supabase_client()
    if client is None:
        return {"status": "not_configured", "tables": {}}

    tables = {}
    for name in AUTHZ_TABLES:
        try:
            client.table(name).select("*").limit(1).execute()
            tables[name] = "ok"
        except Exception as e:
            logger.error(f"Store check failed on {name}: {extract_supabase_error(e)}")
            tables[name] = "unavailable"

    healthy = all(state == "ok" for state in tables.values())
    return {"status": "ok" if healthy else "degraded", "tables": tables}


# ============================================================
# Fail-closed accessor for the authorization core
# ============================================================

def require_supabase_client() -> Client:
    """Like get_supabase_client(), but a missing client is a store failure."""
    client = get_supabase_client()
    if client is None:
        raise StoreUnavailable("Supabase client not configured")
    return client
