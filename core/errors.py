# core/errors.py

from contextlib import contextmanager

from fastapi import HTTPException


# ============================================================
# Authorization taxonomy
# ============================================================
class AuthorizationError(Exception):
    """Base class for errors raised by the authorization core."""

    status_code = 500
    default_message = "Authorization error"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)


class NotFoundError(AuthorizationError):
    """Referenced page / role / entity does not exist or is inactive."""

    status_code = 404
    default_message = "Resource not found"


class ForbiddenError(AuthorizationError):
    """Identity is authenticated but lacks the grant or the ownership edge."""

    status_code = 403
    default_message = "Insufficient permission"


class InvalidGrantPayload(AuthorizationError):
    """Grant payload is malformed. Raised before any write is attempted."""

    status_code = 422
    default_message = "Invalid grant payload"


class InvalidPagePayload(AuthorizationError):
    """Page write rejected: the url is already taken by another page."""

    status_code = 400
    default_message = "Invalid page payload"


class StoreUnavailable(AuthorizationError):
    """Persistence failed during a check or a replace."""

    status_code = 503
    default_message = "Authorization store unavailable"


# ============================================================
# Supabase error helpers
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1: PostgREST APIError / GoTrue errors
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2: errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3: Plain string fallback
    return str(error) or "Unknown Supabase error"


def is_unique_violation(error: Exception) -> bool:
    """True for Postgres unique-constraint violations (SQLSTATE 23505)."""
    if getattr(error, "code", None) == "23505":
        return True
    detail = extract_supabase_error(error).lower()
    return "duplicate" in detail or "unique" in detail


def handle_supabase_error(error: Exception, operation: str = "Database operation", status_code: int = 500) -> HTTPException:
    """
    Handle Supabase errors with consistent formatting.
    Returns HTTPException (doesn't raise) so caller can customize or re-raise.

    Args:
        error: The exception that occurred
        operation: Description of what operation failed (e.g., "Failed to fetch villas")
        status_code: HTTP status code (default 500)

    Returns:
        HTTPException with standardized error message
    """
    from core.logging_config import logger

    error_detail = extract_supabase_error(error)
    logger.error(f"{operation}: {error_detail}")

    # Provide user-friendly messages for common errors
    error_lower = error_detail.lower()
    if is_unique_violation(error):
        return HTTPException(status_code=400, detail=f"{operation}: Record already exists")
    elif "foreign key" in error_lower or "violates foreign key" in error_lower:
        return HTTPException(status_code=400, detail=f"{operation}: Invalid reference")
    elif "not found" in error_lower or "does not exist" in error_lower:
        return HTTPException(status_code=404, detail=f"{operation}: Resource not found")
    else:
        return HTTPException(status_code=status_code, detail=f"{operation} failed")


@contextmanager
def store_errors(operation: str):
    """
    Convert any persistence exception raised inside the block into
    StoreUnavailable. Taxonomy errors pass through untouched.

    Usage:
        with store_errors("Failed to load grants"):
            res = client.table("role_page_permissions").select("*").execute()
    """
    from core.logging_config import logger

    try:
        yield
    except AuthorizationError:
        raise
    except Exception as e:
        logger.error(f"{operation}: {extract_supabase_error(e)}")
        raise StoreUnavailable(f"{operation}: store unavailable") from e
