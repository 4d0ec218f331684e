from typing import Optional
from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import JWTError, jwt
from pydantic import BaseModel, computed_field

from core.config import settings
from core.roles import is_ownership_scoped_role, is_superuser_role, role_name


bearer_scheme = HTTPBearer()


# ============================================================
# Current User Model (request identity)
# ============================================================
class CurrentUser(BaseModel):
    user_id: int
    role_id: int
    email: Optional[str] = None
    full_name: Optional[str] = None

    # Capability flags, resolved once when the identity is loaded.
    # Call sites read these instead of comparing role ids.
    @computed_field
    @property
    def is_superuser(self) -> bool:
        return is_superuser_role(self.role_id)

    @computed_field
    @property
    def is_ownership_scoped(self) -> bool:
        return is_ownership_scoped_role(self.role_id)

    @property
    def role(self) -> str:
        return role_name(self.role_id)


def _coerce_int(value) -> Optional[int]:
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def user_from_claims(claims: dict) -> Optional[CurrentUser]:
    """
    Build the identity from a decoded Supabase access token.

    `sub` is the Supabase auth uid (a UUID) and is not used here: the
    numeric application user id and role id live in user_metadata,
    which is where assignment edges and grants point.
    """
    metadata = claims.get("user_metadata") or {}

    user_id = _coerce_int(metadata.get("user_id"))
    if user_id is None:
        return None

    role_id = _coerce_int(metadata.get("role_id"))
    if role_id is None or role_id < 1:
        role_id = settings.DEFAULT_ROLE_ID

    return CurrentUser(
        user_id=user_id,
        role_id=role_id,
        email=claims.get("email"),
        full_name=metadata.get("full_name"),
    )


# ============================================================
# AUTH DECODING (Supabase-issued JWT, verified locally)
# ============================================================
def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(bearer_scheme),
) -> CurrentUser:

    unauthorized = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Invalid or expired authentication token",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if not settings.SUPABASE_JWT_SECRET:
        raise HTTPException(500, "JWT secret not configured")

    try:
        claims = jwt.decode(
            credentials.credentials,
            settings.SUPABASE_JWT_SECRET,
            algorithms=["HS256"],
            audience=settings.SUPABASE_JWT_AUDIENCE,
        )
    except JWTError:
        raise unauthorized

    user = user_from_claims(claims)
    if user is None:
        raise unauthorized

    return user

