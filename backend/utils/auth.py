# utils/auth.py
import logging
from dataclasses import dataclass
from typing import AsyncIterator, Optional

from fastapi import Depends, HTTPException, Request, status

from config import settings
from utils.backend_client import AdminClient, BackendClient, BackendError

logger = logging.getLogger(__name__)

ROLE_ADMIN = "admin"
ROLE_EMPLOYEE = "employee"
ROLES = (ROLE_ADMIN, ROLE_EMPLOYEE)


@dataclass
class CurrentUser:
    id: str
    email: Optional[str]
    # None when the caller has no profile row
    profile_role: Optional[str] = None

    @property
    def role(self) -> str:
        return self.profile_role or ROLE_EMPLOYEE

    @property
    def is_admin(self) -> bool:
        return self.profile_role == ROLE_ADMIN


# Session token from the Authorization header or the session cookie
def get_access_token(request: Request) -> Optional[str]:
    header = request.headers.get("Authorization") or ""
    scheme, _, token = header.partition(" ")
    if scheme.lower() == "bearer" and token:
        return token.strip()
    return request.cookies.get(settings.SESSION_COOKIE_NAME) or None


def _user_client(access_token: Optional[str]) -> BackendClient:
    if not settings.SUPABASE_URL or not settings.SUPABASE_ANON_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing backend URL or anon key.",
        )
    return BackendClient(
        settings.SUPABASE_URL,
        settings.SUPABASE_ANON_KEY,
        access_token=access_token,
        timeout=settings.HTTP_TIMEOUT,
    )


# Per-request client acting as the caller (row-level security applies)
async def get_backend(request: Request) -> AsyncIterator[BackendClient]:
    client = _user_client(get_access_token(request))
    try:
        yield client
    finally:
        await client.aclose()


# Per-request privileged client for account lifecycle management
async def get_admin_backend() -> AsyncIterator[AdminClient]:
    if not settings.SUPABASE_URL or not settings.SUPABASE_SERVICE_ROLE_KEY:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Missing backend URL or service role key.",
        )
    client = AdminClient(settings.SUPABASE_URL, settings.SUPABASE_SERVICE_ROLE_KEY, timeout=settings.HTTP_TIMEOUT)
    try:
        yield client
    finally:
        await client.aclose()


async def fetch_profile_role(backend: BackendClient, user_id: str) -> Optional[str]:
    """Role stored on the caller's profile row; None if missing or unreadable."""
    try:
        profile = await backend.table("profiles").select("role").eq("id", user_id).maybe_single().execute()
    except BackendError as e:
        logger.warning(f"Profile lookup failed for {user_id}: {e.message}")
        return None
    return (profile or {}).get("role")


# Used by the session gate; never raises for an anonymous request
async def resolve_session_user(request: Request) -> Optional[dict]:
    token = get_access_token(request)
    if not token:
        return None
    try:
        client = _user_client(token)
    except HTTPException:
        return None
    async with client:
        try:
            return await client.get_user()
        except BackendError as e:
            logger.warning(f"Session lookup failed: {e.message}")
            return None


# Retrieve the authenticated caller together with its profile role
async def get_current_user(
    request: Request,
    backend: BackendClient = Depends(get_backend),
) -> CurrentUser:
    user = getattr(request.state, "session_user", None)
    if user is None:
        user = await backend.get_user()
    if not user:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unauthorized")

    role = await fetch_profile_role(backend, user["id"])
    return CurrentUser(id=user["id"], email=user.get("email"), profile_role=role)


# Dependency factory for role-based access control
def role_required(*allowed_roles):
    async def _checker(current_user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
        if allowed_roles and current_user.profile_role not in allowed_roles:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Forbidden")
        return current_user
    return _checker


require_admin = role_required(ROLE_ADMIN)
