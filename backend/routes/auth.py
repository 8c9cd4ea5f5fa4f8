# backend/routes/auth.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from config import settings
from schemas.user import MeResponse, Token, UserLogin
from utils.auth import CurrentUser, get_backend, get_current_user
from utils.backend_client import BackendClient, BackendError

router = APIRouter(tags=["Auth"])
logger = logging.getLogger(__name__)


# Authenticate with the hosted backend and keep the session in a cookie
@router.post("/login", response_model=Token)
async def login(
    payload: UserLogin,
    response: Response,
    backend: BackendClient = Depends(get_backend),
):
    try:
        session = await backend.sign_in_with_password(payload.email, payload.password)
    except BackendError as e:
        logger.info(f"Login failed for {payload.email}: {e.message}")
        if e.status_code in (400, 401, 403):
            raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid login credentials")
        raise HTTPException(status_code=500, detail=e.message)

    access_token = session["access_token"]
    expires_in = session.get("expires_in")
    response.set_cookie(
        settings.SESSION_COOKIE_NAME,
        access_token,
        max_age=expires_in,
        httponly=True,
        samesite="lax",
    )
    return Token(access_token=access_token, expires_in=expires_in)


# End the session upstream and drop the cookie
@router.post("/logout")
async def logout(response: Response, backend: BackendClient = Depends(get_backend)):
    try:
        await backend.sign_out()
    except BackendError as e:
        # The cookie is dropped anyway; an expired token cannot sign out
        logger.warning(f"Sign-out failed: {e.message}")
    response.delete_cookie(settings.SESSION_COOKIE_NAME)
    return {"message": "Signed out"}


# Retrieve current authenticated user details
@router.get("/me", response_model=MeResponse)
async def me(current_user: CurrentUser = Depends(get_current_user)):
    return MeResponse(id=current_user.id, email=current_user.email, role=current_user.role)
