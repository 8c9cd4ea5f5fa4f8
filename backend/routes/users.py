# backend/routes/users.py
import logging
from typing import Type

from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel, ValidationError

from schemas.user import PasswordUpdateRequest, UserCreateRequest
from utils.auth import ROLES, CurrentUser, get_admin_backend, require_admin
from utils.backend_client import AdminClient, BackendError

router = APIRouter(prefix="/api/users", tags=["Users"])
logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


# Body is read only after the key, session and role dependencies have passed
async def _read_payload(request: Request, schema: Type[BaseModel]):
    try:
        body = await request.json()
    except ValueError:
        raise HTTPException(status_code=400, detail="Invalid JSON body.")
    if not isinstance(body, dict):
        raise HTTPException(status_code=400, detail="Request body must be a JSON object.")
    try:
        return schema.model_validate(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e.errors()[0]["msg"]))


# Create an auth account and its profile row (Admin only)
@router.post("")
async def create_user(
    request: Request,
    admin: AdminClient = Depends(get_admin_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    payload = await _read_payload(request, UserCreateRequest)
    if not payload.email or not payload.password or not payload.role:
        raise HTTPException(status_code=400, detail="Email, password, and role are required.")
    if payload.role not in ROLES:
        raise HTTPException(status_code=400, detail="Role must be 'admin' or 'employee'.")

    try:
        # Step 1: account in the auth schema
        try:
            new_user = await admin.create_user(payload.email, payload.password, email_confirm=True)
        except BackendError as e:
            logger.error(f"Error creating user in auth: {e.message}")
            raise HTTPException(status_code=400, detail=e.message)

        if not new_user or not new_user.get("id"):
            raise HTTPException(status_code=500, detail="Could not create user account.")

        # Step 2: profile row with the requested role
        try:
            await admin.table("profiles").upsert({"id": new_user["id"], "role": payload.role}, returning=False)
        except BackendError as e:
            logger.error(f"Error writing profile for {new_user['id']}: {e.message}")
            # Remove the auth account so it is not left without a profile
            try:
                await admin.delete_user(new_user["id"])
            except BackendError as cleanup_error:
                logger.error(f"Compensating delete failed for {new_user['id']}: {cleanup_error.message}")
            raise HTTPException(status_code=500, detail="Failed to create user profile.")

    except HTTPException:
        raise
    except Exception as e:
        logger.exception("Unexpected error while creating user")
        raise HTTPException(status_code=500, detail=f"Server error: {e}")

    logger.info(f"User {new_user.get('email')} created by {current_user.email} with role {payload.role}")
    return {"message": "User created successfully", "user": new_user}


# Set a new password for a user (Admin only)
@router.patch("/{user_id}")
async def update_user_password(
    user_id: str,
    request: Request,
    admin: AdminClient = Depends(get_admin_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    payload = await _read_payload(request, PasswordUpdateRequest)
    if not payload.password or len(payload.password) < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")

    try:
        await admin.update_user_by_id(user_id, {"password": payload.password})
    except BackendError as e:
        raise HTTPException(status_code=500, detail=e.message)

    logger.info(f"Password of {user_id} updated by {current_user.email}")
    return {"message": "Password updated successfully"}


# Delete a user account (Admin only)
@router.delete("/{user_id}")
async def delete_user(
    user_id: str,
    admin: AdminClient = Depends(get_admin_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    # Prevent self-deletion
    if user_id == current_user.id:
        raise HTTPException(status_code=400, detail="You cannot delete your own account.")

    try:
        await admin.delete_user(user_id)
    except BackendError as e:
        raise HTTPException(status_code=500, detail=e.message)

    logger.info(f"User {user_id} deleted by {current_user.email}")
    return {"message": "User deleted successfully"}
