# backend/routes/settings.py
import logging
from typing import List

from fastapi import APIRouter, Depends

from schemas.user import RoleUpdate, UserWithRole
from utils.auth import CurrentUser, get_backend, require_admin
from utils.backend_client import BackendClient, BackendError
from utils.errors import upstream_error

router = APIRouter(prefix="/dashboard/settings", tags=["Settings"])
logger = logging.getLogger(__name__)


# Retrieve all users with their profile roles (Admin only)
@router.get("/users", response_model=List[UserWithRole])
async def list_users(
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        return await backend.rpc("get_users_with_roles") or []
    except BackendError as e:
        raise upstream_error(e, status_code=500, detail="No se pudieron obtener los datos de los usuarios.")


# Update user role (Admin only)
@router.put("/users/{user_id}/role")
async def update_user_role(
    user_id: str,
    new_role: RoleUpdate,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        await backend.rpc("update_user_role", {"p_user_id": user_id, "p_new_role": new_role.role})
    except BackendError as e:
        raise upstream_error(e, status_code=400)

    logger.info(f"Role of {user_id} set to {new_role.role} by {current_user.email}")
    return {"message": "El rol del usuario ha sido cambiado exitosamente.", "id": user_id, "role": new_role.role}
