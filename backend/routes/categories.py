# backend/routes/categories.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from schemas.category import CategoryOut, CategoryPayload
from utils.auth import CurrentUser, get_backend, get_current_user
from utils.backend_client import BackendClient, BackendError
from utils.errors import upstream_error

router = APIRouter(prefix="/dashboard/categories", tags=["Categories"])
logger = logging.getLogger(__name__)


def _clean_name(payload: CategoryPayload) -> str:
    name = (payload.name or "").strip()
    if not name:
        raise HTTPException(status_code=400, detail="El nombre no puede estar vacío.")
    return name


@router.get("", response_model=List[CategoryOut])
async def list_categories(
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return await (
            backend.table("categories")
            .select("id, name, products(id, name, sku, stock)")
            .order("name")
            .execute()
        ) or []
    except BackendError as e:
        logger.error(f"Error fetching categories: {e.message}")
        raise upstream_error(e, status_code=500, detail="No se pudieron cargar las categorías.")


@router.post("", response_model=CategoryOut)
async def create_category(
    payload: CategoryPayload,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    name = _clean_name(payload)
    try:
        rows = await backend.table("categories").insert([{"name": name}])
    except BackendError as e:
        raise upstream_error(e, status_code=400)
    return rows[0]


@router.put("/{category_id}", response_model=CategoryOut)
async def rename_category(
    category_id: str,
    payload: CategoryPayload,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    name = _clean_name(payload)
    try:
        rows = await backend.table("categories").eq("id", category_id).update({"name": name})
    except BackendError as e:
        raise upstream_error(e, status_code=400)
    if not rows:
        raise HTTPException(status_code=404, detail="Category not found")
    return rows[0]


@router.delete("/{category_id}")
async def delete_category(
    category_id: str,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        await backend.table("categories").eq("id", category_id).delete()
    except BackendError as e:
        if e.is_foreign_key_violation:
            raise HTTPException(
                status_code=409,
                detail="No se pudo eliminar la categoría porque tiene productos asociados.",
            )
        raise upstream_error(e, status_code=500, detail="No se pudo eliminar la categoría.")
    return {"message": "Categoría eliminada correctamente."}
