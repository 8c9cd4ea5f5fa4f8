# backend/routes/suppliers.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from schemas.supplier import SupplierOut, SupplierPayload
from utils.auth import CurrentUser, get_backend, require_admin
from utils.backend_client import BackendClient, BackendError
from utils.errors import upstream_error

router = APIRouter(prefix="/dashboard/suppliers", tags=["Suppliers"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[SupplierOut])
async def list_suppliers(
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        return await backend.table("suppliers").select("*").order("created_at", desc=True).execute() or []
    except BackendError as e:
        logger.error(f"Error fetching suppliers: {e.message}")
        raise upstream_error(e, status_code=500, detail="No se pudieron cargar los proveedores.")


@router.post("", response_model=SupplierOut)
async def create_supplier(
    payload: SupplierPayload,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        rows = await backend.table("suppliers").insert([payload.model_dump()])
    except BackendError as e:
        raise upstream_error(e, status_code=400)
    return rows[0]


@router.put("/{supplier_id}", response_model=SupplierOut)
async def update_supplier(
    supplier_id: str,
    payload: SupplierPayload,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        rows = await backend.table("suppliers").eq("id", supplier_id).update(payload.model_dump())
    except BackendError as e:
        raise upstream_error(e, status_code=400)
    if not rows:
        raise HTTPException(status_code=404, detail="Supplier not found")
    return rows[0]


@router.delete("/{supplier_id}")
async def delete_supplier(
    supplier_id: str,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        await backend.table("suppliers").eq("id", supplier_id).delete()
    except BackendError as e:
        if e.is_foreign_key_violation:
            raise HTTPException(
                status_code=409,
                detail="No se pudo eliminar el proveedor porque tiene órdenes de compra asociadas.",
            )
        raise upstream_error(e, status_code=500, detail="No se pudo eliminar el proveedor.")
    return {"message": "Proveedor eliminado correctamente."}
