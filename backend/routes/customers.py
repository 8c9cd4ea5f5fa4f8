# backend/routes/customers.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from schemas.customer import CustomerOut, CustomerPayload
from utils.auth import CurrentUser, get_backend, get_current_user
from utils.backend_client import BackendClient, BackendError
from utils.errors import upstream_error

router = APIRouter(prefix="/dashboard/customers", tags=["Customers"])
logger = logging.getLogger(__name__)


@router.get("", response_model=List[CustomerOut])
async def list_customers(
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        return await backend.table("customers").select("*").order("created_at", desc=True).execute() or []
    except BackendError as e:
        logger.error(f"Error fetching customers: {e.message}")
        raise upstream_error(e, status_code=500, detail="No se pudieron cargar los clientes.")


@router.post("", response_model=CustomerOut)
async def create_customer(
    payload: CustomerPayload,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        rows = await backend.table("customers").insert([payload.model_dump()])
    except BackendError as e:
        raise upstream_error(e, status_code=400)
    return rows[0]


@router.put("/{customer_id}", response_model=CustomerOut)
async def update_customer(
    customer_id: str,
    payload: CustomerPayload,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        rows = await backend.table("customers").eq("id", customer_id).update(payload.model_dump())
    except BackendError as e:
        raise upstream_error(e, status_code=400)
    if not rows:
        raise HTTPException(status_code=404, detail="Customer not found")
    return rows[0]


@router.delete("/{customer_id}")
async def delete_customer(
    customer_id: str,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        await backend.table("customers").eq("id", customer_id).delete()
    except BackendError as e:
        if e.is_foreign_key_violation:
            raise HTTPException(
                status_code=409,
                detail="No se pudo eliminar el cliente porque tiene ventas asociadas.",
            )
        raise upstream_error(e, status_code=500, detail="No se pudo eliminar el cliente.")
    return {"message": "Cliente eliminado correctamente."}
