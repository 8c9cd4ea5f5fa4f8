# backend/routes/orders.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from schemas.order import (
    PurchaseOrderCreate, PurchaseOrderCreated, PurchaseOrderDetail,
    PurchaseOrderLine, PurchaseOrderListItem,
)
from utils.auth import CurrentUser, get_backend, require_admin
from utils.backend_client import BackendClient, BackendError, search_term
from utils.errors import upstream_error
from utils.formatting import order_status_label
from utils.sales import purchase_order_total

router = APIRouter(prefix="/dashboard/orders", tags=["Purchase Orders"])
logger = logging.getLogger(__name__)

DETAIL_COLUMNS = (
    "id, created_at, completed_at, status, total_amount, "
    "suppliers(name, contact_person, email, phone), "
    "purchase_order_items(id, quantity, cost_price, products(name, sku))"
)


# Map a purchase_orders row with embedded relations to the detail schema
def _order_to_detail(order: dict) -> PurchaseOrderDetail:
    lines: List[PurchaseOrderLine] = []
    for it in order.get("purchase_order_items") or []:
        product = it.get("products") or {}
        lines.append(PurchaseOrderLine(
            id=it["id"],
            quantity=it["quantity"],
            cost_price=it["cost_price"],
            line_total=round(it["quantity"] * it["cost_price"], 2),
            product_name=product.get("name"),
            product_sku=product.get("sku"),
        ))
    return PurchaseOrderDetail(
        id=order["id"],
        created_at=order["created_at"],
        completed_at=order.get("completed_at"),
        status=order.get("status"),
        status_label=order_status_label(order.get("status")),
        total_amount=order.get("total_amount") or 0,
        supplier=order.get("suppliers"),
        items=lines,
    )


@router.get("", response_model=List[PurchaseOrderListItem])
async def list_orders(
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        rows = await (
            backend.table("purchase_orders")
            .select("id, created_at, status, total_amount, suppliers(name)")
            .order("created_at", desc=True)
            .execute()
        )
    except BackendError as e:
        raise upstream_error(e, status_code=500, detail="No se pudieron cargar las órdenes de compra.")

    return [
        PurchaseOrderListItem(
            id=row["id"],
            created_at=row["created_at"],
            status=row["status"],
            status_label=order_status_label(row["status"]),
            total_amount=row.get("total_amount") or 0,
            supplier_name=(row.get("suppliers") or {}).get("name"),
        )
        for row in rows or []
    ]


# Product lookup for the new-order form
@router.get("/products")
async def search_order_products(
    q: str = Query(""),
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    term = search_term(q)
    if len(term) < 2:
        return []
    try:
        return await (
            backend.table("products")
            .select("id, name, sku, cost_price")
            .or_(f"name.ilike.%{term}%,sku.ilike.%{term}%")
            .limit(10)
            .execute()
        ) or []
    except BackendError as e:
        raise upstream_error(e, status_code=400)


@router.get("/{order_id}", response_model=PurchaseOrderDetail)
async def get_order(
    order_id: str,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        order = await (
            backend.table("purchase_orders").select(DETAIL_COLUMNS).eq("id", order_id).maybe_single().execute()
        )
    except BackendError as e:
        logger.error(f"Error fetching purchase order {order_id}: {e.message}")
        order = None
    if not order:
        raise HTTPException(status_code=404, detail="Purchase order not found")
    return _order_to_detail(order)


@router.post("", response_model=PurchaseOrderCreated)
async def create_order(
    payload: PurchaseOrderCreate,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    if not payload.items:
        raise HTTPException(status_code=400, detail="Agrega al menos un producto a la orden.")
    product_ids = [item.product_id for item in payload.items]
    if len(set(product_ids)) != len(product_ids):
        raise HTTPException(status_code=400, detail="Este producto ya se encuentra en la orden.")

    po_items = [item.model_dump() for item in payload.items]
    try:
        order_id = await backend.rpc("create_purchase_order", {
            "p_supplier_id": payload.supplier_id,
            "p_po_items": po_items,
        })
    except BackendError as e:
        raise upstream_error(e, status_code=400)

    logger.info(f"Purchase order {order_id} created by {current_user.email}")
    return PurchaseOrderCreated(
        id=str(order_id),
        total_amount=purchase_order_total(po_items),
        message="Orden de compra creada correctamente.",
    )


# Mark an order as received; stock is added by the RPC
@router.post("/{order_id}/receive")
async def receive_order(
    order_id: str,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(require_admin),
):
    try:
        await backend.rpc("receive_purchase_order", {"p_order_id": order_id})
    except BackendError as e:
        raise upstream_error(e, status_code=400)

    logger.info(f"Purchase order {order_id} received by {current_user.email}")
    return {"message": "Orden recibida y stock actualizado."}
