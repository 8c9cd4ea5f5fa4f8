# backend/routes/sell.py
import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException, Query

from schemas.product import SellableProduct
from schemas.sale import CheckoutRequest, CheckoutResponse, CustomerOption, SaleTotals
from utils.auth import CurrentUser, get_backend, get_current_user
from utils.backend_client import BackendClient, BackendError, search_term
from utils.errors import upstream_error
from utils.sales import CartError, build_sale_items, cart_totals, merge_cart_lines

router = APIRouter(prefix="/dashboard/sell", tags=["Sell"])
logger = logging.getLogger(__name__)

SELLABLE_COLUMNS = "id, name, sku, sale_price, stock, cost_price, image_url"
SEARCH_MIN_LENGTH = 2


# Quick-access tiles
@router.get("/featured", response_model=List[SellableProduct])
async def featured_products(
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        rows = await (
            backend.table("products")
            .select(SELLABLE_COLUMNS)
            .eq("is_featured", True)
            .eq("status", "active")
            .order("name")
            .execute()
        )
    except BackendError as e:
        raise upstream_error(e, status_code=500, detail="No se pudieron cargar los productos destacados.")
    return rows or []


# Search by name, SKU or scanned barcode
@router.get("/search", response_model=List[SellableProduct])
async def search_sellable(
    q: str = Query(""),
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    term = search_term(q)
    if len(term) < SEARCH_MIN_LENGTH:
        return []
    try:
        rows = await (
            backend.table("products")
            .select(SELLABLE_COLUMNS)
            .or_(f"name.ilike.%{term}%,sku.ilike.%{term}%,barcode.eq.{term}")
            .eq("status", "active")
            .limit(10)
            .execute()
        )
    except BackendError as e:
        raise upstream_error(e, status_code=400)
    return rows or []


@router.get("/customers", response_model=List[CustomerOption])
async def sell_customers(
    q: str = Query(""),
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        rows = await backend.table("customers").select("id, full_name, notes").order("full_name").execute() or []
    except BackendError as e:
        raise upstream_error(e, status_code=500, detail="No se pudieron cargar los clientes.")
    needle = q.strip().lower()
    return [row for row in rows if needle in (row.get("full_name") or "").lower()]


# Close the sale; stock is decremented by the process_sale RPC
@router.post("/checkout", response_model=CheckoutResponse)
async def checkout(
    payload: CheckoutRequest,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    if not payload.items:
        raise HTTPException(status_code=400, detail="Agrega productos para procesar la venta.")

    lines = merge_cart_lines(item.model_dump() for item in payload.items)
    try:
        rows = await (
            backend.table("products")
            .select("id, name, status, sale_price, cost_price, stock")
            .in_("id", [line["product_id"] for line in lines])
            .execute()
        )
    except BackendError as e:
        raise upstream_error(e)

    try:
        sale_items = build_sale_items(lines, {row["id"]: row for row in rows or []})
    except CartError as e:
        raise HTTPException(status_code=400, detail=str(e))

    totals = cart_totals(sale_items)
    try:
        sale_id = await backend.rpc("process_sale", {
            "p_cart_items": sale_items,
            "p_total_amount": totals["total"],
            "p_tax_amount": totals["tax"],
            "p_subtotal_amount": totals["subtotal"],
            "p_payment_method": payload.payment_method,
            "p_customer_id": payload.customer_id,
        })
    except BackendError as e:
        logger.error(f"Sale failed for {current_user.email}: {e.message}")
        raise upstream_error(e, status_code=400)

    sale_id = str(sale_id)
    logger.info(f"Sale {sale_id} processed by {current_user.email}: {totals['total']}")
    return CheckoutResponse(
        sale_id=sale_id,
        message=f"Venta #{sale_id[:8]} registrada con éxito.",
        totals=SaleTotals(**totals),
    )
