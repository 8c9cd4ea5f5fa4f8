# backend/routes/inventory.py
import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from schemas.product import InventoryItem, InventoryPage
from schemas.stock import StockAdjustmentCreate, StockAdjustmentResponse
from utils.auth import CurrentUser, get_backend, get_current_user
from utils.backend_client import BackendClient, BackendError, search_term
from utils.errors import upstream_error
from utils.formatting import stock_badge

router = APIRouter(prefix="/dashboard/inventory", tags=["Inventory"])
logger = logging.getLogger(__name__)

PAGE_SIZE = 12


# Product stock list: paged when browsing, unpaged when searching
@router.get("", response_model=InventoryPage)
async def list_inventory(
    page: int = Query(0, ge=0, description="Zero-based page"),
    q: str = Query("", description="Name, SKU or exact barcode"),
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    term = search_term(q)
    query = (
        backend.table("products")
        .select("id, name, sku, stock, image_url, categories(name)")
        .order("name")
    )
    if term:
        query = query.or_(f"name.ilike.%{term}%,sku.ilike.%{term}%,barcode.eq.{term}")
    else:
        start = page * PAGE_SIZE
        query = query.range(start, start + PAGE_SIZE - 1)

    try:
        rows = await query.execute() or []
    except BackendError as e:
        logger.error(f"Error fetching products: {e.message}")
        raise upstream_error(e, status_code=500, detail="No se pudieron cargar los productos.")

    items = [InventoryItem(**row, stock_badge=stock_badge(row.get("stock"))) for row in rows]
    return InventoryPage(
        items=items,
        page=0 if term else page,
        page_size=PAGE_SIZE,
        has_more=False if term else len(rows) == PAGE_SIZE,
    )


# Manual stock correction for a single product
@router.post("/{product_id}/adjust", response_model=StockAdjustmentResponse)
async def adjust_stock(
    product_id: str,
    payload: StockAdjustmentCreate,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        product = await (
            backend.table("products").select("id, name, stock").eq("id", product_id).maybe_single().execute()
        )
    except BackendError as e:
        raise upstream_error(e)
    if not product:
        raise HTTPException(status_code=404, detail="Product not found")

    current_stock = int(product.get("stock") or 0)
    if payload.type == "subtraction" and current_stock < payload.quantity:
        raise HTTPException(
            status_code=400,
            detail=f"No puedes restar más de las existencias actuales ({current_stock}).",
        )

    change = payload.quantity if payload.type == "addition" else -payload.quantity
    try:
        await backend.rpc("handle_stock_adjustment", {
            "p_product_id": product_id,
            "p_quantity_change": change,
            "p_reason": payload.reason,
        })
    except BackendError as e:
        raise upstream_error(e, status_code=400)

    new_stock = current_stock + change
    logger.info(f"Stock of {product_id} adjusted by {change} ({payload.reason}) by {current_user.email}")
    return StockAdjustmentResponse(
        message=f"Stock para {product['name']} actualizado a {new_stock}.",
        product_id=product_id,
        new_stock=new_stock,
    )
