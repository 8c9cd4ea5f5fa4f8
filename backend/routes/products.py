# backend/routes/products.py
import logging
import time
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from pydantic import ValidationError

from config import settings
import schemas.product as product_schemas
from utils.auth import CurrentUser, get_backend, get_current_user
from utils.backend_client import BackendClient, BackendError
from utils.errors import upstream_error
from utils.formatting import product_status_label, stock_badge

router = APIRouter(prefix="/dashboard/products", tags=["Products"])
logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = ["image/jpeg", "image/png", "image/webp"]


def _storage_path(filename: str) -> str:
    return f"public/{int(time.time() * 1000)}-{filename}"


# =========================
# LISTA PRODUKTÓW
# =========================
@router.get("", response_model=List[product_schemas.ProductListItem])
async def list_products(
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        rows = await (
            backend.table("products")
            .select("id, name, status, sale_price, stock, image_url")
            .order("created_at", desc=True)
            .execute()
        )
    except BackendError as e:
        logger.error(f"Error fetching products: {e.message}")
        raise upstream_error(e, status_code=500, detail="No se pudieron cargar los productos.")
    return rows or []


# =========================
# DODAWANIE PRODUKTU
# =========================
@router.post("", response_model=product_schemas.ProductCreatedResponse)
async def add_product(
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
    image: Optional[UploadFile] = File(None),
    name: str = Form(...),
    sku: str = Form(...),
    sale_price: float = Form(...),
    stock: int = Form(0),
    cost_price: float = Form(0.0),
    barcode: Optional[str] = Form(None),
    description: Optional[str] = Form(None),
    category_id: Optional[str] = Form(None),
    is_featured: bool = Form(False),
):
    try:
        data = product_schemas.ProductCreate(
            name=name, sku=sku, sale_price=sale_price, stock=stock, cost_price=cost_price,
            barcode=barcode or None, description=description or None,
            category_id=category_id or None, is_featured=is_featured,
        )
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e.errors()[0]["msg"]))

    bucket = settings.PRODUCT_IMAGES_BUCKET
    image_path, image_url = None, None

    # 1. Image upload, when a file was sent
    if image is not None and image.filename:
        if image.content_type not in ALLOWED_IMAGE_TYPES:
            raise HTTPException(status_code=400, detail="Invalid file type")
        image_path = _storage_path(image.filename)
        try:
            await backend.upload(bucket, image_path, await image.read(), image.content_type)
        except BackendError as e:
            raise upstream_error(e, status_code=400, detail=f"Error al subir la imagen: {e.message}")
        finally:
            await image.close()
        image_url = backend.public_url(bucket, image_path)

    # 2. Product row
    payload = data.model_dump()
    payload.update({"status": "active", "image_url": image_url})
    try:
        created = await backend.table("products").insert([payload])
    except BackendError as e:
        logger.error(f"Error saving product {data.sku}: {e.message}")
        # Drop the orphaned image
        if image_path:
            try:
                await backend.remove(bucket, [image_path])
            except BackendError as cleanup_error:
                logger.warning(f"Could not remove image {image_path}: {cleanup_error.message}")
        raise upstream_error(e, status_code=400)

    logger.info(f"Product {data.sku} created by {current_user.email}")
    return {
        "message": "El nuevo producto ha sido agregado a tu inventario.",
        "product": created[0] if created else None,
    }


# =========================
# SZCZEGÓŁY PRODUKTU
# =========================
@router.get("/{product_id}/details", response_model=product_schemas.ProductDetails)
async def product_details(
    product_id: str,
    backend: BackendClient = Depends(get_backend),
    current_user: CurrentUser = Depends(get_current_user),
):
    try:
        data = await backend.rpc("get_product_details", {"p_product_id": product_id}, single=True)
    except BackendError as e:
        logger.error(f"Error fetching product details for {product_id}: {e.message}")
        # 406: the single-object request matched no row
        if e.status_code in (404, 406):
            raise HTTPException(status_code=404, detail="Product not found")
        raise upstream_error(e)

    if not data or not data.get("product"):
        raise HTTPException(status_code=404, detail="Product not found")

    product = data["product"]
    return product_schemas.ProductDetails(
        product=product,
        category=data.get("category"),
        sales_summary=data.get("sales_summary"),
        recent_sales=data.get("recent_sales") or [],
        stock_movements=data.get("stock_movements") or [],
        stock_badge=stock_badge(product.get("stock")),
        status_label=product_status_label(product.get("status")),
    )
