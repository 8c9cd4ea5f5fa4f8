# backend/schemas/product.py
from datetime import datetime
from pydantic import BaseModel, Field, ConfigDict
from typing import Any, Dict, List, Literal, Optional

ProductStatus = Literal["active", "draft", "archived"]


class ORMBase(BaseModel):
    model_config = ConfigDict(from_attributes=True, extra="ignore")


# Row shown in the product table
class ProductListItem(ORMBase):
    id: str
    name: str
    status: Optional[str] = None
    sale_price: float = 0
    stock: int = 0
    image_url: Optional[str] = None


# Shared attributes accepted when creating a product
class ProductCreate(ORMBase):
    name: str = Field(min_length=1)
    sku: str = Field(min_length=1)
    barcode: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    cost_price: float = Field(default=0, ge=0)
    sale_price: float = Field(gt=0)
    stock: int = Field(default=0, ge=0)
    is_featured: bool = False


# Compact product used by search boxes and the sell screen
class ProductSearchResult(ORMBase):
    id: str
    name: str
    sku: Optional[str] = None
    image_url: Optional[str] = None


class SellableProduct(ProductSearchResult):
    sale_price: float = 0
    cost_price: float = 0
    stock: int = 0


# Aggregate returned by get_product_details
class ProductDetails(ORMBase):
    product: Dict[str, Any]
    category: Optional[Dict[str, Any]] = None
    sales_summary: Optional[Dict[str, Any]] = None
    recent_sales: List[Dict[str, Any]] = []
    stock_movements: List[Dict[str, Any]] = []
    stock_badge: str
    status_label: str


class ProductCreatedResponse(ORMBase):
    message: str
    product: Optional[Dict[str, Any]] = None


class CategoryRef(ORMBase):
    name: str


# Row shown in the inventory screen
class InventoryItem(ORMBase):
    id: str
    name: str
    sku: Optional[str] = None
    stock: int = 0
    image_url: Optional[str] = None
    categories: Optional[CategoryRef] = None
    stock_badge: str = "outline"


class InventoryPage(ORMBase):
    items: List[InventoryItem]
    page: int
    page_size: int
    has_more: bool
