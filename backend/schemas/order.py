from pydantic import BaseModel, Field
from typing import List, Optional
from datetime import datetime


# Line of a new purchase order
class PurchaseOrderItemIn(BaseModel):
    product_id: str
    quantity: int = Field(ge=1)
    cost_price: float = Field(ge=0)


# Input schema for creating a purchase order
class PurchaseOrderCreate(BaseModel):
    supplier_id: str = Field(min_length=1)
    items: List[PurchaseOrderItemIn] = []


class PurchaseOrderCreated(BaseModel):
    id: str
    total_amount: float
    message: str


# Row of the purchase order list
class PurchaseOrderListItem(BaseModel):
    id: str
    created_at: datetime
    status: str
    status_label: str
    total_amount: float = 0
    supplier_name: Optional[str] = None


class PurchaseOrderLine(BaseModel):
    id: str
    quantity: int
    cost_price: float
    line_total: float
    product_name: Optional[str] = None
    product_sku: Optional[str] = None


# Output schema representing the full purchase order
class PurchaseOrderDetail(BaseModel):
    id: str
    created_at: datetime
    completed_at: Optional[datetime] = None
    status: Optional[str] = None
    status_label: str
    total_amount: float = 0
    supplier: Optional[dict] = None
    items: List[PurchaseOrderLine]
