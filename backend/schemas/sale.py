from pydantic import BaseModel, Field
from typing import List, Literal, Optional

PaymentMethod = Literal["efectivo", "tarjeta"]


# Single cart line sent by the sell screen
class CartLine(BaseModel):
    product_id: str
    quantity: int = Field(gt=0)


# Request schema for closing a sale
class CheckoutRequest(BaseModel):
    items: List[CartLine] = []
    payment_method: PaymentMethod
    customer_id: Optional[str] = None


# Money breakdown of a cart, tax included in the sale price
class SaleTotals(BaseModel):
    total: float
    subtotal: float
    tax: float
    total_quantity: int


class CheckoutResponse(BaseModel):
    sale_id: str
    message: str
    totals: SaleTotals


class CustomerOption(BaseModel):
    id: str
    full_name: str
    notes: Optional[str] = None
