# backend/schemas/stock.py
from pydantic import BaseModel, Field
from typing import Literal

# Direction of a manual stock adjustment
AdjustmentType = Literal["addition", "subtraction"]


# Schema for a manual stock adjustment from the inventory screen
class StockAdjustmentCreate(BaseModel):
    type: AdjustmentType = "addition"
    quantity: int = Field(gt=0)
    reason: str = Field(min_length=1)


class StockAdjustmentResponse(BaseModel):
    message: str
    product_id: str
    new_stock: int
