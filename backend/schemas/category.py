from pydantic import BaseModel
from typing import List, Optional


# Product listed under its category
class CategoryProduct(BaseModel):
    id: str
    name: str
    sku: Optional[str] = None
    stock: Optional[int] = 0


# Category as listed and edited from the categories screen
class CategoryOut(BaseModel):
    id: str
    name: str
    products: List[CategoryProduct] = []


class CategoryPayload(BaseModel):
    name: Optional[str] = None
