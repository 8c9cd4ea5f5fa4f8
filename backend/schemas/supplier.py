from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional


# Schema for displaying supplier details
class SupplierOut(BaseModel):
    id: str
    name: str
    contact_person: Optional[str] = None
    email: Optional[str] = None
    phone: Optional[str] = None
    address: Optional[str] = None
    created_at: Optional[datetime] = None


# Schema for creating or updating a supplier
class SupplierPayload(BaseModel):
    name: str = Field(min_length=1)
    contact_person: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    address: Optional[str] = None

    @field_validator("contact_person", "email", "phone", "address", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        return v or None
