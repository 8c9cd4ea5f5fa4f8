from datetime import datetime
from pydantic import BaseModel, EmailStr, Field, field_validator
from typing import Optional


# Schema for displaying customer details
class CustomerOut(BaseModel):
    id: str
    full_name: str
    email: Optional[str] = None
    phone: Optional[str] = None
    notes: Optional[str] = None
    created_at: Optional[datetime] = None


# Schema for creating or updating a customer
class CustomerPayload(BaseModel):
    full_name: str = Field(min_length=1)
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    notes: Optional[str] = None

    @field_validator("email", "phone", "notes", mode="before")
    @classmethod
    def _blank_to_none(cls, v):
        return v or None
