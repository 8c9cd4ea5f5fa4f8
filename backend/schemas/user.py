from pydantic import BaseModel, EmailStr
from typing import Literal, Optional

# Fields are optional so the route can report missing values with its own message
class UserCreateRequest(BaseModel):
    email: Optional[str] = None
    password: Optional[str] = None
    role: Optional[str] = None

# Schema for administrative password resets
class PasswordUpdateRequest(BaseModel):
    password: Optional[str] = None

# Schema for user authentication credentials
class UserLogin(BaseModel):
    email: EmailStr
    password: str

# Output schema for the signed-in caller
class MeResponse(BaseModel):
    id: str
    email: Optional[str] = None
    role: str

# Session token returned after a successful sign-in
class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"
    expires_in: Optional[int] = None

# Row returned by get_users_with_roles
class UserWithRole(BaseModel):
    id: str
    email: Optional[str] = None
    role: Literal["admin", "employee"]

# Schema for administrative role updates
class RoleUpdate(BaseModel):
    role: Literal["admin", "employee"]
