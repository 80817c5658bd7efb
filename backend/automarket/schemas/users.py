# backend/automarket/schemas/users.py

from datetime import datetime
from typing import Literal, Optional
from pydantic import BaseModel, Field

Role = Literal["customer", "technician", "vendor", "admin"]


class UserCreate(BaseModel):
    email: str = Field(min_length=3, pattern=r"^[^@\s]+@[^@\s]+$")
    first_name: str = Field(min_length=1)
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: Role = "customer"

    model_config = {"from_attributes": True}


class UserUpdate(BaseModel):
    first_name: Optional[str] = Field(None, min_length=1)
    last_name: Optional[str] = None
    phone: Optional[str] = None

    model_config = {"from_attributes": True}


class LocationUpdate(BaseModel):
    latitude: float
    longitude: float


class AvailabilityUpdate(BaseModel):
    is_available: bool


class UserRead(BaseModel):
    id: int
    email: str
    first_name: str
    last_name: Optional[str] = None
    phone: Optional[str] = None
    role: Role
    is_active: bool
    is_available: bool
    latitude: Optional[float] = None
    longitude: Optional[float] = None
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
