# backend/automarket/schemas/auto_parts.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field


class AutoPartCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    brand: Optional[str] = None
    part_number: Optional[str] = None
    price: float = Field(ge=0)
    stock: int = Field(0, ge=0)

    model_config = {"from_attributes": True}


class AutoPartUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    brand: Optional[str] = None
    part_number: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    stock: Optional[int] = Field(None, ge=0)

    model_config = {"from_attributes": True}


class AutoPartRead(BaseModel):
    id: int
    owner_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    brand: Optional[str] = None
    part_number: Optional[str] = None
    price: float
    stock: int
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
