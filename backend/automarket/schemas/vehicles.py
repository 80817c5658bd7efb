# backend/automarket/schemas/vehicles.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class VehicleCreate(BaseModel):
    make: str = Field(min_length=1)
    model: str = Field(min_length=1)
    year: Optional[int] = Field(None, ge=1900, le=2100)
    plate_number: str = Field(min_length=1)
    color: Optional[str] = None
    is_default: bool = False

    @field_validator("plate_number")
    @classmethod
    def normalize_plate(cls, v: str) -> str:
        return v.strip().upper()


class VehicleUpdate(BaseModel):
    year: Optional[int] = Field(None, ge=1900, le=2100)
    plate_number: Optional[str] = Field(None, min_length=1)
    color: Optional[str] = None
    is_default: Optional[bool] = None

    @field_validator("plate_number")
    @classmethod
    def normalize_plate(cls, v: Optional[str]) -> Optional[str]:
        return v.strip().upper() if v else v


class VehicleRead(BaseModel):
    id: int
    user_id: int
    make: str
    model: str
    year: Optional[int] = None
    plate_number: str
    color: Optional[str] = None
    is_default: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
