# backend/automarket/schemas/services.py

from datetime import datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator, model_validator

from ..utils.working_hours import is_valid_time, time_to_minutes


class WorkingHoursRange(BaseModel):
    """One open range of a weekday; 0 = Sunday .. 6 = Saturday."""
    day_of_week: int = Field(ge=0, le=6)
    start: str
    end: str

    @field_validator("start", "end")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not is_valid_time(v):
            raise ValueError("Time must be in HH:MM format (00:00 - 23:59)")
        return v

    @model_validator(mode="after")
    def check_order(self):
        if time_to_minutes(self.start) >= time_to_minutes(self.end):
            raise ValueError(f"start ({self.start}) must be before end ({self.end})")
        return self


class ServiceCreate(BaseModel):
    name: str = Field(min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    price: float = Field(ge=0)
    estimated_duration: Optional[int] = Field(None, gt=0)
    working_hours: list[WorkingHoursRange] = []
    slot_duration_minutes: int = Field(60, gt=0)

    model_config = {"from_attributes": True}


class ServiceUpdate(BaseModel):
    is_active: Optional[bool] = None
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    category: Optional[str] = None
    price: Optional[float] = Field(None, ge=0)
    estimated_duration: Optional[int] = Field(None, gt=0)
    working_hours: Optional[list[WorkingHoursRange]] = None
    slot_duration_minutes: Optional[int] = Field(None, gt=0)

    model_config = {"from_attributes": True}


class ServiceRead(BaseModel):
    id: int
    owner_id: Optional[int] = None
    name: str
    description: Optional[str] = None
    category: Optional[str] = None
    price: float
    estimated_duration: Optional[int] = None
    working_hours: list[dict]
    slot_duration_minutes: int
    is_active: bool
    created_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
