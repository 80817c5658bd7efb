# backend/automarket/schemas/bookings.py

import re
from datetime import date, datetime
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class BookingCreate(BaseModel):
    service_id: int
    scheduled_date: date
    start_time: str = Field(description="Time in HH:MM format")
    vehicle_id: Optional[int] = None
    workshop_id: Optional[int] = None
    notes: Optional[str] = None

    @field_validator("start_time")
    @classmethod
    def validate_time(cls, v: str) -> str:
        if not re.match(r"^\d{2}:\d{2}$", v):
            raise ValueError("Time must be in HH:MM format")
        return v


class BookingStatusUpdate(BaseModel):
    status: str
    reason: Optional[str] = None


class BookingRead(BaseModel):
    id: int
    booking_number: str

    customer_id: int
    service_id: int
    vehicle_id: Optional[int] = None
    workshop_id: Optional[int] = None
    technician_id: Optional[int] = None

    scheduled_date: Optional[date] = None
    start_time: Optional[str] = None

    status: str
    notes: Optional[str] = None
    agreed_price: Optional[float] = None

    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
