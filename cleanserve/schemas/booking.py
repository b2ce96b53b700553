from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import date


class BookingCreate(BaseModel):
    service_id: str
    package_id: Optional[str] = None
    address_id: str
    scheduled_date: str = Field(pattern=r"^\d{4}-\d{2}-\d{2}$")  # YYYY-MM-DD
    scheduled_time: str = Field(pattern=r"^\d{2}:\d{2}$")  # HH:MM
    notes: Optional[str] = None
    notes_ar: Optional[str] = None
    referral_code: Optional[str] = None

    @field_validator("scheduled_date")
    @classmethod
    def real_date(cls, v: str) -> str:
        date.fromisoformat(v)
        return v

    @field_validator("scheduled_time")
    @classmethod
    def real_time(cls, v: str) -> str:
        hh, mm = map(int, v.split(":"))
        if hh > 23 or mm > 59:
            raise ValueError("Invalid time, expected HH:MM")
        return v

    @field_validator("referral_code", mode="before")
    @classmethod
    def blank_referral_is_none(cls, v):
        if isinstance(v, str):
            v = v.strip()
            return v or None
        return v

    @field_validator("referral_code")
    @classmethod
    def referral_code_length(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and len(v) > 20:
            raise ValueError("Referral code must be between 1 and 20 characters")
        return v


class TechnicianStatusUpdate(BaseModel):
    status: str
    message: Optional[str] = None
    message_ar: Optional[str] = None


class AdminStatusUpdate(BaseModel):
    status: str
    reason: Optional[str] = None
    technician_id: Optional[str] = None
