from pydantic import BaseModel, Field, model_validator
from datetime import date, datetime
from typing import List, Optional

from app.models.enums import BookingStatus


class GuestDetail(BaseModel):
    name: str = Field(min_length=1, max_length=120)
    age: Optional[int] = Field(default=None, ge=0, le=120)
    gender: Optional[str] = None
    phone: Optional[str] = Field(default=None, pattern=r"^\+?[0-9 ]{6,20}$")


class DateRange(BaseModel):
    apartment_id: int = Field(gt=0)
    check_in: date
    check_out: date

    @model_validator(mode="after")
    def check_order(self):
        if self.check_out <= self.check_in:
            raise ValueError("End date must be after start date")
        return self


class HoldCreate(DateRange):
    # client-sent totals/nights are ignored; the server computes both
    guests: int = Field(ge=1)
    guest_details: List[GuestDetail] = []

    @model_validator(mode="after")
    def check_guest_details(self):
        if len(self.guest_details) > self.guests:
            raise ValueError("More guest details than guests")
        return self


class ConflictOut(BaseModel):
    id: int
    start_date: date
    end_date: date


class AvailabilityOut(BaseModel):
    available: bool
    conflicts: List[ConflictOut] = []


class HoldOut(BaseModel):
    booking_id: int
    expires_at: datetime
    nights: int
    total_amount: float


class BookingOut(BaseModel):
    id: int
    user_id: int
    apartment_id: int
    start_date: date
    end_date: date
    guests: int
    guest_details: Optional[List[GuestDetail]] = None
    status: BookingStatus
    expires_at: Optional[datetime] = None
    nights: int
    total_amount: float
    admin_notes: Optional[str] = None

    model_config = {"from_attributes": True}


class StatusUpdate(BaseModel):
    status: BookingStatus
    admin_notes: Optional[str] = None


class BookedRange(BaseModel):
    start_date: date
    end_date: date
