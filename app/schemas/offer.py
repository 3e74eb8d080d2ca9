from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, Field, model_validator


class OfferBase(BaseModel):
    title: str = Field(min_length=1)
    description: Optional[str] = None
    discount_percentage: float = Field(gt=0, le=100)
    apartment_ids: Optional[List[int]] = None
    valid_from: date
    valid_until: date

    @model_validator(mode="after")
    def check_validity(self):
        if self.valid_until < self.valid_from:
            raise ValueError("valid_until must not be before valid_from")
        return self


class OfferCreate(OfferBase):
    pass


class OfferOut(OfferBase):
    id: int
    is_active: bool
    created_at: datetime

    model_config = {"from_attributes": True}


class ApartmentOffers(BaseModel):
    apartment_id: int
    offers: List[OfferOut] = []
    best_discount: float = 0.0
    price_per_night: float
    discounted_price_per_night: float
