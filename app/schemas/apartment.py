from pydantic import BaseModel, Field
from typing import Optional


class ApartmentBase(BaseModel):
    title: str
    description: Optional[str] = None
    location: str

    # Pricing fields
    price_per_night: float = Field(gt=0)
    cleaning_fee: float = Field(default=0.0, ge=0)

    max_guests: int = Field(ge=1)
    is_available: bool = True
    requires_verification: bool = False


class ApartmentCreate(ApartmentBase):
    pass


class ApartmentOut(ApartmentBase):
    id: int

    model_config = {
        "from_attributes": True
    }
