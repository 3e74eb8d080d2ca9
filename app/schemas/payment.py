from pydantic import BaseModel
from datetime import datetime
from typing import Optional

from app.models.enums import PaymentStatus


class OrderCreate(BaseModel):
    booking_id: int


class OrderOut(BaseModel):
    order_id: str
    amount: float
    currency: str
    key_id: str


class PaymentVerify(BaseModel):
    booking_id: int
    razorpay_order_id: str
    razorpay_payment_id: str
    razorpay_signature: str


class PaymentResult(BaseModel):
    success: bool
    method: str
    amount: float


class PaymentOut(BaseModel):
    id: int
    booking_id: int
    amount: float
    method: str
    gateway_payment_id: str
    status: PaymentStatus
    paid_at: datetime
    refunded_at: Optional[datetime] = None

    model_config = {"from_attributes": True}
