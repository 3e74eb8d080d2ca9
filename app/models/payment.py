from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, Float, ForeignKey, Enum
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import PaymentStatus, enum_values


class Payment(Base):
    __tablename__ = "payments"

    id = Column(Integer, primary_key=True, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=False, index=True)

    amount = Column(Float, nullable=False)
    method = Column(String, nullable=False, default="unknown")

    # Razorpay identifiers
    gateway_payment_id = Column(String, nullable=False, unique=True)
    gateway_order_id = Column(String, nullable=True)
    refund_id = Column(String, nullable=True)

    status = Column(
        Enum(PaymentStatus, name="paymentstatus", values_callable=enum_values),
        nullable=False,
        default=PaymentStatus.PAID,
    )

    paid_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    refunded_at = Column(DateTime, nullable=True)

    booking = relationship("Booking", back_populates="payments")
