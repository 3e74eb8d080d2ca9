from datetime import datetime

from sqlalchemy import Column, Integer, String, Date, DateTime, Float, ForeignKey, JSON, Enum, Index
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import BookingStatus, enum_values


class Booking(Base):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False)
    apartment_id = Column(Integer, ForeignKey("apartments.id"), nullable=False)

    # half-open range: the guest leaves on end_date
    start_date = Column(Date, nullable=False)
    end_date = Column(Date, nullable=False)

    guests = Column(Integer, nullable=False)
    guest_details = Column(JSON, nullable=True)

    status = Column(
        Enum(BookingStatus, name="bookingstatus", values_callable=enum_values),
        nullable=False,
        default=BookingStatus.PENDING,
    )
    expires_at = Column(DateTime, nullable=True)

    nights = Column(Integer, nullable=False)
    total_amount = Column(Float, nullable=False)

    gateway_order_id = Column(String, nullable=True, index=True)
    admin_notes = Column(String, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    user = relationship("User", back_populates="bookings")
    apartment = relationship("Apartment", back_populates="bookings")
    payments = relationship("Payment", back_populates="booking", order_by="Payment.id")

    __table_args__ = (
        Index("ix_bookings_apartment_range", "apartment_id", "start_date", "end_date"),
    )
