from sqlalchemy import Column, Integer, String, Boolean, Float
from sqlalchemy.orm import relationship
from app.db.session import Base


class Apartment(Base):
    __tablename__ = "apartments"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String, nullable=False)
    description = Column(String)
    location = Column(String, nullable=False)

    # Pricing fields
    price_per_night = Column(Float, nullable=False)
    cleaning_fee = Column(Float, nullable=False, default=0.0)

    max_guests = Column(Integer, nullable=False)

    is_available = Column(Boolean, nullable=False, default=True)
    requires_verification = Column(Boolean, nullable=False, default=False)
    deleted = Column(Boolean, nullable=False, default=False)

    # Bookings (One-to-Many)
    bookings = relationship("Booking", back_populates="apartment")
