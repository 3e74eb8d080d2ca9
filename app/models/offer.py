from datetime import datetime

from sqlalchemy import Column, Integer, String, Boolean, Float, Date, DateTime, JSON, CheckConstraint, Index
from app.db.session import Base


class Offer(Base):
    __tablename__ = "offers"

    id = Column(Integer, primary_key=True, index=True)

    title = Column(String, nullable=False)
    description = Column(String, nullable=True)
    discount_percentage = Column(Float, nullable=False)

    # NULL means every apartment
    apartment_ids = Column(JSON, nullable=True)

    # inclusive on both ends
    valid_from = Column(Date, nullable=False)
    valid_until = Column(Date, nullable=False)

    is_active = Column(Boolean, nullable=False, default=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)
    updated_at = Column(DateTime, nullable=False, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint(
            "discount_percentage > 0 AND discount_percentage <= 100",
            name="ck_offers_discount_range",
        ),
        CheckConstraint("valid_until >= valid_from", name="ck_offers_valid_range"),
        Index("ix_offers_validity", "is_active", "valid_from", "valid_until"),
    )
