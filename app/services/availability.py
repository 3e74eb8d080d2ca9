"""Availability checks for apartment date ranges.

Ranges are half-open ``[start_date, end_date)``: a stay ending on the 5th
does not clash with one starting on the 5th.
"""
from dataclasses import dataclass, field
from datetime import date, datetime

from sqlalchemy import and_, or_
from sqlalchemy.orm import Session

from app.models.booking import Booking
from app.models.enums import BookingStatus
from app.services.status_engine import advance_statuses


@dataclass
class Availability:
    available: bool
    conflicts: list[dict] = field(default_factory=list)


def blocking_clause(now: datetime):
    """Statuses that hold a slot: confirmed, ongoing, or a pending hold whose
    deadline has not passed yet."""
    return or_(
        Booking.status.in_([BookingStatus.CONFIRMED, BookingStatus.ONGOING]),
        and_(
            Booking.status == BookingStatus.PENDING,
            or_(Booking.expires_at.is_(None), Booking.expires_at > now),
        ),
    )


def find_conflicts(
    db: Session,
    apartment_id: int,
    start_date: date,
    end_date: date,
    now: datetime,
    exclude_booking_id: int | None = None,
) -> list[Booking]:
    query = db.query(Booking).filter(
        Booking.apartment_id == apartment_id,
        Booking.start_date < end_date,
        Booking.end_date > start_date,
        blocking_clause(now),
    )
    if exclude_booking_id is not None:
        query = query.filter(Booking.id != exclude_booking_id)

    return query.order_by(Booking.start_date).all()


def serialize_conflicts(bookings: list[Booking]) -> list[dict]:
    return [
        {"id": b.id, "start_date": b.start_date, "end_date": b.end_date}
        for b in bookings
    ]


def check_availability(
    db: Session,
    apartment_id: int,
    start_date: date,
    end_date: date,
    now: datetime | None = None,
    exclude_booking_id: int | None = None,
) -> Availability:
    if start_date >= end_date:
        raise ValueError("start_date must be before end_date")

    now = now or datetime.utcnow()

    # flip lapsed holds first so they never show up as conflicts
    advance_statuses(db, now)
    db.commit()

    conflicts = find_conflicts(db, apartment_id, start_date, end_date, now, exclude_booking_id)
    return Availability(available=not conflicts, conflicts=serialize_conflicts(conflicts))


def booked_ranges(db: Session, apartment_id: int, now: datetime | None = None) -> list[dict]:
    """Blocking ranges of an apartment, for calendar display."""
    now = now or datetime.utcnow()
    advance_statuses(db, now)
    db.commit()

    bookings = (
        db.query(Booking)
        .filter(
            Booking.apartment_id == apartment_id,
            Booking.end_date > now.date(),
            blocking_clause(now),
        )
        .order_by(Booking.start_date)
        .all()
    )
    return [{"start_date": b.start_date, "end_date": b.end_date} for b in bookings]
