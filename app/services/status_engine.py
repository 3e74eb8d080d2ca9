"""Time-driven booking status sweep.

Plain ``UPDATE ... WHERE`` statements whose predicates no longer match once
applied, so running the sweep twice, or from two requests at once, changes
nothing the second time.
"""
from datetime import datetime

from sqlalchemy.orm import Session

from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.enums import BookingStatus

logger = get_logger("booking")


def advance_statuses(db: Session, now: datetime | None = None) -> dict:
    """Bring statuses in line with the calendar. Does not commit."""
    now = now or datetime.utcnow()
    today = now.date()

    started = (
        db.query(Booking)
        .filter(
            Booking.status == BookingStatus.CONFIRMED,
            Booking.start_date <= today,
            Booking.end_date > today,
        )
        .update({Booking.status: BookingStatus.ONGOING}, synchronize_session=False)
    )

    finished = (
        db.query(Booking)
        .filter(
            Booking.status.in_([BookingStatus.ONGOING, BookingStatus.CONFIRMED]),
            Booking.end_date <= today,
        )
        .update({Booking.status: BookingStatus.EXPIRED}, synchronize_session=False)
    )

    lapsed = (
        db.query(Booking)
        .filter(
            Booking.status == BookingStatus.PENDING,
            Booking.expires_at.is_not(None),
            Booking.expires_at <= now,
        )
        .update({Booking.status: BookingStatus.EXPIRED}, synchronize_session=False)
    )

    counts = {"ongoing": started, "completed": finished, "holds_expired": lapsed}
    if started or finished or lapsed:
        logger.info(f"Status sweep | {counts}")
    return counts


