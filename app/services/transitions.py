"""Event-driven booking status changes requested by admins and booking owners.

The clock-driven moves (ongoing, expired) belong to ``status_engine``; a
person can only confirm or cancel.
"""
from datetime import datetime

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging_config import get_logger
from app.models.apartment import Apartment
from app.models.booking import Booking
from app.models.document import Document
from app.models.enums import BookingStatus, DocumentStatus, UserRole
from app.services.availability import find_conflicts, serialize_conflicts
from app.services.errors import (
    BookingError,
    DatesUnavailable,
    DbError,
    InvalidTransition,
    NotFound,
    VerificationRequired,
)
from app.services.status_engine import advance_statuses

logger = get_logger("booking")


ADMIN_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CONFIRMED, BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED},
    BookingStatus.ONGOING: {BookingStatus.CANCELLED},
}

USER_TRANSITIONS = {
    BookingStatus.PENDING: {BookingStatus.CANCELLED},
    BookingStatus.CONFIRMED: {BookingStatus.CANCELLED},
}


def _has_approved_document(db: Session, booking: Booking) -> bool:
    document = (
        db.query(Document.id)
        .filter(
            Document.user_id == booking.user_id,
            Document.status == DocumentStatus.APPROVED,
            (Document.booking_id.is_(None)) | (Document.booking_id == booking.id),
        )
        .first()
    )
    return document is not None


def set_status(
    db: Session,
    booking_id: int,
    new_status: BookingStatus,
    actor,
    admin_notes: str | None = None,
    now: datetime | None = None,
) -> Booking:
    """Apply a requested transition for ``actor`` (a User)."""
    now = now or datetime.utcnow()
    is_admin = actor.role == UserRole.ADMIN

    try:
        # committed on its own so a rejected request still records expiries
        advance_statuses(db, now)
        db.commit()

        booking = db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking or (not is_admin and booking.user_id != actor.id):
            raise NotFound("Booking not found")

        # serialize with holds and payments on the same apartment
        apartment = (
            db.query(Apartment)
            .filter(Apartment.id == booking.apartment_id)
            .with_for_update()
            .one()
        )
        db.refresh(booking)

        current = booking.status
        if new_status == current:
            db.commit()
            return booking

        allowed = (ADMIN_TRANSITIONS if is_admin else USER_TRANSITIONS).get(current, set())
        if new_status not in allowed:
            raise InvalidTransition(f"Cannot change booking from {current.value} to {new_status.value}")

        if not is_admin and current == BookingStatus.CONFIRMED and booking.start_date <= now.date():
            raise InvalidTransition("Cannot cancel after check-in")

        if new_status == BookingStatus.CONFIRMED:
            if apartment.requires_verification and not _has_approved_document(db, booking):
                raise VerificationRequired()

            conflicts = find_conflicts(
                db, booking.apartment_id, booking.start_date, booking.end_date, now,
                exclude_booking_id=booking.id,
            )
            if conflicts:
                raise DatesUnavailable(serialize_conflicts(conflicts))
            booking.expires_at = None

        booking.status = new_status
        if admin_notes is not None:
            booking.admin_notes = admin_notes

        db.commit()
    except BookingError:
        db.rollback()
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Status change failed | Booking={booking_id} -> {e}")
        raise DbError()

    logger.info(
        f"Booking Status | Booking={booking.id} | {current.value} -> {new_status.value} "
        f"| By={actor.email} ({actor.role.value})"
    )
    return booking
