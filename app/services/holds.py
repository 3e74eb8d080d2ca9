"""Temporary holds: a pending booking that keeps a slot while the guest pays."""
from dataclasses import dataclass
from datetime import date, datetime, timedelta

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.config import HOLD_MINUTES, MAX_GUESTS_PER_BOOKING, MAX_STAY_NIGHTS
from app.core.logging_config import get_logger
from app.models.apartment import Apartment
from app.models.booking import Booking
from app.models.enums import BookingStatus
from app.services.availability import find_conflicts, serialize_conflicts
from app.services.errors import (
    BookingError,
    CapacityExceeded,
    DatesUnavailable,
    DbError,
    InvalidBookingRequest,
    NotFound,
)
from app.services.status_engine import advance_statuses
from app.utils.pricing import calculate_booking_price

logger = get_logger("booking")


@dataclass
class HoldRequest:
    apartment_id: int
    start_date: date
    end_date: date
    guests: int
    guest_details: list[dict] | None = None


@dataclass
class Hold:
    booking_id: int
    expires_at: datetime
    nights: int
    total_amount: float


def validate_request(request: HoldRequest, today: date) -> None:
    errors = []

    if request.start_date < today:
        errors.append("Start date cannot be in the past")
    if request.end_date <= request.start_date:
        errors.append("End date must be after start date")
    elif (request.end_date - request.start_date).days > MAX_STAY_NIGHTS:
        errors.append(f"Maximum stay is {MAX_STAY_NIGHTS} days")

    if request.guests < 1:
        errors.append("At least 1 guest required")
    elif request.guests > MAX_GUESTS_PER_BOOKING:
        errors.append(f"Maximum {MAX_GUESTS_PER_BOOKING} guests allowed")

    if request.guest_details and len(request.guest_details) > request.guests:
        errors.append("More guest details than guests")

    if errors:
        raise InvalidBookingRequest(errors)


def create_hold(
    db: Session,
    user_id: int,
    request: HoldRequest,
    now: datetime | None = None,
) -> Hold:
    """Validate and insert a pending booking in one transaction.

    The apartment row is locked before the overlap check so two requests for
    the same apartment run the check-then-insert one after the other.
    """
    now = now or datetime.utcnow()
    validate_request(request, now.date())

    try:
        # release the swept rows before waiting on the apartment lock
        advance_statuses(db, now)
        db.commit()

        apartment = (
            db.query(Apartment)
            .filter(
                Apartment.id == request.apartment_id,
                Apartment.deleted == False,  # noqa: E712
            )
            .with_for_update()
            .first()
        )
        if not apartment or not apartment.is_available:
            raise NotFound("Apartment not found")

        if request.guests > apartment.max_guests:
            raise CapacityExceeded(
                f"Maximum {apartment.max_guests} guests allowed for this apartment"
            )

        conflicts = find_conflicts(
            db, apartment.id, request.start_date, request.end_date, now
        )
        if conflicts:
            raise DatesUnavailable(serialize_conflicts(conflicts))

        nights, total_amount = calculate_booking_price(
            apartment, request.start_date, request.end_date
        )
        expires_at = now + timedelta(minutes=HOLD_MINUTES)

        booking = Booking(
            user_id=user_id,
            apartment_id=apartment.id,
            start_date=request.start_date,
            end_date=request.end_date,
            guests=request.guests,
            guest_details=request.guest_details or [],
            status=BookingStatus.PENDING,
            expires_at=expires_at,
            nights=nights,
            total_amount=total_amount,
            created_at=now,
            updated_at=now,
        )
        db.add(booking)
        db.commit()

    except BookingError as e:
        db.rollback()
        logger.info(
            f"Hold Rejected | User={user_id} | Apartment={request.apartment_id} "
            f"| {request.start_date}..{request.end_date} | {e.code}"
        )
        raise
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Hold Failed | User={user_id} | Apartment={request.apartment_id} -> {e}")
        raise DbError()

    logger.info(
        f"Hold Created | Booking={booking.id} | User={user_id} | Apartment={apartment.id} "
        f"| {booking.start_date}..{booking.end_date} | Expires={expires_at.isoformat()}"
    )
    return Hold(
        booking_id=booking.id,
        expires_at=expires_at,
        nights=nights,
        total_amount=total_amount,
    )
