from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_user
from app.core.logging_config import get_logger
from app.core.rate_limit import hold_rate_limit
from app.models.booking import Booking
from app.models.enums import BookingStatus, PaymentStatus
from app.models.payment import Payment
from app.models.user import User
from app.schemas.booking import AvailabilityOut, BookingOut, DateRange, HoldCreate, HoldOut
from app.services.availability import check_availability
from app.services.holds import HoldRequest, create_hold
from app.services.notifications import notify_admins
from app.services.status_engine import advance_statuses
from app.services.transitions import set_status

router = APIRouter(prefix="/bookings", tags=["Bookings"])
logger = get_logger("booking")


# ---------------------------------------------------------------------
# CHECK DATES
# ---------------------------------------------------------------------
@router.post("/check-dates", response_model=AvailabilityOut)
def check_dates(
    data: DateRange,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    result = check_availability(db, data.apartment_id, data.check_in, data.check_out)
    return AvailabilityOut(available=result.available, conflicts=result.conflicts)


# ---------------------------------------------------------------------
# CREATE HOLD
# ---------------------------------------------------------------------
@router.post("/hold", response_model=HoldOut, status_code=201)
def create_booking_hold(
    data: HoldCreate,
    background_tasks: BackgroundTasks,
    user: User = Depends(hold_rate_limit),
    db: Session = Depends(get_db),
):
    hold = create_hold(
        db,
        user.id,
        HoldRequest(
            apartment_id=data.apartment_id,
            start_date=data.check_in,
            end_date=data.check_out,
            guests=data.guests,
            guest_details=[g.model_dump() for g in data.guest_details],
        ),
    )

    background_tasks.add_task(
        notify_admins,
        type="booking",
        title="Booking Request",
        content="A booking hold was created and is awaiting payment.",
        user_id=user.id,
        booking_id=hold.booking_id,
        meta={
            "status": BookingStatus.PENDING.value,
            "apartment_id": data.apartment_id,
            "check_in": data.check_in.isoformat(),
            "check_out": data.check_out.isoformat(),
        },
    )

    return HoldOut(
        booking_id=hold.booking_id,
        expires_at=hold.expires_at,
        nights=hold.nights,
        total_amount=hold.total_amount,
    )


# ---------------------------------------------------------------------
# USER - MY BOOKINGS
# ---------------------------------------------------------------------
@router.get("/my", response_model=list[BookingOut])
def my_bookings(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    advance_statuses(db)
    db.commit()

    return (
        db.query(Booking)
        .filter(Booking.user_id == user.id)
        .order_by(Booking.start_date.desc())
        .all()
    )


@router.get("/{booking_id}", response_model=BookingOut)
def get_booking(booking_id: int, user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    advance_statuses(db)
    db.commit()

    booking = db.query(Booking).filter(
        Booking.id == booking_id,
        Booking.user_id == user.id,
    ).first()
    if not booking:
        raise HTTPException(status_code=404, detail="Booking not found")
    return booking


# ---------------------------------------------------------------------
# CANCEL BOOKING
# ---------------------------------------------------------------------
@router.patch("/{booking_id}/cancel", response_model=BookingOut)
def cancel_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    booking = set_status(db, booking_id, BookingStatus.CANCELLED, actor=user)

    paid = db.query(Payment.id).filter(
        Payment.booking_id == booking.id,
        Payment.status == PaymentStatus.PAID,
    ).first()
    db.commit()

    if paid:
        background_tasks.add_task(
            notify_admins,
            type="booking",
            title="Refund Requested",
            content=f"Booking #{booking.id} was cancelled by the guest after payment.",
            user_id=user.id,
            booking_id=booking.id,
            level="warning",
        )
    return booking
