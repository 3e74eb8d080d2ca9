"""Payment reconciliation against the gateway.

A booking only becomes ``confirmed`` through a verified payment (or an admin
after document review), and the status flip and the ``paid`` payment row are
written in the same transaction.
"""
from dataclasses import dataclass
from datetime import datetime

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.logging_config import get_logger
from app.models.apartment import Apartment
from app.models.booking import Booking
from app.models.enums import BookingStatus, PaymentStatus
from app.models.payment import Payment
from app.services.availability import find_conflicts, serialize_conflicts
from app.services.errors import (
    AmountMismatch,
    BookingError,
    DatesUnavailable,
    DbError,
    GatewayError,
    InvalidSignature,
    InvalidTransition,
    NotFound,
)
from app.utils.razorpay_client import to_paise

logger = get_logger("payment")

SETTLED_GATEWAY_STATES = {"authorized", "captured"}


@dataclass
class PaymentConfirmation:
    success: bool
    booking_id: int
    method: str
    amount: float
    payment_id: int
    already_processed: bool = False


@dataclass
class Order:
    order_id: str
    amount: float
    currency: str
    key_id: str


def _hold_is_live(booking: Booking, now: datetime) -> bool:
    return booking.status == BookingStatus.PENDING and (
        booking.expires_at is None or booking.expires_at > now
    )


def _is_lapsed_hold(booking: Booking) -> bool:
    # a hold that timed out; completed stays have expires_at cleared on confirm
    if booking.status == BookingStatus.PENDING:
        return True
    return booking.status == BookingStatus.EXPIRED and booking.expires_at is not None


def _recorded_payment(db: Session, payment_id: str):
    """Result of an earlier reconciliation of ``payment_id``, if any."""
    payment = db.query(Payment).filter(Payment.gateway_payment_id == payment_id).first()
    result = None
    if payment:
        result = PaymentConfirmation(
            True, payment.booking_id, payment.method, payment.amount, payment.id, already_processed=True
        )
    db.rollback()
    return result


# ---------------------------------------------------------------------
# ORDER
# ---------------------------------------------------------------------
def create_order(db: Session, gateway, booking_id: int, user_id: int, now: datetime | None = None) -> Order:
    now = now or datetime.utcnow()

    booking = db.query(Booking).filter(
        Booking.id == booking_id,
        Booking.user_id == user_id,
    ).first()
    if not booking:
        raise NotFound("Booking not found")

    if not _hold_is_live(booking, now):
        raise InvalidTransition("Booking hold is no longer active")

    amount, stored_order_id = booking.total_amount, booking.gateway_order_id
    # release the transaction before the network call
    db.rollback()

    if stored_order_id:
        return Order(stored_order_id, amount, gateway.currency, gateway.key_id)

    order = gateway.create_order(amount, receipt=f"booking_{booking_id}")

    try:
        claimed = (
            db.query(Booking)
            .filter(Booking.id == booking_id, Booking.gateway_order_id.is_(None))
            .update({Booking.gateway_order_id: order["id"]}, synchronize_session=False)
        )
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Order not stored | Booking={booking_id} | Order={order['id']} -> {e}")
        raise DbError()

    if not claimed:
        # a concurrent request stored its order first
        db.refresh(booking)
        return Order(booking.gateway_order_id, amount, gateway.currency, gateway.key_id)

    logger.info(f"Order Created | Booking={booking_id} | Order={order['id']} | Amount={amount}")
    return Order(order["id"], amount, gateway.currency, gateway.key_id)


# ---------------------------------------------------------------------
# CONFIRM
# ---------------------------------------------------------------------
def confirm_payment(
    db: Session,
    gateway,
    booking_id: int,
    order_id: str,
    payment_id: str,
    signature: str,
    now: datetime | None = None,
) -> PaymentConfirmation:
    now = now or datetime.utcnow()

    if not gateway.verify_signature(order_id, payment_id, signature):
        logger.warning(f"Invalid signature | Booking={booking_id} | Order={order_id}")
        raise InvalidSignature()

    existing = _recorded_payment(db, payment_id)
    if existing:
        if existing.booking_id != booking_id:
            raise InvalidTransition("Payment already recorded for another booking")
        return existing

    # amount and method come from the gateway, never from the client
    details = gateway.fetch_payment(payment_id)
    if details.get("order_id") != order_id:
        logger.warning(f"Order mismatch | Booking={booking_id} | Order={order_id} | Payment={payment_id}")
        raise InvalidSignature()
    if details.get("status") not in SETTLED_GATEWAY_STATES:
        raise GatewayError(f"Payment is {details.get('status')}, not completed")

    amount = details["amount"] / 100
    method = details.get("method") or "unknown"

    try:
        booking = db.query(Booking).filter(Booking.id == booking_id).first()
        if not booking:
            raise NotFound("Booking not found")

        db.query(Apartment).filter(Apartment.id == booking.apartment_id).with_for_update().one()
        booking = db.query(Booking).filter(Booking.id == booking_id).with_for_update().one()
        db.refresh(booking)

        # the payment must settle the order issued for this booking
        if booking.gateway_order_id != order_id:
            logger.warning(f"Order not issued for booking | Booking={booking_id} | Order={order_id}")
            raise InvalidSignature()

        if not _hold_is_live(booking, now):
            if not _is_lapsed_hold(booking) or booking.start_date < now.date():
                raise InvalidTransition(f"Booking is {booking.status.value}")

            # paid after the hold ran out: keep it only if nobody took the slot
            conflicts = find_conflicts(
                db, booking.apartment_id, booking.start_date, booking.end_date, now,
                exclude_booking_id=booking.id,
            )
            if conflicts:
                raise DatesUnavailable(serialize_conflicts(conflicts))

        if to_paise(amount) != to_paise(booking.total_amount):
            raise AmountMismatch(expected=booking.total_amount, paid=amount)

        booking.status = BookingStatus.CONFIRMED
        booking.expires_at = None
        booking.updated_at = now

        payment = Payment(
            booking_id=booking.id,
            amount=amount,
            method=method,
            gateway_payment_id=payment_id,
            gateway_order_id=order_id,
            status=PaymentStatus.PAID,
            paid_at=now,
        )
        db.add(payment)
        db.commit()

    except BookingError as e:
        db.rollback()
        # money was taken but the booking could not be confirmed
        logger.error(f"Payment not applied | Booking={booking_id} | Payment={payment_id} | {e.code}")
        raise
    except IntegrityError:
        db.rollback()
        existing = _recorded_payment(db, payment_id)
        if existing and existing.booking_id == booking_id:
            return existing
        raise DbError()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Payment transaction failed | Booking={booking_id} | Payment={payment_id} -> {e}")
        raise DbError()

    logger.info(
        f"Payment Confirmed | Booking={booking_id} | Payment={payment_id} | Amount={amount} | Method={method}"
    )
    return PaymentConfirmation(True, booking_id, method, amount, payment.id)


# ---------------------------------------------------------------------
# REFUND
# ---------------------------------------------------------------------
def refund_payment(db: Session, gateway, booking_id: int, now: datetime | None = None) -> Payment:
    """Refund the paid payment of a booking and cancel the booking."""
    now = now or datetime.utcnow()

    payment = db.query(Payment).filter(
        Payment.booking_id == booking_id,
        Payment.status == PaymentStatus.PAID,
    ).first()
    if not payment:
        raise NotFound("No paid payment for this booking")

    booking = payment.booking
    if booking.status not in (BookingStatus.CONFIRMED, BookingStatus.ONGOING, BookingStatus.CANCELLED):
        raise InvalidTransition(f"Cannot refund a {booking.status.value} booking")

    payment_pk, gateway_payment_id, amount = payment.id, payment.gateway_payment_id, payment.amount
    db.rollback()

    refund = gateway.refund(gateway_payment_id, amount)

    try:
        payment = db.query(Payment).filter(Payment.id == payment_pk).with_for_update().one()
        booking = db.query(Booking).filter(Booking.id == booking_id).with_for_update().one()

        payment.status = PaymentStatus.REFUNDED
        payment.refund_id = refund.get("id")
        payment.refunded_at = now
        booking.status = BookingStatus.CANCELLED
        booking.updated_at = now
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(
            f"Refund issued but not recorded | Booking={booking_id} | Refund={refund.get('id')} -> {e}"
        )
        raise DbError()

    logger.info(f"Payment Refunded | Booking={booking_id} | Payment={gateway_payment_id} | Amount={amount}")
    return payment
