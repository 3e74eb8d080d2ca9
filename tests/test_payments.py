from datetime import date, timedelta

import pytest

from app.models.booking import Booking
from app.models.enums import BookingStatus, PaymentStatus
from app.models.payment import Payment
from app.services.errors import (
    AmountMismatch,
    DatesUnavailable,
    GatewayError,
    InvalidSignature,
    InvalidTransition,
    NotFound,
)
from app.services.holds import HoldRequest, create_hold
from app.services.payments import confirm_payment, create_order, refund_payment

from conftest import NOW, sign


@pytest.fixture
def hold(db, user, apartment):
    return create_hold(
        db, user.id,
        HoldRequest(apartment_id=apartment.id, start_date=date(2025, 6, 1), end_date=date(2025, 6, 5), guests=2),
        now=NOW,
    )


@pytest.fixture
def ordered_hold(db, gateway, user, hold):
    order = create_order(db, gateway, hold.booking_id, user.id, now=NOW)
    return hold, order


def load(db, booking_id):
    db.expire_all()
    return db.query(Booking).filter(Booking.id == booking_id).one()


class TestCreateOrder:

    def test_order_uses_server_total(self, db, gateway, user, hold):
        order = create_order(db, gateway, hold.booking_id, user.id, now=NOW)

        assert order.amount == 4000.0
        assert gateway.orders[0]["amount"] == 400000
        assert load(db, hold.booking_id).gateway_order_id == order.order_id

    def test_repeat_call_reuses_order(self, db, gateway, user, hold):
        first = create_order(db, gateway, hold.booking_id, user.id, now=NOW)
        second = create_order(db, gateway, hold.booking_id, user.id, now=NOW)

        assert first.order_id == second.order_id
        assert len(gateway.orders) == 1

    def test_lapsed_hold_cannot_be_paid(self, db, gateway, user, hold):
        with pytest.raises(InvalidTransition):
            create_order(db, gateway, hold.booking_id, user.id, now=NOW + timedelta(minutes=31))

    def test_other_users_booking_is_hidden(self, db, gateway, make_user, hold):
        stranger = make_user(email="stranger@example.com")
        with pytest.raises(NotFound):
            create_order(db, gateway, hold.booking_id, stranger.id, now=NOW)


class TestConfirmPayment:

    def test_confirms_booking_and_records_gateway_amount(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        gateway.add_payment("pay_1", order.order_id, amount=4000.0, method="card")

        result = confirm_payment(
            db, gateway, hold.booking_id, order.order_id, "pay_1", sign(order.order_id, "pay_1"),
            now=NOW + timedelta(minutes=5),
        )

        assert result.success and result.method == "card" and result.amount == 4000.0
        booking = load(db, hold.booking_id)
        assert booking.status == BookingStatus.CONFIRMED
        assert booking.expires_at is None

        payments = db.query(Payment).all()
        assert len(payments) == 1
        assert payments[0].status == PaymentStatus.PAID
        assert payments[0].amount == 4000.0
        assert payments[0].gateway_payment_id == "pay_1"

    def test_underpayment_is_rejected(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        gateway.add_payment("pay_1", order.order_id, amount=3999.0)

        with pytest.raises(AmountMismatch) as exc:
            confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1",
                            sign(order.order_id, "pay_1"), now=NOW)

        assert exc.value.detail == {"expected": 4000.0, "paid": 3999.0}
        assert load(db, hold.booking_id).status == BookingStatus.PENDING
        assert db.query(Payment).count() == 0

    def test_payment_from_another_bookings_order_is_rejected(self, db, gateway, user, make_apartment):
        villa = make_apartment(title="Villa", price_per_night=200000.0)
        hut = make_apartment(title="Hut", price_per_night=1.0)
        expensive = create_hold(
            db, user.id,
            HoldRequest(apartment_id=villa.id, start_date=date(2025, 6, 1), end_date=date(2025, 6, 2), guests=1),
            now=NOW,
        )
        cheap = create_hold(
            db, user.id,
            HoldRequest(apartment_id=hut.id, start_date=date(2025, 6, 1), end_date=date(2025, 6, 2), guests=1),
            now=NOW,
        )
        cheap_order = create_order(db, gateway, cheap.booking_id, user.id, now=NOW)
        gateway.add_payment("pay_cheap", cheap_order.order_id, amount=1.0)

        # the expensive hold never had an order issued
        with pytest.raises(InvalidSignature):
            confirm_payment(db, gateway, expensive.booking_id, cheap_order.order_id, "pay_cheap",
                            sign(cheap_order.order_id, "pay_cheap"), now=NOW)

        assert load(db, expensive.booking_id).status == BookingStatus.PENDING
        assert db.query(Payment).count() == 0

    def test_booking_without_order_cannot_be_confirmed(self, db, gateway, hold):
        gateway.add_payment("pay_1", "order_elsewhere", amount=4000.0)

        with pytest.raises(InvalidSignature):
            confirm_payment(db, gateway, hold.booking_id, "order_elsewhere", "pay_1",
                            sign("order_elsewhere", "pay_1"), now=NOW)
        assert db.query(Payment).count() == 0

    def test_tampered_signature_changes_nothing(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        gateway.add_payment("pay_1", order.order_id, amount=4000.0)
        forged = sign(order.order_id, "pay_1", secret="not-the-secret")

        with pytest.raises(InvalidSignature) as exc:
            confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1", forged, now=NOW)

        assert exc.value.message == "Invalid payment signature"
        assert gateway.fetch_calls == 0
        assert load(db, hold.booking_id).status == BookingStatus.PENDING
        assert db.query(Payment).count() == 0

    def test_signature_for_other_payment_rejected(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        with pytest.raises(InvalidSignature):
            confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_2",
                            sign(order.order_id, "pay_1"), now=NOW)
        assert db.query(Payment).count() == 0

    def test_gateway_failure_leaves_state_untouched(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        gateway.fail_fetch = True

        with pytest.raises(GatewayError):
            confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1",
                            sign(order.order_id, "pay_1"), now=NOW)

        assert load(db, hold.booking_id).status == BookingStatus.PENDING
        assert db.query(Payment).count() == 0

    def test_uncaptured_payment_rejected(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        gateway.add_payment("pay_1", order.order_id, amount=4000.0, status="failed")

        with pytest.raises(GatewayError):
            confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1",
                            sign(order.order_id, "pay_1"), now=NOW)
        assert db.query(Payment).count() == 0

    def test_payment_for_another_order_rejected(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        gateway.add_payment("pay_1", "order_other", amount=4000.0)

        with pytest.raises(InvalidSignature):
            confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1",
                            sign(order.order_id, "pay_1"), now=NOW)

    def test_retry_is_idempotent(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        gateway.add_payment("pay_1", order.order_id, amount=4000.0)
        signature = sign(order.order_id, "pay_1")

        confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1", signature, now=NOW)
        again = confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1", signature, now=NOW)

        assert again.already_processed
        assert db.query(Payment).count() == 1
        assert gateway.fetch_calls == 1

    def test_unknown_booking(self, db, gateway):
        gateway.add_payment("pay_1", "order_x", amount=10.0)
        with pytest.raises(NotFound):
            confirm_payment(db, gateway, 404, "order_x", "pay_1", sign("order_x", "pay_1"), now=NOW)
        assert db.query(Payment).count() == 0

    def test_late_payment_accepted_while_slot_is_free(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        gateway.add_payment("pay_1", order.order_id, amount=4000.0)

        result = confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1",
                                 sign(order.order_id, "pay_1"), now=NOW + timedelta(hours=2))

        assert result.success
        assert load(db, hold.booking_id).status == BookingStatus.CONFIRMED

    def test_late_payment_rejected_when_slot_was_taken(self, db, gateway, make_user, apartment, ordered_hold):
        hold, order = ordered_hold
        later = NOW + timedelta(hours=1)
        rival = make_user(email="rival@example.com")
        create_hold(
            db, rival.id,
            HoldRequest(apartment_id=apartment.id, start_date=date(2025, 6, 2), end_date=date(2025, 6, 4), guests=1),
            now=later,
        )
        gateway.add_payment("pay_1", order.order_id, amount=4000.0)

        with pytest.raises(DatesUnavailable):
            confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1",
                            sign(order.order_id, "pay_1"), now=later)

        assert load(db, hold.booking_id).status == BookingStatus.EXPIRED
        assert db.query(Payment).count() == 0

    def test_cancelled_booking_cannot_be_confirmed(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        booking = load(db, hold.booking_id)
        booking.status = BookingStatus.CANCELLED
        db.commit()
        gateway.add_payment("pay_1", order.order_id, amount=4000.0)

        with pytest.raises(InvalidTransition):
            confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1",
                            sign(order.order_id, "pay_1"), now=NOW)
        assert db.query(Payment).count() == 0


class TestRefund:

    def test_refund_marks_payment_and_cancels_booking(self, db, gateway, ordered_hold):
        hold, order = ordered_hold
        gateway.add_payment("pay_1", order.order_id, amount=4000.0)
        confirm_payment(db, gateway, hold.booking_id, order.order_id, "pay_1",
                        sign(order.order_id, "pay_1"), now=NOW)

        payment = refund_payment(db, gateway, hold.booking_id, now=NOW + timedelta(days=1))

        assert payment.status == PaymentStatus.REFUNDED
        assert payment.refund_id == "rfnd_1"
        assert gateway.refunds[0]["amount"] == 400000
        assert load(db, hold.booking_id).status == BookingStatus.CANCELLED
        # history is kept
        assert db.query(Payment).count() == 1

    def test_nothing_to_refund(self, db, gateway, hold):
        with pytest.raises(NotFound):
            refund_payment(db, gateway, hold.booking_id, now=NOW)
        assert gateway.refunds == []
