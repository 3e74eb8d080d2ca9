from datetime import date, timedelta

import pytest
from fastapi.testclient import TestClient
from limits.storage import MemoryStorage

from app.core.dependencies import get_payment_gateway
from app.core.rate_limit import get_rate_limit_storage
from app.main import app
from app.models.enums import BookingStatus, PaymentStatus
from app.models.notification import AdminNotification
from app.models.payment import Payment

from conftest import auth_headers, sign

CHECK_IN = date.today() + timedelta(days=10)
CHECK_OUT = CHECK_IN + timedelta(days=3)


@pytest.fixture
def client(gateway):
    storage = MemoryStorage()
    app.dependency_overrides[get_payment_gateway] = lambda: gateway
    app.dependency_overrides[get_rate_limit_storage] = lambda: storage
    with TestClient(app) as c:
        yield c
    app.dependency_overrides.clear()


def hold_body(apartment_id, check_in=CHECK_IN, check_out=CHECK_OUT, guests=2, **extra):
    return {
        "apartment_id": apartment_id,
        "check_in": check_in.isoformat(),
        "check_out": check_out.isoformat(),
        "guests": guests,
        **extra,
    }


def place_hold(client, user, apartment_id, **kwargs):
    res = client.post("/bookings/hold", json=hold_body(apartment_id, **kwargs), headers=auth_headers(user))
    assert res.status_code == 201, res.text
    return res.json()


class TestAuth:

    def test_register_and_login(self, client):
        res = client.post("/auth/register", json={"name": "Asha", "email": "asha@example.com", "password": "pw123456"})
        assert res.status_code == 201
        assert res.json()["role"] == "user"

        res = client.post("/auth/login", json={"email": "asha@example.com", "password": "pw123456"})
        assert res.status_code == 200
        assert res.json()["token_type"] == "bearer"

    def test_wrong_password(self, client, user):
        res = client.post("/auth/login", json={"email": user.email, "password": "nope"})
        assert res.status_code == 401

    def test_user_cannot_create_admins(self, client, user):
        res = client.post(
            "/auth/admin/register",
            json={"name": "X", "email": "x@example.com", "password": "pw123456"},
            headers=auth_headers(user),
        )
        assert res.status_code == 403


class TestHolds:

    def test_hold_requires_login(self, client, apartment):
        res = client.post("/bookings/hold", json=hold_body(apartment.id))
        assert res.status_code in (401, 403)

    def test_hold_created_and_admins_notified(self, client, db, user, apartment):
        body = place_hold(client, user, apartment.id)

        assert body["nights"] == 3
        assert body["total_amount"] == 3000.0

        notes = [(n.title, n.booking_id) for n in db.query(AdminNotification).all()]
        db.rollback()
        assert notes == [("Booking Request", body["booking_id"])]

    def test_overlap_returns_conflicts(self, client, user, apartment):
        first = place_hold(client, user, apartment.id)

        res = client.post(
            "/bookings/hold",
            json=hold_body(apartment.id, check_in=CHECK_IN + timedelta(days=1), check_out=CHECK_OUT + timedelta(days=2)),
            headers=auth_headers(user),
        )

        assert res.status_code == 409
        payload = res.json()
        assert payload["code"] == "DATES_NOT_AVAILABLE"
        assert payload["conflicts"] == [
            {"id": first["booking_id"], "start_date": CHECK_IN.isoformat(), "end_date": CHECK_OUT.isoformat()}
        ]

    def test_back_to_back_stays_allowed(self, client, user, apartment):
        place_hold(client, user, apartment.id)
        place_hold(client, user, apartment.id, check_in=CHECK_OUT, check_out=CHECK_OUT + timedelta(days=2))

    def test_too_many_guests(self, client, user, apartment):
        res = client.post("/bookings/hold", json=hold_body(apartment.id, guests=6), headers=auth_headers(user))
        assert res.status_code == 400
        assert res.json()["code"] == "EXCEEDS_MAX_GUESTS"

    def test_past_dates_rejected(self, client, user, apartment):
        yesterday = date.today() - timedelta(days=1)
        res = client.post(
            "/bookings/hold",
            json=hold_body(apartment.id, check_in=yesterday, check_out=yesterday + timedelta(days=2)),
            headers=auth_headers(user),
        )
        assert res.status_code == 400
        assert res.json()["code"] == "VALIDATION_ERROR"

    def test_reversed_dates_rejected_by_schema(self, client, user, apartment):
        res = client.post(
            "/bookings/hold",
            json=hold_body(apartment.id, check_in=CHECK_OUT, check_out=CHECK_IN),
            headers=auth_headers(user),
        )
        assert res.status_code == 422

    def test_unknown_apartment(self, client, user):
        res = client.post("/bookings/hold", json=hold_body(12345), headers=auth_headers(user))
        assert res.status_code == 404

    def test_hold_rate_limited(self, client, user, make_apartment):
        apartment = make_apartment(max_guests=10)
        for i in range(5):
            start = CHECK_IN + timedelta(days=i * 2)
            place_hold(client, user, apartment.id, check_in=start, check_out=start + timedelta(days=1))

        res = client.post(
            "/bookings/hold",
            json=hold_body(apartment.id, check_in=CHECK_IN + timedelta(days=20), check_out=CHECK_IN + timedelta(days=21)),
            headers=auth_headers(user),
        )
        assert res.status_code == 429

    def test_check_dates_and_booked_ranges(self, client, user, apartment):
        place_hold(client, user, apartment.id)

        res = client.post(
            "/bookings/check-dates",
            json={"apartment_id": apartment.id, "check_in": CHECK_IN.isoformat(), "check_out": CHECK_OUT.isoformat()},
            headers=auth_headers(user),
        )
        assert res.status_code == 200
        assert res.json()["available"] is False

        res = client.get(f"/apartments/{apartment.id}/booked-dates")
        assert res.json() == [{"start_date": CHECK_IN.isoformat(), "end_date": CHECK_OUT.isoformat()}]

    def test_owner_cancels_hold(self, client, user, apartment):
        hold = place_hold(client, user, apartment.id)

        res = client.patch(f"/bookings/{hold['booking_id']}/cancel", headers=auth_headers(user))
        assert res.status_code == 200
        assert res.json()["status"] == "cancelled"

        res = client.get("/bookings/my", headers=auth_headers(user))
        assert [b["status"] for b in res.json()] == ["cancelled"]


class TestPaymentFlow:

    def test_order_verify_confirms_booking(self, client, db, gateway, user, apartment):
        hold = place_hold(client, user, apartment.id)

        res = client.post("/payments/create-order", json={"booking_id": hold["booking_id"]}, headers=auth_headers(user))
        assert res.status_code == 200
        order = res.json()
        assert order["amount"] == 3000.0
        assert order["currency"] == "INR"
        assert order["key_id"] == "rzp_test_key"

        gateway.add_payment("pay_api_1", order["order_id"], amount=3000.0, method="upi")
        verify = {
            "booking_id": hold["booking_id"],
            "razorpay_order_id": order["order_id"],
            "razorpay_payment_id": "pay_api_1",
            "razorpay_signature": sign(order["order_id"], "pay_api_1"),
        }
        res = client.post("/payments/verify", json=verify)
        assert res.status_code == 200
        assert res.json() == {"success": True, "method": "upi", "amount": 3000.0}

        # replay is harmless
        res = client.post("/payments/verify", json=verify)
        assert res.status_code == 200

        payment_states = [p.status for p in db.query(Payment).all()]
        titles = [n.title for n in db.query(AdminNotification).all()]
        headers = auth_headers(user)
        db.rollback()
        assert payment_states == [PaymentStatus.PAID]
        assert titles.count("Payment Received") == 1

        res = client.get(f"/bookings/{hold['booking_id']}", headers=headers)
        assert res.json()["status"] == BookingStatus.CONFIRMED.value

    def test_bad_signature(self, client, gateway, user, apartment):
        hold = place_hold(client, user, apartment.id)
        res = client.post("/payments/create-order", json={"booking_id": hold["booking_id"]}, headers=auth_headers(user))
        order_id = res.json()["order_id"]

        res = client.post("/payments/verify", json={
            "booking_id": hold["booking_id"],
            "razorpay_order_id": order_id,
            "razorpay_payment_id": "pay_x",
            "razorpay_signature": "0" * 64,
        })

        assert res.status_code == 400
        assert res.json() == {"error": "Invalid payment signature", "code": "INVALID_SIGNATURE"}
        assert gateway.fetch_calls == 0


class TestAdmin:

    def test_admin_confirms_and_user_is_blocked(self, client, user, admin, apartment):
        hold = place_hold(client, user, apartment.id)

        res = client.put(
            f"/admin/bookings/{hold['booking_id']}/status",
            json={"status": "confirmed"},
            headers=auth_headers(user),
        )
        assert res.status_code == 403

        res = client.put(
            f"/admin/bookings/{hold['booking_id']}/status",
            json={"status": "confirmed", "admin_notes": "verified by phone"},
            headers=auth_headers(admin),
        )
        assert res.status_code == 200
        assert res.json()["status"] == "confirmed"
        assert res.json()["expires_at"] is None

    def test_illegal_transition(self, client, user, admin, apartment):
        hold = place_hold(client, user, apartment.id)

        res = client.put(
            f"/admin/bookings/{hold['booking_id']}/status",
            json={"status": "ongoing"},
            headers=auth_headers(admin),
        )
        assert res.status_code == 409
        assert res.json()["code"] == "INVALID_TRANSITION"

    def test_admin_lists_bookings_by_status(self, client, user, admin, apartment):
        place_hold(client, user, apartment.id)

        res = client.get("/admin/bookings", params={"status": "pending"}, headers=auth_headers(admin))
        assert res.status_code == 200
        assert len(res.json()) == 1

        res = client.get("/admin/bookings", params={"status": "confirmed"}, headers=auth_headers(admin))
        assert res.json() == []

    @pytest.mark.parametrize("params", [{"page": 0}, {"limit": 0}, {"limit": 500}])
    def test_paging_is_bounded(self, client, admin, params):
        res = client.get("/admin/bookings", params=params, headers=auth_headers(admin))
        assert res.status_code == 422

    def test_second_page(self, client, user, admin, make_apartment):
        apartment = make_apartment(max_guests=10)
        for i in range(3):
            start = CHECK_IN + timedelta(days=i * 2)
            place_hold(client, user, apartment.id, check_in=start, check_out=start + timedelta(days=1))

        res = client.get("/admin/bookings", params={"page": 2, "limit": 2}, headers=auth_headers(admin))
        assert res.status_code == 200
        assert [b["start_date"] for b in res.json()] == [CHECK_IN.isoformat()]
