"""
Shared fixtures: a throwaway SQLite database, a fixed clock and a payment
gateway stub that keeps Razorpay's real signature check.
"""
import hashlib
import hmac
import os
import tempfile
from datetime import datetime

# Configure the app before anything imports app.core.config
_TMP_DIR = tempfile.mkdtemp(prefix="apartment-booking-tests-")
os.environ["DATABASE_URL"] = f"sqlite:///{_TMP_DIR}/test.db"
os.environ["LOG_DIR"] = os.path.join(_TMP_DIR, "logs")
os.environ["JWT_SECRET"] = "test-jwt-secret"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "rzp_test_secret"
os.environ["REDIS_URL"] = ""

import pytest
import razorpay

import app.db.base  # noqa: F401
from app.core.security import hash_password, create_access_token
from app.db.session import Base, SessionLocal, engine
from app.models.apartment import Apartment
from app.models.enums import UserRole
from app.models.user import User
from app.services.errors import GatewayError
from app.utils.razorpay_client import RazorpayGateway, to_paise

KEY_SECRET = "rzp_test_secret"

# 2025-05-20 12:00 UTC
NOW = datetime(2025, 5, 20, 12, 0, 0)


def sign(order_id: str, payment_id: str, secret: str = KEY_SECRET) -> str:
    return hmac.new(
        secret.encode(), f"{order_id}|{payment_id}".encode(), hashlib.sha256
    ).hexdigest()


class StubGateway(RazorpayGateway):
    """Real signature verification; orders, payments and refunds are canned."""

    def __init__(self):
        super().__init__(razorpay.Client(auth=("rzp_test_key", KEY_SECRET)))
        self.payments = {}
        self.orders = []
        self.refunds = []
        self.fetch_calls = 0
        self.fail_fetch = False

    def add_payment(self, payment_id, order_id, amount, method="upi", status="captured"):
        self.payments[payment_id] = {
            "id": payment_id,
            "order_id": order_id,
            "amount": to_paise(amount),
            "method": method,
            "status": status,
        }

    def create_order(self, amount, receipt):
        order = {"id": f"order_{len(self.orders) + 1}", "amount": to_paise(amount), "receipt": receipt}
        self.orders.append(order)
        return order

    def fetch_payment(self, payment_id):
        self.fetch_calls += 1
        if self.fail_fetch or payment_id not in self.payments:
            raise GatewayError("Could not fetch payment details")
        return self.payments[payment_id]

    def refund(self, payment_id, amount):
        refund = {"id": f"rfnd_{len(self.refunds) + 1}", "payment_id": payment_id, "amount": to_paise(amount)}
        self.refunds.append(refund)
        return refund


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(engine)
    yield
    Base.metadata.drop_all(engine)


@pytest.fixture
def db():
    session = SessionLocal()
    yield session
    session.close()


@pytest.fixture
def gateway():
    return StubGateway()


@pytest.fixture
def make_user(db):
    def _make(email="guest@example.com", role=UserRole.USER, name="Guest"):
        user = User(name=name, email=email, password_hash=hash_password("secret"), role=role)
        db.add(user)
        db.commit()
        return user
    return _make


@pytest.fixture
def make_apartment(db):
    def _make(**overrides):
        fields = dict(
            title="Sea View Flat",
            location="Goa",
            price_per_night=1000.0,
            cleaning_fee=0.0,
            max_guests=4,
            is_available=True,
            requires_verification=False,
            deleted=False,
        )
        fields.update(overrides)
        apartment = Apartment(**fields)
        db.add(apartment)
        db.commit()
        return apartment
    return _make


@pytest.fixture
def user(make_user):
    return make_user()


@pytest.fixture
def admin(make_user):
    return make_user(email="admin@example.com", role=UserRole.ADMIN, name="Admin")


@pytest.fixture
def apartment(make_apartment):
    return make_apartment()


def auth_headers(user: User) -> dict:
    token = create_access_token({"sub": user.email, "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}
