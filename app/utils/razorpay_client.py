import razorpay
import requests
from razorpay.errors import BadRequestError, ServerError, SignatureVerificationError
from razorpay.errors import GatewayError as RazorpayGatewayError

from app.core.config import RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET, PAYMENT_CURRENCY
from app.core.logging_config import get_logger
from app.services.errors import GatewayError

logger = get_logger("payment")

razorpay_client = razorpay.Client(auth=(RAZORPAY_KEY_ID, RAZORPAY_KEY_SECRET))

_UPSTREAM_ERRORS = (BadRequestError, ServerError, RazorpayGatewayError, requests.RequestException)


def to_paise(amount: float) -> int:
    return int(round(amount * 100))


class RazorpayGateway:
    """The slice of Razorpay the booking flow talks to."""

    def __init__(self, client: razorpay.Client | None = None, currency: str = PAYMENT_CURRENCY):
        self.client = client or razorpay_client
        self.currency = currency

    @property
    def key_id(self) -> str:
        return self.client.auth[0]

    def verify_signature(self, order_id: str, payment_id: str, signature: str) -> bool:
        # HMAC-SHA256 of "order_id|payment_id" with the key secret
        if not self.client.auth[1]:
            logger.error("Signature check refused: RAZORPAY_KEY_SECRET is not configured")
            return False
        try:
            return bool(self.client.utility.verify_payment_signature({
                "razorpay_order_id": order_id,
                "razorpay_payment_id": payment_id,
                "razorpay_signature": signature,
            }))
        except SignatureVerificationError:
            return False

    def create_order(self, amount: float, receipt: str) -> dict:
        try:
            return self.client.order.create({
                "amount": to_paise(amount),
                "currency": self.currency,
                "receipt": receipt,
            })
        except _UPSTREAM_ERRORS as e:
            logger.error(f"Razorpay order create failed | {receipt} -> {e}")
            raise GatewayError("Could not create payment order")

    def fetch_payment(self, payment_id: str) -> dict:
        try:
            payment = self.client.payment.fetch(payment_id)
        except _UPSTREAM_ERRORS as e:
            logger.error(f"Razorpay payment fetch failed | {payment_id} -> {e}")
            raise GatewayError("Could not fetch payment details")

        if not payment or payment.get("error"):
            raise GatewayError("Could not fetch payment details")
        return payment

    def refund(self, payment_id: str, amount: float) -> dict:
        try:
            return self.client.payment.refund(payment_id, {"amount": to_paise(amount)})
        except _UPSTREAM_ERRORS as e:
            logger.error(f"Razorpay refund failed | {payment_id} -> {e}")
            raise GatewayError("Refund request failed")
