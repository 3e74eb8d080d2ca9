"""Domain errors raised by the reservation services.

Each error carries the HTTP status and a stable ``code`` so the API layer can
render it without knowing about individual cases.
"""


class BookingError(Exception):
    status_code = 400
    code = "BOOKING_ERROR"
    message = "Booking request failed"

    def __init__(self, message: str | None = None, **detail):
        self.message = message or self.message
        self.detail = detail
        super().__init__(self.message)

    def to_dict(self) -> dict:
        return {"error": self.message, "code": self.code, **self.detail}


class NotFound(BookingError):
    status_code = 404
    code = "NOT_FOUND"
    message = "Resource not found"


class CapacityExceeded(BookingError):
    status_code = 400
    code = "EXCEEDS_MAX_GUESTS"
    message = "Too many guests for this apartment"


class DatesUnavailable(BookingError):
    status_code = 409
    code = "DATES_NOT_AVAILABLE"
    message = "Apartment not available for selected dates"

    def __init__(self, conflicts: list[dict], message: str | None = None):
        super().__init__(message, conflicts=conflicts)
        self.conflicts = conflicts


class InvalidBookingRequest(BookingError):
    status_code = 400
    code = "VALIDATION_ERROR"
    message = "Invalid booking data"

    def __init__(self, errors: list[str]):
        super().__init__(f"Invalid booking data: {', '.join(errors)}", details=errors)
        self.errors = errors


class InvalidTransition(BookingError):
    status_code = 409
    code = "INVALID_TRANSITION"
    message = "Booking status change not allowed"


class VerificationRequired(InvalidTransition):
    code = "VERIFICATION_REQUIRED"
    message = "An approved identity document is required before confirming"


class InvalidSignature(BookingError):
    status_code = 400
    code = "INVALID_SIGNATURE"
    # never say which part of the signature was wrong
    message = "Invalid payment signature"

    def __init__(self):
        super().__init__()


class AmountMismatch(BookingError):
    status_code = 409
    code = "AMOUNT_MISMATCH"
    message = "Paid amount does not match the booking total"

    def __init__(self, expected: float, paid: float):
        super().__init__(expected=expected, paid=paid)


class GatewayError(BookingError):
    status_code = 502
    code = "GATEWAY_ERROR"
    message = "Payment gateway request failed"


class DbError(BookingError):
    status_code = 500
    code = "DATABASE_ERROR"
    message = "Database operation failed"
