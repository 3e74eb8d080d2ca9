from datetime import date


def count_nights(start_date: date, end_date: date) -> int:
    return (end_date - start_date).days


def calculate_booking_price(apartment, start_date: date, end_date: date):
    """Server-side price for a stay: nights at the nightly rate plus the
    apartment's fixed cleaning fee. Returns ``(nights, total_amount)``."""
    nights = count_nights(start_date, end_date)
    if nights <= 0:
        raise ValueError("Stay must be at least one night")

    total = nights * apartment.price_per_night + (apartment.cleaning_fee or 0.0)
    return nights, round(total, 2)
