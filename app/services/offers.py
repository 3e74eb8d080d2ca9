"""Promotional offers shown next to apartment prices.

Offers are advertised on listings only; hold totals stay at the list price.
"""
from datetime import date

from sqlalchemy.orm import Session

from app.models.offer import Offer


def applies_to(offer: Offer, apartment_id: int) -> bool:
    return offer.apartment_ids is None or apartment_id in offer.apartment_ids


def active_offers(db: Session, apartment_id: int, today: date | None = None) -> list[Offer]:
    """Live offers for an apartment, best discount first."""
    today = today or date.today()

    offers = (
        db.query(Offer)
        .filter(
            Offer.is_active == True,  # noqa: E712
            Offer.valid_from <= today,
            Offer.valid_until >= today,
        )
        .order_by(Offer.discount_percentage.desc(), Offer.id)
        .all()
    )
    # apartment_ids is JSON; filtered here so SQLite and PostgreSQL behave alike
    return [o for o in offers if applies_to(o, apartment_id)]


def discounted_price(price: float, offers: list[Offer]) -> float:
    if not offers:
        return price
    best = offers[0].discount_percentage
    return round(price - price * best / 100, 2)
