from datetime import date

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, require_admin
from app.core.logging_config import get_logger
from app.models.apartment import Apartment
from app.models.offer import Offer
from app.models.user import User
from app.schemas.offer import ApartmentOffers, OfferCreate, OfferOut
from app.services.offers import active_offers, discounted_price

router = APIRouter(prefix="/offers", tags=["Offers"])
admin_logger = get_logger("admin")


def get_offer_or_404(db: Session, offer_id: int) -> Offer:
    offer = db.query(Offer).filter(Offer.id == offer_id, Offer.is_active == True).first()  # noqa: E712
    if not offer:
        raise HTTPException(status_code=404, detail="Offer not found")
    return offer


# =====================================================================
# LIST ACTIVE OFFERS (Public)
# =====================================================================
@router.get("/", response_model=list[OfferOut])
def list_offers(db: Session = Depends(get_db)):
    return (
        db.query(Offer)
        .filter(Offer.is_active == True)  # noqa: E712
        .order_by(Offer.created_at.desc())
        .all()
    )


# =====================================================================
# OFFERS FOR ONE APARTMENT (Public)
# =====================================================================
@router.get("/apartment/{apartment_id}", response_model=ApartmentOffers)
def apartment_offers(apartment_id: int, db: Session = Depends(get_db)):
    apartment = db.query(Apartment).filter(
        Apartment.id == apartment_id,
        Apartment.deleted == False,  # noqa: E712
    ).first()
    if not apartment:
        raise HTTPException(status_code=404, detail="Apartment not found")

    offers = active_offers(db, apartment_id, date.today())
    return ApartmentOffers(
        apartment_id=apartment_id,
        offers=[OfferOut.model_validate(o) for o in offers],
        best_discount=offers[0].discount_percentage if offers else 0.0,
        price_per_night=apartment.price_per_night,
        discounted_price_per_night=discounted_price(apartment.price_per_night, offers),
    )


# =====================================================================
# CREATE / EDIT / DELETE (Admin Only)
# =====================================================================
@router.post("/", response_model=OfferOut, status_code=201)
def create_offer(
    data: OfferCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    offer = Offer(**data.model_dump(), is_active=True)
    db.add(offer)
    db.commit()
    db.refresh(offer)

    admin_logger.info(f"Offer Created | Offer={offer.id} | {offer.discount_percentage}% | By={admin.email}")
    return offer


@router.put("/{offer_id}", response_model=OfferOut)
def edit_offer(
    offer_id: int,
    data: OfferCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    offer = get_offer_or_404(db, offer_id)

    for field, value in data.model_dump().items():
        setattr(offer, field, value)
    db.commit()
    db.refresh(offer)

    admin_logger.info(f"Offer Updated | Offer={offer.id} | By={admin.email}")
    return offer


@router.delete("/{offer_id}")
def delete_offer(
    offer_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    offer = get_offer_or_404(db, offer_id)
    offer.is_active = False
    db.commit()

    admin_logger.info(f"Offer Deleted | Offer={offer_id} | By={admin.email}")
    return {"message": "Offer deleted successfully"}
