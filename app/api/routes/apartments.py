from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, require_admin
from app.core.logging_config import get_logger
from app.core.redis import get_cache, set_cache, delete_cache
from app.models.apartment import Apartment
from app.models.user import User
from app.schemas.apartment import ApartmentCreate, ApartmentOut
from app.schemas.booking import BookedRange
from app.services.availability import booked_ranges

router = APIRouter(prefix="/apartments", tags=["Apartments"])
admin_logger = get_logger("admin")

LISTING_CACHE_KEY = "listing"


def get_apartment_or_404(db: Session, apartment_id: int) -> Apartment:
    apartment = db.query(Apartment).filter(
        Apartment.id == apartment_id,
        Apartment.deleted == False,  # noqa: E712
    ).first()
    if not apartment:
        raise HTTPException(status_code=404, detail="Apartment not found")
    return apartment


# =====================================================================
# CREATE APARTMENT (Admin Only)
# =====================================================================
@router.post("/", response_model=ApartmentOut, status_code=201)
def create_apartment(
    data: ApartmentCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    apartment = Apartment(**data.model_dump(), deleted=False)
    db.add(apartment)
    db.commit()
    db.refresh(apartment)

    delete_cache(LISTING_CACHE_KEY)
    admin_logger.info(f"Apartment Created | Apartment={apartment.id} | By={admin.email}")
    return apartment


# =====================================================================
# EDIT APARTMENT (Admin Only)
# =====================================================================
@router.put("/{apartment_id}", response_model=ApartmentOut)
def edit_apartment(
    apartment_id: int,
    data: ApartmentCreate,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    apartment = get_apartment_or_404(db, apartment_id)

    for field, value in data.model_dump().items():
        setattr(apartment, field, value)
    db.commit()

    delete_cache(LISTING_CACHE_KEY)
    admin_logger.info(f"Apartment Updated | Apartment={apartment.id} | By={admin.email}")
    return apartment


# =====================================================================
# DELETE APARTMENT (Soft delete)
# =====================================================================
@router.delete("/{apartment_id}")
def delete_apartment(
    apartment_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    apartment = get_apartment_or_404(db, apartment_id)
    apartment.deleted = True
    db.commit()

    delete_cache(LISTING_CACHE_KEY)
    admin_logger.info(f"Apartment Deleted | Apartment={apartment.id} | By={admin.email}")
    return {"message": "Apartment deleted successfully"}


# =====================================================================
# LIST APARTMENTS (Public)
# =====================================================================
@router.get("/", response_model=list[ApartmentOut])
def list_apartments(db: Session = Depends(get_db)):
    cached = get_cache(LISTING_CACHE_KEY)
    if cached is not None:
        return cached

    apartments = (
        db.query(Apartment)
        .filter(Apartment.deleted == False, Apartment.is_available == True)  # noqa: E712
        .order_by(Apartment.id)
        .all()
    )
    result = [ApartmentOut.model_validate(a).model_dump() for a in apartments]
    set_cache(LISTING_CACHE_KEY, result)
    return result


# =====================================================================
# APARTMENT DETAILS
# =====================================================================
@router.get("/{apartment_id}", response_model=ApartmentOut)
def get_apartment(apartment_id: int, db: Session = Depends(get_db)):
    return get_apartment_or_404(db, apartment_id)


# =====================================================================
# BOOKED DATES (calendar)
# =====================================================================
@router.get("/{apartment_id}/booked-dates", response_model=list[BookedRange])
def apartment_booked_dates(apartment_id: int, db: Session = Depends(get_db)):
    get_apartment_or_404(db, apartment_id)
    return booked_ranges(db, apartment_id)
