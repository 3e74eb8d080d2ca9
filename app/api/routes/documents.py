import io
from datetime import date

from fastapi import APIRouter, BackgroundTasks, Depends, File, Form, HTTPException, UploadFile
from PIL import Image, UnidentifiedImageError
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_current_user
from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.document import Document
from app.models.enums import DocumentStatus
from app.models.user import User
from app.schemas.document import DocumentOut, document_details_adapter
from app.services.notifications import notify_admins
from app.utils.cloudinary_utils import upload_image

router = APIRouter(prefix="/documents", tags=["Documents"])
logger = get_logger()


# =====================================================================
#                  CONVERT ANY IMAGE TO JPEG (AUTO-CONVERT)
# =====================================================================
def convert_to_jpeg(upload_file: UploadFile) -> bytes:
    contents = upload_file.file.read()

    try:
        img = Image.open(io.BytesIO(contents)).convert("RGB")
    except (UnidentifiedImageError, OSError):
        raise HTTPException(status_code=400, detail="Invalid image file")

    buffer = io.BytesIO()
    img.save(buffer, format="JPEG", quality=90)
    buffer.seek(0)

    return buffer.read()


def parse_details(raw: str):
    try:
        details = document_details_adapter.validate_json(raw)
    except ValidationError as e:
        raise HTTPException(status_code=422, detail=e.errors(include_url=False))

    expiry = getattr(details, "expiry_date", None)
    if expiry is not None and expiry <= date.today():
        raise HTTPException(status_code=400, detail="Document has expired")
    return details


# =====================================================================
#                       UPLOAD DOCUMENT
# =====================================================================
@router.post("/", response_model=DocumentOut, status_code=201)
def upload_document(
    background_tasks: BackgroundTasks,
    details: str = Form(...),
    booking_id: int | None = Form(None),
    file: UploadFile = File(...),
    user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    parsed = parse_details(details)

    if booking_id is not None:
        booking = db.query(Booking.id).filter(
            Booking.id == booking_id,
            Booking.user_id == user.id,
        ).first()
        if not booking:
            raise HTTPException(status_code=404, detail="Booking not found")

    # no open transaction while the upload runs
    db.rollback()

    uploaded = upload_image(convert_to_jpeg(file))
    if not uploaded:
        raise HTTPException(status_code=502, detail="Document upload failed")

    document = Document(
        user_id=user.id,
        booking_id=booking_id,
        document_type=parsed.document_type,
        details=parsed.model_dump(mode="json"),
        image_url=uploaded["url"],
        public_id=uploaded["public_id"],
        status=DocumentStatus.PENDING,
    )
    db.add(document)
    db.commit()

    logger.info(f"Document Uploaded | Document={document.id} | User={user.email} | Type={parsed.document_type}")
    background_tasks.add_task(
        notify_admins,
        type="document",
        title="Document Submitted",
        content="A guest submitted an identity document for review.",
        user_id=user.id,
        booking_id=booking_id,
        meta={"document_id": document.id, "document_type": parsed.document_type},
    )
    return document


# =====================================================================
#                       MY DOCUMENTS
# =====================================================================
@router.get("/my", response_model=list[DocumentOut])
def my_documents(user: User = Depends(get_current_user), db: Session = Depends(get_db)):
    return (
        db.query(Document)
        .filter(Document.user_id == user.id)
        .order_by(Document.created_at.desc())
        .all()
    )
