from datetime import datetime

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query
from sqlalchemy.orm import Session

from app.core.dependencies import get_db, get_payment_gateway, require_admin
from app.core.logging_config import get_logger
from app.models.booking import Booking
from app.models.document import Document
from app.models.enums import BookingStatus, DocumentStatus, PaymentStatus
from app.models.notification import AdminNotification
from app.models.payment import Payment
from app.models.user import User
from app.schemas.booking import BookingOut, StatusUpdate
from app.schemas.document import DocumentOut, DocumentReview
from app.schemas.payment import PaymentOut
from app.services.notifications import notify_admins
from app.services.payments import refund_payment
from app.services.status_engine import advance_statuses
from app.services.transitions import set_status
from app.utils.razorpay_client import RazorpayGateway

router = APIRouter(prefix="/admin", tags=["Admin"])
logger = get_logger("admin")


# ==================================================
# BOOKINGS
# ==================================================
@router.get("/bookings", response_model=list[BookingOut])
def list_bookings(
    status: BookingStatus | None = None,
    apartment_id: int | None = None,
    page: int = Query(1, ge=1),
    limit: int = Query(50, ge=1, le=200),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    advance_statuses(db)
    db.commit()

    query = db.query(Booking)
    if status is not None:
        query = query.filter(Booking.status == status)
    if apartment_id is not None:
        query = query.filter(Booking.apartment_id == apartment_id)

    return (
        query.order_by(Booking.start_date.desc())
        .offset((page - 1) * limit)
        .limit(limit)
        .all()
    )


@router.post("/bookings/sweep")
def sweep_statuses(admin: User = Depends(require_admin), db: Session = Depends(get_db)):
    counts = advance_statuses(db)
    db.commit()
    return counts


@router.put("/bookings/{booking_id}/status", response_model=BookingOut)
def update_booking_status(
    booking_id: int,
    data: StatusUpdate,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    booking = set_status(db, booking_id, data.status, actor=admin, admin_notes=data.admin_notes)
    logger.info(f"Booking {data.status.value} | Booking={booking_id} | By={admin.email}")

    background_tasks.add_task(
        notify_admins,
        type="booking",
        title=f"Booking {data.status.value}",
        content=data.admin_notes,
        user_id=booking.user_id,
        booking_id=booking.id,
    )
    return booking


@router.post("/bookings/{booking_id}/refund", response_model=PaymentOut)
def refund_booking(
    booking_id: int,
    background_tasks: BackgroundTasks,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
    gateway: RazorpayGateway = Depends(get_payment_gateway),
):
    payment = refund_payment(db, gateway, booking_id)
    logger.info(f"Refund | Booking={booking_id} | By={admin.email}")

    background_tasks.add_task(
        notify_admins,
        type="payment",
        title="Payment Refunded",
        booking_id=booking_id,
        meta={"amount": payment.amount},
    )
    return payment


# ==================================================
# PAYMENTS
# ==================================================
@router.get("/payments", response_model=list[PaymentOut])
def list_payments(
    status: PaymentStatus | None = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(Payment)
    if status is not None:
        query = query.filter(Payment.status == status)
    return query.order_by(Payment.paid_at.desc()).all()


# ==================================================
# DOCUMENTS
# ==================================================
@router.get("/documents", response_model=list[DocumentOut])
def list_documents(
    status: DocumentStatus | None = None,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(Document)
    if status is not None:
        query = query.filter(Document.status == status)
    return query.order_by(Document.created_at.desc()).all()


@router.put("/documents/{document_id}/review", response_model=DocumentOut)
def review_document(
    document_id: int,
    data: DocumentReview,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    document = db.query(Document).filter(Document.id == document_id).first()
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")

    document.status = DocumentStatus(data.status)
    document.review_message = data.review_message
    document.reviewer_id = admin.id
    document.reviewed_at = datetime.utcnow()
    db.commit()

    logger.info(f"Document {data.status} | Document={document.id} | By={admin.email}")
    return document


# ==================================================
# NOTIFICATIONS
# ==================================================
@router.get("/notifications")
def list_notifications(
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=200),
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    query = db.query(AdminNotification)
    if unread_only:
        query = query.filter(AdminNotification.is_read == False)  # noqa: E712

    return [
        {
            "id": n.id,
            "type": n.type,
            "title": n.title,
            "content": n.content,
            "user_id": n.user_id,
            "booking_id": n.booking_id,
            "meta": n.meta,
            "level": n.level,
            "is_read": n.is_read,
            "created_at": n.created_at,
        }
        for n in query.order_by(AdminNotification.id.desc()).limit(limit).all()
    ]


@router.patch("/notifications/{notification_id}/read")
def mark_notification_read(
    notification_id: int,
    admin: User = Depends(require_admin),
    db: Session = Depends(get_db),
):
    notification = db.query(AdminNotification).filter(AdminNotification.id == notification_id).first()
    if not notification:
        raise HTTPException(status_code=404, detail="Notification not found")

    notification.is_read = True
    db.commit()
    return {"message": "Notification marked as read"}
