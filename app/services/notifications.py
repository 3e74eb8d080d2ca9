"""Admin notification rows.

Written after the state they describe has been committed; a failure here is
logged and never reaches the caller.
"""
from sqlalchemy.exc import SQLAlchemyError

from app.core.logging_config import get_logger
from app.db.session import SessionLocal
from app.models.notification import AdminNotification

logger = get_logger("admin")


def notify_admins(
    title: str,
    content: str | None = None,
    type: str = "system",
    user_id: int | None = None,
    booking_id: int | None = None,
    meta: dict | None = None,
    level: str = "info",
    session_factory=SessionLocal,
) -> bool:
    db = session_factory()
    try:
        db.add(AdminNotification(
            type=type,
            title=title,
            content=content,
            user_id=user_id,
            booking_id=booking_id,
            meta=meta,
            level=level,
        ))
        db.commit()
        return True
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Notification dropped | {title} | Booking={booking_id} -> {e}")
        return False
    finally:
        db.close()
