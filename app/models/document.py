from datetime import datetime

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Enum
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import DocumentStatus, DocumentType, enum_values


class Document(Base):
    __tablename__ = "documents"

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(Integer, ForeignKey("users.id"), nullable=False, index=True)
    booking_id = Column(Integer, ForeignKey("bookings.id"), nullable=True)

    document_type = Column(
        Enum(DocumentType, name="documenttype", values_callable=enum_values),
        nullable=False,
    )
    details = Column(JSON, nullable=False)

    image_url = Column(String, nullable=True)
    public_id = Column(String, nullable=True)  # Cloudinary public ID (for delete)

    status = Column(
        Enum(DocumentStatus, name="documentstatus", values_callable=enum_values),
        nullable=False,
        default=DocumentStatus.PENDING,
    )
    reviewer_id = Column(Integer, ForeignKey("users.id"), nullable=True)
    review_message = Column(String, nullable=True)
    reviewed_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, nullable=False, default=datetime.utcnow)

    user = relationship("User", back_populates="documents", foreign_keys=[user_id])
