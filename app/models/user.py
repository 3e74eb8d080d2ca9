from sqlalchemy import Column, Integer, String, Enum
from sqlalchemy.orm import relationship
from app.db.session import Base
from app.models.enums import UserRole, enum_values


class User(Base):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String, nullable=False)
    email = Column(String, unique=True, index=True, nullable=False)
    password_hash = Column(String, nullable=False)

    role = Column(
        Enum(UserRole, name="userrole", values_callable=enum_values),
        nullable=False,
        default=UserRole.USER,
    )

    bookings = relationship("Booking", back_populates="user")
    documents = relationship("Document", back_populates="user", foreign_keys="Document.user_id")
