"""
Account directory: users plus their role-specific profile rows.

Key design decisions:
- `tourists.id` and `businesses.id` are both primary key and foreign key to
  `users.id`, so a profile always shares its user's identifier
- `role` is fixed at signup; the CHECK constraint keeps it to the two roles
"""

from sqlalchemy import Column, Integer, String, ForeignKey, CheckConstraint
from sqlalchemy.orm import relationship

from app.db.base import Base, TimestampMixin

ROLE_TOURIST = "TOURIST"
ROLE_BUSINESS = "BUSINESS"
USER_ROLES = (ROLE_TOURIST, ROLE_BUSINESS)


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False)
    contact_no = Column(String(32), nullable=True)
    image_url = Column(String(1024), nullable=True)

    # Relationships
    tourist = relationship("Tourist", back_populates="user", uselist=False)
    business = relationship("Business", back_populates="user", uselist=False)

    __table_args__ = (
        CheckConstraint("role IN ('TOURIST', 'BUSINESS')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"


class Tourist(Base, TimestampMixin):
    __tablename__ = "tourists"

    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    user = relationship("User", back_populates="tourist")
    bookings = relationship("TouristEventBooking", back_populates="tourist")

    def __repr__(self) -> str:
        return f"<Tourist(id={self.id})>"


class Business(Base, TimestampMixin):
    __tablename__ = "businesses"

    id = Column(Integer, ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)

    user = relationship("User", back_populates="business")
    events = relationship("Event", back_populates="business")

    def __repr__(self) -> str:
        return f"<Business(id={self.id})>"
