"""
User model. Credentials are only ever stored as a bcrypt hash.

Role is fixed at registration; deactivation is a soft flag flip by an admin.
"""

from sqlalchemy import Column, Integer, String, Boolean, JSON, CheckConstraint

from eventfinder.db.base import Base, TimestampMixin


class User(Base, TimestampMixin):
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default="user")
    phone = Column(String(30), nullable=True)
    profile_image = Column(String(500), nullable=True)
    bio = Column(String(1000), nullable=True)
    is_verified = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    preferred_categories = Column(JSON, nullable=False, default=list)
    notifications_enabled = Column(Boolean, default=True, nullable=False)

    __table_args__ = (
        CheckConstraint("role IN ('user', 'organizer', 'admin')", name="check_user_role"),
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
