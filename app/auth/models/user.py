import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Uuid

from app.db.session import Base


class User(Base):
    """
    Marketplace account.

    Attributes:
        id: Unique UUID primary key
        email: Unique email address (indexed for fast lookups)
        full_name: Display name
        avatar_url: Public avatar URL (nullable)
        role: "admin" (platform staff), "instructor" or "student"
        is_active: Whether the user account is active
        last_active_at: Last time the user was seen (nullable)
        created_at: Account creation timestamp
        updated_at: Last update timestamp

    Courses created by an admin are platform-owned and keep all of their
    revenue; courses created by an instructor are split by the configured
    instructor revenue percentage.
    """

    __tablename__ = "users"

    id = Column(Uuid, primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    full_name = Column(String(255), nullable=False)
    avatar_url = Column(String(500), nullable=True)

    role = Column(String(50), nullable=False, default="student", index=True)
    is_active = Column(Boolean, default=True, nullable=False)
    last_active_at = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
