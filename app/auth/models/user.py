import enum
import uuid
from datetime import datetime

from sqlalchemy import Boolean, Column, DateTime, String, Uuid

from app.db.session import Base


class UserRole(str, enum.Enum):
    STUDENT = "student"
    INSTRUCTOR = "instructor"


class User(Base):
    """
    Local projection of an account owned by the authentication service.

    Attributes:
        id: Unique UUID primary key (the ``sub`` claim of access tokens)
        email: Unique email address
        name: Display name
        role: "student" or "instructor"
        photo_url: Avatar URL shown next to forum posts (nullable)
        is_active: Whether the account may use the API
        created_at: Account creation timestamp
        updated_at: Last update timestamp
    """

    __tablename__ = "users"

    id = Column(Uuid(as_uuid=True), primary_key=True, default=uuid.uuid4, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(255), nullable=False)

    role = Column(String(20), nullable=False, default=UserRole.STUDENT.value)
    photo_url = Column(String(500), nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)

    created_at = Column(DateTime, default=datetime.utcnow, nullable=False)
    updated_at = Column(
        DateTime, default=datetime.utcnow, onupdate=datetime.utcnow, nullable=False
    )

    @property
    def is_instructor(self) -> bool:
        return self.role == UserRole.INSTRUCTOR.value

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email={self.email}, role={self.role})>"
