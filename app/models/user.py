import uuid
from datetime import datetime, timezone
import enum
from sqlalchemy import Column, String, DateTime, Enum
from sqlalchemy.dialects.postgresql import UUID
from .base import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class UserRole(enum.Enum):
    user = "user"
    agent = "agent"
    admin = "admin"


class User(Base):
    __tablename__ = "users"

    id = Column(UUID(as_uuid=True), primary_key=True, default=uuid.uuid4)
    email = Column(String, unique=True, nullable=False)
    full_name = Column(String, nullable=False)
    role = Column(Enum(UserRole, name="user_role"), default=UserRole.user, nullable=False)
    phone = Column(String)
    created_at = Column(DateTime(timezone=True), default=utcnow, nullable=False)

    @property
    def is_agent(self) -> bool:
        return self.role == UserRole.agent

    @property
    def is_admin(self) -> bool:
        return self.role == UserRole.admin
