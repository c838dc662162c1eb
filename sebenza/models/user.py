import uuid

from sqlalchemy import Column, String, Boolean, DateTime
from sqlalchemy.sql import func

from sebenza.database import Base


# ---------------------------------------------------
# Roles
# ---------------------------------------------------

USER_ROLES = ("admin", "user")


def _user_id_default() -> str:
    return f"user-{uuid.uuid4().hex[:12]}"


# ---------------------------------------------------
# User
# ---------------------------------------------------

class User(Base):
    __tablename__ = "users"

    id = Column(String(64), primary_key=True, default=_user_id_default)
    email = Column(String(255), nullable=False, unique=True, index=True)
    name = Column(String(200), nullable=False)
    password_hash = Column(String(255), nullable=False)

    role = Column(String(20), nullable=False, default="user")
    company_id = Column(String(64), nullable=True, index=True)
    avatar = Column(String(1000), nullable=True)

    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)
