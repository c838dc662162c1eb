"""
Authentication and authorization dependencies.

Bearer tokens are issued by /api/v1/auth/login. When AUTH_MODE=demo, requests
without a token fall back to the X-User-Id / X-User-Role headers (or the demo
user) so the API can be exercised locally without logging in.
"""

import os
from dataclasses import dataclass
from typing import Optional

from fastapi import HTTPException, Header, Depends
from sqlalchemy.orm import Session

from sebenza.database import get_db
from sebenza.models.user import USER_ROLES, User
from sebenza.services.auth import extract_bearer_token, verify_token

AUTH_MODE = os.getenv("AUTH_MODE", "jwt")  # "demo" or "jwt"

DEMO_USER_ID = "admin-user-id"
DEMO_ROLE = "admin"


@dataclass
class CurrentUser:
    id: str
    role: str
    company_id: Optional[str] = None

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"


def get_current_user(
    authorization: Optional[str] = Header(default=None),
    x_user_id: Optional[str] = Header(default=None),
    x_user_role: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
) -> CurrentUser:
    """Resolve the caller from the bearer token; 401 when absent or invalid."""
    if authorization:
        token = extract_bearer_token(authorization)
        payload = verify_token(token) if token else None
        if not payload:
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        user = db.query(User).filter(User.id == payload["user_id"]).first()
        if not user or user.is_active is False:
            raise HTTPException(status_code=401, detail="User not found or disabled")
        return CurrentUser(id=user.id, role=user.role, company_id=user.company_id)

    if AUTH_MODE == "demo":
        if x_user_id:
            return CurrentUser(id=x_user_id, role=x_user_role if x_user_role in USER_ROLES else "user")
        return CurrentUser(id=DEMO_USER_ID, role=DEMO_ROLE)

    raise HTTPException(status_code=401, detail="Authentication required")


def require_admin(user: CurrentUser = Depends(get_current_user)) -> CurrentUser:
    """Require the admin role."""
    if not user.is_admin:
        raise HTTPException(status_code=403, detail="Insufficient permissions")
    return user
