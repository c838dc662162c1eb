"""
Authentication router — signup, login and the current user.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field
from sqlalchemy.orm import Session

from sebenza.database import get_db
from sebenza.dependencies import CurrentUser, get_current_user
from sebenza.models.user import User
from sebenza.services.audit import log_action
from sebenza.services.auth import create_token, hash_password, verify_password

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1/auth", tags=["auth"])


# ---------- schemas ----------

class SignupRequest(BaseModel):
    email: str = Field(..., min_length=3)
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=1)
    company_id: Optional[str] = None

class LoginRequest(BaseModel):
    email: str
    password: str

class UserOut(BaseModel):
    id: str
    email: str
    name: str
    role: str
    company_id: Optional[str] = None
    avatar: Optional[str] = None

class LoginResponse(BaseModel):
    access_token: str
    token_type: str = "bearer"
    user: UserOut


def _user_out(user: User) -> UserOut:
    return UserOut(
        id=user.id,
        email=user.email,
        name=user.name,
        role=user.role,
        company_id=user.company_id,
        avatar=user.avatar,
    )


def _login_response(user: User) -> LoginResponse:
    return LoginResponse(
        access_token=create_token(user.id, user.role, user.company_id),
        user=_user_out(user),
    )


# ---------- endpoints ----------

@router.post("/signup", response_model=LoginResponse, status_code=201)
def signup(body: SignupRequest, db: Session = Depends(get_db)):
    """Create an account. The first account in an empty database becomes the admin."""
    email = body.email.strip().lower()
    if db.query(User).filter(User.email == email).first():
        raise HTTPException(status_code=409, detail="An account with this email already exists")

    role = "admin" if db.query(User).count() == 0 else "user"
    user = User(
        email=email,
        name=body.name.strip(),
        password_hash=hash_password(body.password),
        role=role,
        company_id=body.company_id,
    )
    db.add(user)
    db.flush()
    log_action(db, user.id, "signup", "user", user.id, commit=False)
    db.commit()
    db.refresh(user)
    logger.info("User %s signed up as %s", user.id, role)
    return _login_response(user)


@router.post("/login", response_model=LoginResponse)
def login(body: LoginRequest, db: Session = Depends(get_db)):
    user = db.query(User).filter(User.email == body.email.strip().lower()).first()
    if not user or not verify_password(body.password, user.password_hash):
        logger.warning("Failed login for %s", body.email)
        raise HTTPException(status_code=401, detail="Invalid email or password")

    if not user.is_active:
        raise HTTPException(status_code=403, detail="Account disabled")

    return _login_response(user)


@router.get("/me", response_model=UserOut)
def me(
    current: CurrentUser = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    user = db.query(User).filter(User.id == current.id).first()
    if not user:
        raise HTTPException(status_code=401, detail="User not found")
    return _user_out(user)
