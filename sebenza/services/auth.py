"""
Password hashing and signed bearer tokens.

Token format: ``user_id.role.company_id.exp.signature`` where the signature is
an HMAC-SHA256 over the first four parts, truncated to 32 hex chars.
"""
import os
import hashlib
import hmac
import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

logger = logging.getLogger(__name__)

TOKEN_SECRET = os.getenv("TOKEN_SECRET", "sebenza-dev-secret-change-in-prod")
TOKEN_EXPIRY_HOURS = int(os.getenv("TOKEN_EXPIRY_HOURS", "168"))  # 7 days


def hash_password(password: str) -> str:
    salt = secrets.token_hex(16)
    h = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), 100_000)
    return f"{salt}${h.hex()}"


def verify_password(password: str, stored: str) -> bool:
    try:
        salt, h = stored.split("$", 1)
    except (AttributeError, ValueError):
        return False
    expected = hashlib.pbkdf2_hmac("sha256", password.encode(), salt.encode(), 100_000)
    return hmac.compare_digest(expected.hex(), h)


def _sign(payload: str) -> str:
    return hmac.new(TOKEN_SECRET.encode(), payload.encode(), "sha256").hexdigest()[:32]


def create_token(user_id: str, role: str, company_id: Optional[str] = None,
                 expires_delta: Optional[timedelta] = None) -> str:
    expires_delta = expires_delta or timedelta(hours=TOKEN_EXPIRY_HOURS)
    exp = int((datetime.now(timezone.utc) + expires_delta).timestamp())
    payload = f"{user_id}.{role}.{company_id or '-'}.{exp}"
    return f"{payload}.{_sign(payload)}"


def verify_token(token: str) -> Optional[dict]:
    """Returns {user_id, role, company_id} for a valid, unexpired token, else None."""
    parts = (token or "").rsplit(".", 1)
    if len(parts) != 2:
        return None
    payload, sig = parts
    if not hmac.compare_digest(sig, _sign(payload)):
        return None
    try:
        user_id, role, company_id, exp_s = payload.rsplit(".", 3)
        exp = int(exp_s)
    except ValueError:
        return None
    if exp < int(datetime.now(timezone.utc).timestamp()):
        logger.info("Rejected expired token for user %s", user_id)
        return None
    return {
        "user_id": user_id,
        "role": role,
        "company_id": None if company_id == "-" else company_id,
    }


def extract_bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization or not authorization.startswith("Bearer "):
        return None
    return authorization.removeprefix("Bearer ").strip() or None
