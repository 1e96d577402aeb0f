"""
Admin credentials: salted password hashes and signed, time-limited tokens.
"""
from __future__ import annotations
import logging
from functools import wraps
from typing import Any, Dict, Optional

from flask import current_app, g, request
from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer
from sqlalchemy import select
from sqlalchemy.orm import Session
from werkzeug.security import check_password_hash, generate_password_hash

from jobboard.errors import AuthError, ValidationError
from jobboard.models.admin import Admin

logger = logging.getLogger(__name__)

ADMIN_ROLE = "admin"
TOKEN_SALT = "admin-auth"

def _serializer(secret: str) -> URLSafeTimedSerializer:
    return URLSafeTimedSerializer(secret, salt=TOKEN_SALT)

def issue_token(admin: Admin, secret: str) -> str:
    return _serializer(secret).dumps({"id": admin.id, "role": admin.role})

def verify_token(token: str, secret: str, max_age: int) -> Optional[Dict[str, Any]]:
    """Decoded payload, or None if the token is forged, malformed or expired."""
    try:
        return _serializer(secret).loads(token, max_age=max_age)
    except (BadSignature, SignatureExpired):
        return None

def create_admin(s: Session, username: Optional[str], password: Optional[str]) -> Admin:
    if not username or not password:
        raise ValidationError("Username and password are required")
    if s.scalar(select(Admin).where(Admin.username == username)) is not None:
        raise ValidationError("Admin already exists")

    admin = Admin(username=username, password=generate_password_hash(password), role=ADMIN_ROLE)
    s.add(admin)
    s.commit()
    s.refresh(admin)
    logger.info("Admin created: %s", username)
    return admin

def authenticate(s: Session, username: Optional[str], password: Optional[str]) -> Admin:
    admin = s.scalar(select(Admin).where(Admin.username == username)) if username else None
    if admin is None or not check_password_hash(admin.password, password or ""):
        logger.info("Failed login for %r", username)
        raise AuthError("Invalid credentials")
    return admin

def _bearer_token() -> Optional[str]:
    header = request.headers.get("Authorization", "")
    if not header.startswith("Bearer"):
        return None
    parts = header.split(" ")
    return parts[1] if len(parts) > 1 and parts[1] else None

def admin_required(view):
    """Reject the request unless it carries a valid admin bearer token."""

    @wraps(view)
    def wrapper(*args, **kwargs):
        token = _bearer_token()
        if not token:
            raise AuthError("Not authorized")
        payload = verify_token(token, current_app.config["JWT_SECRET"], current_app.config["TOKEN_MAX_AGE"])
        if not isinstance(payload, dict):
            raise AuthError("Not authorized")
        if payload.get("role") != ADMIN_ROLE:
            raise AuthError("Access denied. Admin only.", status_code=403)
        g.admin_id = payload.get("id")
        return view(*args, **kwargs)

    return wrapper
