from datetime import datetime, timedelta
from typing import Optional
import logging

import bcrypt
from jose import JWTError, jwt
from pydantic import BaseModel

from taskhub.core.config import Settings
from taskhub.core.errors import ValidationFailed

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
MAX_PASSWORD_BYTES = 72  # bcrypt ignore / refuse au-delà


class Identity(BaseModel):
    """Identité portée par le token (pas de lookup en base)"""
    user_id: int
    email: str
    name: str


def validate_password(password: str):
    if not password:
        raise ValidationFailed("Password is required")
    if len(password.encode()) > MAX_PASSWORD_BYTES:
        raise ValidationFailed(f"Password cannot be longer than {MAX_PASSWORD_BYTES} bytes")


def hash_password(password: str, rounds: int) -> str:
    validate_password(password)
    return bcrypt.hashpw(password.encode(), bcrypt.gensalt(rounds=rounds)).decode()


def check_password(password: str, password_hash: str) -> bool:
    try:
        return bcrypt.checkpw(password.encode(), password_hash.encode())
    except ValueError:
        # password trop long: simple échec, comme un mauvais password
        return False


def create_access_token(user_id: int, email: str, name: str, app_settings: Settings) -> str:
    #crée un token d'accès JWT valable JWT_EXPIRE_HOURS (24h)
    payload = {
        "userId": user_id,
        "email": email,
        "name": name,
        "exp": datetime.utcnow() + timedelta(hours=app_settings.JWT_EXPIRE_HOURS),
    }
    return jwt.encode(payload, app_settings.JWT_SECRET, algorithm=ALGORITHM)


def verify_token(token: str, app_settings: Settings) -> Optional[dict]:
    try:
        return jwt.decode(token, app_settings.JWT_SECRET, algorithms=[ALGORITHM])
    except JWTError as e:
        logger.warning(f"Rejected token: {e}")
        return None


def authenticate(token: str, app_settings: Settings) -> Optional[Identity]:
    payload = verify_token(token, app_settings)
    if payload is None:
        return None
    try:
        return Identity(
            user_id=payload["userId"],
            email=payload["email"],
            name=payload["name"],
        )
    except (KeyError, ValueError):
        logger.warning("Token without identity claims")
        return None
