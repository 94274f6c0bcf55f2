from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import HTTPException, status
from jose import JWTError
from jose.jwt import decode, encode
from pydantic import ValidationError

from api.config import get_settings
from api.schemas.auth_schemas import AuthTokenPayload
from api.utils.logger import configure_logging

ALGORITHM = "HS256"

logger = configure_logging()


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    """Verify a password against its hash."""
    if not hashed_password:
        return False
    try:
        return bcrypt.checkpw(plain_password.encode("utf-8"), hashed_password.encode("utf-8"))
    except ValueError as e:
        logger.warning("password verification failed: malformed hash (%s)", e)
        return False


def get_password_hash(password: str) -> str:
    """Hash a password for storing."""
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt()).decode("utf-8")


def token_for(user_id: str, expires_minutes: Optional[int] = None) -> str:
    minutes = expires_minutes or get_settings().access_token_expire_minutes
    payload = AuthTokenPayload(sub=user_id, exp=datetime.now(timezone.utc) + timedelta(minutes=minutes))
    return create_access_token(payload)


def create_access_token(data: AuthTokenPayload) -> str:
    """Create a JWT access token."""
    return encode(data.model_dump(exclude_none=True), get_settings().secret_key, algorithm=ALGORITHM)


def verify_token(token: Optional[str]) -> AuthTokenPayload:
    if not token:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Missing token")
    try:
        payload = decode(token, get_settings().secret_key, algorithms=[ALGORITHM])
        return AuthTokenPayload(**payload)
    except (JWTError, ValidationError) as e:
        logger.warning("token rejected: %s", e)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid token")
