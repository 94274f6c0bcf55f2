from typing import Optional

from fastapi import Cookie, Depends, Header, HTTPException, Response, status
from sqlalchemy.orm import Session

from api.config import get_db, get_settings
from api.models.models import User
from api.utils.jwt import get_password_hash, token_for, verify_password, verify_token
from api.utils.logger import configure_logging

logger = configure_logging()


def _bearer_token(authorization: Optional[str]) -> Optional[str]:
    if not authorization:
        return None
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() != "bearer" or not credentials.strip():
        return None
    return credentials.strip()


def get_current_user(
    access_token: Optional[str] = Cookie(None),
    authorization: Optional[str] = Header(None),
    db: Session = Depends(get_db),
) -> User:
    """Resolve the caller from the Bearer header, falling back to the access_token cookie."""
    token = _bearer_token(authorization) or access_token
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing token",
        )

    payload = verify_token(token)
    user = get_user_by_id(payload.sub, db)
    if user is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found"
        )
    return user


def set_auth_cookie(response: Response, user: User) -> str:
    minutes = get_settings().access_token_expire_minutes
    token = token_for(user.id, minutes)
    response.set_cookie(
        key="access_token",
        value=token,
        httponly=True,
        secure=False,
        samesite="lax",
        max_age=minutes * 60,
    )
    return token


def clear_auth_cookie(response: Response) -> None:
    response.delete_cookie(
        key="access_token",
        httponly=True,
        secure=False,
        samesite="lax"
    )


def get_user_by_id(user_id: str, db: Session) -> User | None:
    return db.query(User).filter(User.id == user_id).first()


def get_user_by_email(email: str, db: Session) -> User | None:
    return db.query(User).filter(User.email == email.strip().lower()).first()


def create_user(
    email: str,
    password: str,
    db: Session,
    *,
    name: Optional[str] = None,
    preferred_topics: Optional[list[str]] = None,
    learning_style: Optional[str] = None,
) -> User:
    logger.info("creating user email=%s", email)
    user = User(
        email=email.strip().lower(),
        hashed_password=get_password_hash(password),
        name=name,
        preferred_topics=list(preferred_topics or []),
        learning_style=learning_style,
        completed_lessons=[],
        badges=[],
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def authenticate_user(email: str, password: str, db: Session) -> User | None:
    user = get_user_by_email(email, db)
    if not user or not verify_password(password, user.hashed_password):
        return None
    return user
