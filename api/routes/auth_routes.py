from fastapi import APIRouter, Depends, HTTPException, Response, status
from sqlalchemy.orm import Session

from api.config import get_db
from api.models.models import User as DbUser
from api.schemas.auth_schemas import LoginRequest, LoginResponse, LogoutResponse, RegisterRequest, RegisterResponse
from api.schemas.user_schemas import UpdateProfileRequest, User
from api.services.progress_service import ProgressService
from api.utils.auth import (
    authenticate_user,
    clear_auth_cookie,
    create_user,
    get_current_user,
    get_user_by_email,
    set_auth_cookie,
)
from api.utils.common import display_name
from api.utils.logger import configure_logging

auth_routes = APIRouter()
logger = configure_logging()


@auth_routes.post("/login")
def login(request: LoginRequest, response: Response, db: Session = Depends(get_db)) -> LoginResponse:
    """Authenticate user and set HTTP-only cookie with token. The token is also returned for Bearer use."""
    user = authenticate_user(request.email, request.password, db)
    if user is None:
        logger.warning("login failed email=%s", request.email)
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Incorrect email or password"
        )
    token = set_auth_cookie(response, user)
    logger.info("login ok user=%s", user.id)
    return LoginResponse(message=f"Welcome back, {display_name(user)}", token_set=True, access_token=token)


@auth_routes.post("/register")
def register(request: RegisterRequest, response: Response, db: Session = Depends(get_db)) -> RegisterResponse:
    """Register a new user and create their empty progress record."""
    if get_user_by_email(request.email, db):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Email already registered"
        )

    if request.password != request.confirm_password:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Passwords do not match"
        )

    user = create_user(
        request.email,
        request.password,
        db,
        name=request.name,
        preferred_topics=request.preferred_topics,
        learning_style=request.learning_style.value if request.learning_style else None,
    )
    ProgressService(db).initialize(user)
    token = set_auth_cookie(response, user)
    return RegisterResponse(message="Registration successful", user_id=user.id, access_token=token)


@auth_routes.post("/logout")
def logout(response: Response) -> LogoutResponse:
    """Clear the authentication cookie."""
    clear_auth_cookie(response)
    return LogoutResponse(message="Logout successful - cookie cleared")


@auth_routes.get("/me")
def get_current_user_info(current_user: DbUser = Depends(get_current_user)) -> User:
    """Current user's profile, including the mirrored points/streak/level."""
    return User.model_validate(current_user)


@auth_routes.patch("/me")
def update_profile(
    body: UpdateProfileRequest,
    current_user: DbUser = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> User:
    """Update name, preferred topics, learning style or preferences (merged)."""
    if body.name is not None:
        current_user.name = body.name.strip() or None
    if body.preferred_topics is not None:
        current_user.preferred_topics = list(dict.fromkeys(body.preferred_topics))
    if body.learning_style is not None:
        current_user.learning_style = body.learning_style.value
    if body.preferences is not None:
        current = current_user.preferences if isinstance(current_user.preferences, dict) else {}
        current_user.preferences = {**current, **body.preferences}
    db.add(current_user)
    db.commit()
    db.refresh(current_user)
    return User.model_validate(current_user)
