from datetime import datetime
from typing import Optional

from pydantic import BaseModel, EmailStr, Field

from lajan.quiz import LearningStyle


class LoginRequest(BaseModel):
    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    email: EmailStr
    password: str = Field(min_length=6)
    confirm_password: str
    name: Optional[str] = None
    preferred_topics: list[str] = Field(default_factory=list)
    learning_style: Optional[LearningStyle] = None


class LoginResponse(BaseModel):
    message: str
    token_set: bool
    access_token: Optional[str] = None
    token_type: str = "bearer"


class RegisterResponse(BaseModel):
    message: str
    user_id: str
    access_token: Optional[str] = None
    token_type: str = "bearer"


class LogoutResponse(BaseModel):
    message: str


class AuthTokenPayload(BaseModel):
    sub: str  # user id
    exp: Optional[datetime] = None
