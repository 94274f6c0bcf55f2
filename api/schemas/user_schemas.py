from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from lajan.quiz import LearningStyle


class User(BaseModel):
    """Public view of a user row. Never carries the password hash."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: Optional[str] = None
    preferences: Optional[dict] = None
    preferred_topics: list[str] = Field(default_factory=list)
    learning_style: Optional[str] = None
    points: int = 0
    streak: int = 0
    level: int = 1
    completed_lessons: list[str] = Field(default_factory=list)
    badges: list[str] = Field(default_factory=list)
    last_active: Optional[datetime] = None

    @field_validator("preferred_topics", "completed_lessons", "badges", mode="before")
    @classmethod
    def _none_to_list(cls, value):
        return [] if value is None else value


class UpdateProfileRequest(BaseModel):
    name: Optional[str] = None
    preferred_topics: Optional[list[str]] = None
    learning_style: Optional[LearningStyle] = None
    preferences: Optional[dict] = None
