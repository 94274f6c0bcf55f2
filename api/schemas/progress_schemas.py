from datetime import datetime
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel


class _CamelModel(BaseModel):
    """Mobile client speaks camelCase; snake_case is accepted too."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class CompleteModuleRequest(_CamelModel):
    topic_id: str = Field(min_length=1)
    module_id: str = Field(min_length=1)
    score: float = Field(default=1.0, ge=0.0, le=1.0)
    event_id: Optional[str] = None


class CompleteLessonRequest(_CamelModel):
    lesson_id: str = Field(min_length=1)
    event_id: Optional[str] = None


class CompleteLessonResponse(_CamelModel):
    progress: dict[str, Any]
    completed_lessons: list[str]
    achievement: Optional[str] = None


class AddPointsRequest(_CamelModel):
    points: int
    reason: Optional[str] = None


class HistoryRequest(_CamelModel):
    action: str = Field(min_length=1)
    details: Optional[dict[str, Any]] = None


class HistoryItem(_CamelModel):
    id: str
    action: str
    details: Optional[dict[str, Any]] = None
    created_at: Optional[str] = None


class HistoryResponse(_CamelModel):
    items: list[HistoryItem]


class StreakResponse(_CamelModel):
    streak: int
    last_completed_date: Optional[datetime] = None
    completed_today: bool


class RewardItem(_CamelModel):
    id: str
    title: str
    points: int
    description: str = ""


class RewardsResponse(_CamelModel):
    total_points: int
    level: int
    badges: list[str]
    achievements: list[str]
    completed_lessons: int
    unlocked: list[RewardItem]
    next_reward: Optional[RewardItem] = None
    points_to_next_reward: Optional[int] = None


class TodayResponse(_CamelModel):
    topic_id: str
    modules: dict[str, bool]
    all_completed: bool
