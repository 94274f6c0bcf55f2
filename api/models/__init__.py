"""
API data models. Single import surface for DB entities.

DB entities (api.models.models):
- User, LearningProgress, AppliedEvent, PointsTransaction, ProgressHistory,
  Topic, TopicModule
"""

from api.models.models import (
    User,
    LearningProgress,
    AppliedEvent,
    PointsTransaction,
    ProgressHistory,
    Topic,
    TopicModule,
)

__all__ = [
    "User",
    "LearningProgress",
    "AppliedEvent",
    "PointsTransaction",
    "ProgressHistory",
    "Topic",
    "TopicModule",
]
