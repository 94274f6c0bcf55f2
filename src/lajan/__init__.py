"""
Lajan learning progress core: data model, streaks, completion, merge/sync,
recommendations and rewards. Pure functions only; persistence and HTTP live
in the `api` package.
"""

from lajan.completion import (
    LESSON_COMPLETION_POINTS,
    MODULE_COMPLETION_POINTS,
    add_points,
    all_modules_completed_today,
    complete_lesson,
    complete_module,
    was_module_completed_today,
)
from lajan.errors import (
    GenerationUnavailable,
    InvalidArgument,
    ProgressError,
    StorageUnavailable,
    UserMismatch,
    ValidationError,
)
from lajan.merge import merge
from lajan.model import ModuleProgress, ProgressRecord, TopicProgress, parse_record
from lajan.recommend import Topic, recommend_topic
from lajan.streak import compute_streak

__all__ = [
    "LESSON_COMPLETION_POINTS",
    "MODULE_COMPLETION_POINTS",
    "add_points",
    "all_modules_completed_today",
    "complete_lesson",
    "complete_module",
    "was_module_completed_today",
    "GenerationUnavailable",
    "InvalidArgument",
    "ProgressError",
    "StorageUnavailable",
    "UserMismatch",
    "ValidationError",
    "merge",
    "ModuleProgress",
    "ProgressRecord",
    "TopicProgress",
    "parse_record",
    "Topic",
    "recommend_topic",
    "compute_streak",
]
