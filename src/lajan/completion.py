"""
Completion service: apply a single completion event to a ProgressRecord.

All functions are pure. They take the record and the event, return a new
record, and never persist anything. Unknown topic/module ids are created on
the fly so that catalog drift never blocks a completion.
"""

from __future__ import annotations

from datetime import datetime, tzinfo
from typing import Iterable, Optional

from lajan.errors import InvalidArgument
from lajan.model import ModuleProgress, ProgressRecord, TopicProgress, as_utc, utcnow
from lajan.streak import compute_streak, same_day

MODULE_COMPLETION_POINTS = 50
LESSON_COMPLETION_POINTS = 10
# An attempt counts as a correct answer above this score.
CORRECT_ANSWER_THRESHOLD = 0.7


def later(a: Optional[datetime], b: Optional[datetime]) -> Optional[datetime]:
    """The later of two optional timestamps; None sorts first."""
    if a is None:
        return b
    if b is None:
        return a
    return a if a >= b else b


def _require_id(name: str, value: object) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidArgument(f"{name} must be a non-empty string")
    return value


def _require_score(score: object) -> float:
    if isinstance(score, bool) or not isinstance(score, (int, float)):
        raise InvalidArgument(f"score must be a number, got {type(score).__name__}")
    if not 0.0 <= float(score) <= 1.0:
        raise InvalidArgument(f"score must be within [0, 1], got {score}")
    return float(score)


def _now(now: Optional[datetime]) -> datetime:
    if now is None:
        return utcnow()
    if not isinstance(now, datetime):
        raise InvalidArgument(f"now must be a datetime, got {type(now).__name__}")
    return as_utc(now)


def complete_module(
    record: ProgressRecord,
    topic_id: str,
    module_id: str,
    score: float,
    now: Optional[datetime] = None,
    *,
    points: int = MODULE_COMPLETION_POINTS,
    tz: Optional[tzinfo] = None,
) -> ProgressRecord:
    """
    Mark module_id in topic_id completed with the given score.

    Scores only ever move up. questionsAnswered/correctAnswers count attempts
    and grow on every call; points are awarded on the first completion of a
    module only, so a repeated call never double-counts points or streak.
    """
    _require_id("topic_id", topic_id)
    _require_id("module_id", module_id)
    score = _require_score(score)
    now = _now(now)

    topic = record.topics_progress.get(topic_id) or TopicProgress.fresh(now)
    existing = topic.modules.get(module_id)
    newly_completed = existing is None or not existing.completed

    modules = dict(topic.modules)
    modules[module_id] = ModuleProgress(
        completed=True,
        score=max(existing.score if existing else 0.0, score),
        last_attempt=later(existing.last_attempt if existing else None, now),
    )
    updated_topic = TopicProgress(
        completed=True,
        score=max(topic.score, score),
        last_attempt=later(topic.last_attempt, now),
        questions_answered=topic.questions_answered + 1,
        correct_answers=topic.correct_answers + (1 if score > CORRECT_ANSWER_THRESHOLD else 0),
        modules=modules,
        completed_modules=[*topic.completed_modules, module_id],
    )

    topics = dict(record.topics_progress)
    topics[topic_id] = updated_topic
    return ProgressRecord(
        user_id=record.user_id,
        topics_progress=topics,
        streak=compute_streak(record.streak, record.last_completed_date, now, tz),
        last_completed_date=later(record.last_completed_date, now),
        total_points=record.total_points + (points if newly_completed else 0),
        updated_at=now,
    )


def complete_lesson(
    record: ProgressRecord,
    lesson_id: str,
    completed_lessons: Iterable[str],
    now: Optional[datetime] = None,
    *,
    points: int = LESSON_COMPLETION_POINTS,
    tz: Optional[tzinfo] = None,
) -> tuple[ProgressRecord, list[str]]:
    """
    Record a lesson completion. Lessons live on the user profile, not in the
    record, so the caller passes the current list and gets the new one back.
    A lesson already in the list changes nothing.
    """
    _require_id("lesson_id", lesson_id)
    lessons = list(completed_lessons)
    if lesson_id in lessons:
        return record, lessons
    now = _now(now)
    lessons.append(lesson_id)
    updated = ProgressRecord(
        user_id=record.user_id,
        topics_progress=record.topics_progress,
        streak=compute_streak(record.streak, record.last_completed_date, now, tz),
        last_completed_date=later(record.last_completed_date, now),
        total_points=record.total_points + points,
        updated_at=now,
    )
    return updated, lessons


def add_points(record: ProgressRecord, points: int, now: Optional[datetime] = None) -> ProgressRecord:
    if isinstance(points, bool) or not isinstance(points, int) or points <= 0:
        raise InvalidArgument("Points must be a positive number")
    return record.model_copy(update={"total_points": record.total_points + points, "updated_at": _now(now)})


def was_module_completed_today(
    record: ProgressRecord,
    topic_id: str,
    module_id: str,
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> bool:
    module = record.module(topic_id, module_id)
    if module is None or not module.completed or module.last_attempt is None:
        return False
    return same_day(module.last_attempt, _now(now), tz)


def all_modules_completed_today(
    record: ProgressRecord,
    topic_id: str,
    module_ids: Iterable[str],
    now: Optional[datetime] = None,
    tz: Optional[tzinfo] = None,
) -> bool:
    """False for an empty list: nothing was completed today."""
    module_ids = list(module_ids)
    if not module_ids:
        return False
    now = _now(now)
    return all(was_module_completed_today(record, topic_id, mid, now, tz) for mid in module_ids)
