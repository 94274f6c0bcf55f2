"""
Progress orchestration: the one place that ties the pure core (completion,
merge, rewards) to the store. Each public method is a single store
transaction, so a completion event updates the record, the user mirrors and
the history log together or not at all.
"""

from datetime import date, datetime, tzinfo
from typing import Any, Iterable, Optional

from sqlalchemy.orm import Session as DBSession

from api.config import get_settings
from api.models.models import PointsTransaction, ProgressHistory, User
from api.services.progress_store import ProgressStore
from api.utils.logger import configure_logging
from lajan.completion import add_points, all_modules_completed_today, complete_lesson, complete_module
from lajan.completion import was_module_completed_today
from lajan.errors import UserMismatch
from lajan.merge import merge
from lajan.model import ProgressRecord, parse_record, utcnow
from lajan.rewards import (
    badges_for,
    lesson_achievement,
    lesson_achievements,
    level_for,
    next_reward,
    unlocked_rewards,
)
from lajan.streak import calendar_day, same_day

logger = configure_logging()

HISTORY_LIMIT = 100


def _event_key(kind: str, event_id: Optional[str]) -> Optional[str]:
    return f"{kind}:{event_id}" if event_id else None


class ProgressService:
    def __init__(self, db: DBSession, store: Optional[ProgressStore] = None, tz: Optional[tzinfo] = None):
        settings = get_settings()
        self.db = db
        self.tz = tz or settings.tz
        self.store = store or ProgressStore(db, tz=self.tz)
        self.module_points = settings.module_completion_points
        self.lesson_points = settings.lesson_completion_points

    def get(self, user: User) -> ProgressRecord:
        """Stored record, or the default empty record (not persisted) for a new user."""
        return self.store.load_or_empty(user.id)

    def initialize(self, user: User) -> ProgressRecord:
        """Create the empty record. Idempotent: an existing record is returned as-is."""
        existing = self.store.load(user.id)
        if existing is not None:
            return existing
        record, _ = self.store.update(
            user,
            lambda current, _user: current,
            event_key="init",
            kind="initialize",
            history=("initialize", {}),
        )
        logger.info("progress initialized user=%s", user.id)
        return record

    def sync(self, user: User, payload: Any, idempotency_key: Optional[str] = None) -> ProgressRecord:
        """
        Merge the client's record into the stored one and persist the result.

        The payload is validated before any store access; a record for a
        different user is rejected outright.
        """
        client = parse_record(payload)
        if client.user_id != user.id:
            logger.warning("sync rejected: user mismatch token_user=%s record_user=%s", user.id, client.user_id)
            raise UserMismatch(user.id, client.user_id)

        now = utcnow()
        record, applied = self.store.update(
            user,
            lambda server, _user: merge(server, client, now),
            event_key=_event_key("sync", idempotency_key),
            kind="sync",
            history=("sync", {"topics": sorted(client.topics_progress)}),
            now=now,
        )
        if applied:
            logger.info(
                "progress synced user=%s topics=%s points=%s streak=%s",
                user.id, len(record.topics_progress), record.total_points, record.streak,
            )
        return record

    def complete_module(
        self,
        user: User,
        topic_id: str,
        module_id: str,
        score: float = 1.0,
        event_id: Optional[str] = None,
    ) -> ProgressRecord:
        now = utcnow()

        def mutate(current: ProgressRecord, _user: User) -> ProgressRecord:
            return complete_module(current, topic_id, module_id, score, now, points=self.module_points, tz=self.tz)

        record, applied = self.store.update(
            user,
            mutate,
            event_key=_event_key("module", event_id),
            kind="module",
            history=("module_completed", {"topicId": topic_id, "moduleId": module_id, "score": score}),
            now=now,
        )
        if applied:
            logger.info(
                "module completed user=%s topic=%s module=%s score=%.2f points=%s streak=%s",
                user.id, topic_id, module_id, score, record.total_points, record.streak,
            )
        return record

    def complete_lesson(
        self,
        user: User,
        lesson_id: str,
        event_id: Optional[str] = None,
    ) -> tuple[ProgressRecord, list[str], Optional[str]]:
        """Returns (record, completed lesson ids, achievement newly unlocked or None)."""
        now = utcnow()
        unlocked: list[Optional[str]] = [None]

        def mutate(current: ProgressRecord, owner: User) -> ProgressRecord:
            unlocked[0] = None
            before = list(owner.completed_lessons or [])
            updated, lessons = complete_lesson(
                current, lesson_id, before, now, points=self.lesson_points, tz=self.tz
            )
            if len(lessons) != len(before):
                owner.completed_lessons = lessons
                unlocked[0] = lesson_achievement(len(lessons))
            return updated

        record, _ = self.store.update(
            user,
            mutate,
            event_key=_event_key("lesson", event_id),
            kind="lesson",
            history=("lesson_completed", {"lessonId": lesson_id}),
            now=now,
        )
        if unlocked[0]:
            logger.info("achievement unlocked user=%s achievement=%s", user.id, unlocked[0])
        return record, list(user.completed_lessons or []), unlocked[0]

    def add_points(self, user: User, points: int, reason: Optional[str] = None) -> ProgressRecord:
        now = utcnow()
        record, _ = self.store.update(
            user,
            lambda current, _user: add_points(current, points, now),
            kind="points",
            history=("points_added", {"points": points, "reason": reason}),
            extra_rows=lambda _record: [PointsTransaction(user_id=user.id, points=points, reason=reason)],
            now=now,
        )
        logger.info("points added user=%s points=%s total=%s", user.id, points, record.total_points)
        return record

    def streak(self, user: User, now: Optional[datetime] = None) -> tuple[ProgressRecord, bool]:
        record = self.get(user)
        completed_today = record.last_completed_date is not None and same_day(
            record.last_completed_date, now or utcnow(), self.tz
        )
        return record, completed_today

    def rewards(self, user: User) -> dict:
        record = self.get(user)
        lessons = len(user.completed_lessons or [])
        upcoming = next_reward(record.total_points)
        return {
            "total_points": record.total_points,
            "level": level_for(record.total_points),
            "badges": badges_for(record.total_points, user.badges or []),
            "achievements": lesson_achievements(lessons),
            "completed_lessons": lessons,
            "unlocked": unlocked_rewards(record.total_points),
            "next_reward": upcoming,
            "points_to_next_reward": upcoming.points - record.total_points if upcoming else None,
        }

    def add_history(self, user: User, action: str, details: Optional[dict] = None) -> ProgressHistory:
        return self.store.append_history(user.id, action, details)

    def history(self, user: User, limit: int = HISTORY_LIMIT) -> list[ProgressHistory]:
        return self.store.history(user.id, limit)

    def completed_today(
        self,
        user: User,
        topic_id: str,
        module_ids: Iterable[str],
        now: Optional[datetime] = None,
    ) -> tuple[dict[str, bool], bool]:
        record = self.get(user)
        now = now or utcnow()
        module_ids = list(dict.fromkeys(module_ids))
        per_module = {
            mid: was_module_completed_today(record, topic_id, mid, now, self.tz) for mid in module_ids
        }
        return per_module, all_modules_completed_today(record, topic_id, module_ids, now, self.tz)

    def today(self, now: Optional[datetime] = None) -> date:
        return calendar_day(now or utcnow(), self.tz)
