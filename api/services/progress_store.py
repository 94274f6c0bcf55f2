"""
Progress record store: one JSON document per user plus the mirrored
points/streak/level fields on the user row.

Every change goes through `update`, a read-modify-write inside a single
transaction. The document row carries an optimistic version column, so two
writers racing on the same user cannot both commit: the loser gets a
StaleDataError (or an IntegrityError on first insert), rolls back and
re-runs its mutation against the fresh record.
"""

from datetime import datetime, timedelta, tzinfo
from typing import Callable, Iterable, Optional

from sqlalchemy.exc import DBAPIError, IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session as DBSession
from sqlalchemy.orm.exc import StaleDataError

from api.config import get_settings
from api.models.models import AppliedEvent, LearningProgress, ProgressHistory, User
from api.utils.logger import configure_logging, log_request
from lajan.errors import ProgressError, StorageUnavailable, ValidationError
from lajan.model import ProgressRecord, as_utc, parse_record, utcnow
from lajan.rewards import badges_for, level_for

logger = configure_logging()

Mutation = Callable[[ProgressRecord, User], ProgressRecord]


class ProgressStore:
    def __init__(self, db: DBSession, max_attempts: Optional[int] = None, tz: Optional[tzinfo] = None):
        settings = get_settings()
        self.db = db
        self.max_attempts = max(1, max_attempts or settings.store_max_attempts)
        self.tz = tz or settings.tz

    def load(self, user_id: str) -> Optional[ProgressRecord]:
        """Stored record, or None when the user has never been initialised."""
        try:
            row = self.db.get(LearningProgress, user_id)
        except (DBAPIError, SQLAlchemyError) as e:
            logger.error("progress load failed user=%s error=%s", user_id, e)
            raise StorageUnavailable("Progress store unavailable") from e
        if row is None:
            return None
        return self._parse_stored(user_id, row.document)

    def load_or_empty(self, user_id: str, now: Optional[datetime] = None) -> ProgressRecord:
        record = self.load(user_id)
        return record if record is not None else ProgressRecord.empty(user_id, now)

    def append_history(self, user_id: str, action: str, details: Optional[dict] = None) -> ProgressHistory:
        entry = ProgressHistory(user_id=user_id, action=action, details=details or {})
        try:
            self.db.add(entry)
            self.db.commit()
            self.db.refresh(entry)
        except (DBAPIError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.error("progress history write failed user=%s action=%s error=%s", user_id, action, e)
            raise StorageUnavailable("Progress store unavailable") from e
        return entry

    def history(self, user_id: str, limit: int) -> list[ProgressHistory]:
        """Newest first."""
        try:
            return (
                self.db.query(ProgressHistory)
                .filter(ProgressHistory.user_id == user_id)
                .order_by(ProgressHistory.created_at.desc())
                .limit(limit)
                .all()
            )
        except (DBAPIError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.error("progress history read failed user=%s error=%s", user_id, e)
            raise StorageUnavailable("Progress store unavailable") from e

    def was_applied(self, user_id: str, event_key: str) -> bool:
        return (
            self.db.query(AppliedEvent.id)
            .filter(AppliedEvent.user_id == user_id, AppliedEvent.event_key == event_key)
            .first()
            is not None
        )

    def prune_applied_events(self, now: Optional[datetime] = None, retention_days: Optional[int] = None) -> int:
        """
        Drop idempotency keys older than the retention window. A key replayed
        after that is applied again. Returns the number of keys removed.
        """
        days = retention_days if retention_days is not None else get_settings().applied_event_retention_days
        cutoff = (as_utc(now) if now else utcnow()) - timedelta(days=days)
        try:
            removed = (
                self.db.query(AppliedEvent)
                .filter(AppliedEvent.created_at < cutoff)
                .delete(synchronize_session=False)
            )
            self.db.commit()
        except (DBAPIError, SQLAlchemyError) as e:
            self.db.rollback()
            logger.error("applied event pruning failed error=%s", e)
            raise StorageUnavailable("Progress store unavailable") from e
        logger.info("applied events pruned removed=%s retention_days=%s", removed, days)
        return removed

    def update(
        self,
        user: User,
        mutate: Mutation,
        *,
        event_key: Optional[str] = None,
        kind: str = "update",
        history: Optional[tuple[str, dict]] = None,
        extra_rows: Optional[Callable[[ProgressRecord], Iterable[object]]] = None,
        now: Optional[datetime] = None,
    ) -> tuple[ProgressRecord, bool]:
        """
        Apply `mutate` to the user's current record and persist the result.

        Returns (record, applied). When event_key was already applied the
        stored record is returned unchanged with applied=False. Rows from
        `extra_rows` and the optional history entry commit in the same
        transaction as the document and the user mirrors.
        """
        user_id = user.id
        for attempt in range(1, self.max_attempts + 1):
            try:
                with log_request(logger, f"progress.{kind} user={user_id} attempt={attempt}"):
                    if event_key and self.was_applied(user_id, event_key):
                        logger.info("progress.%s replay ignored user=%s key=%s", kind, user_id, event_key)
                        return self.load_or_empty(user_id, now), False

                    stamp = as_utc(now) if now else utcnow()
                    row = self.db.get(LearningProgress, user_id)
                    current = self._parse_stored(user_id, row.document) if row else ProgressRecord.empty(user_id, stamp)
                    updated = mutate(current, user)

                    if row is None:
                        row = LearningProgress(user_id=user_id, document=updated.to_document(), updated_at=stamp)
                        self.db.add(row)
                    else:
                        row.document = updated.to_document()
                        row.updated_at = stamp
                    self._mirror(user, updated, stamp)

                    if event_key:
                        self.db.add(AppliedEvent(user_id=user_id, event_key=event_key, kind=kind))
                    if history:
                        action, details = history
                        self.db.add(ProgressHistory(user_id=user_id, action=action, details=details))
                    if extra_rows:
                        for extra in extra_rows(updated):
                            self.db.add(extra)

                    self.db.commit()
                    return updated, True
            except ProgressError:
                self.db.rollback()
                raise
            except (StaleDataError, IntegrityError) as e:
                self.db.rollback()
                logger.warning(
                    "progress.%s conflict user=%s attempt=%s/%s error=%s",
                    kind, user_id, attempt, self.max_attempts, type(e).__name__,
                )
            except (DBAPIError, SQLAlchemyError) as e:
                self.db.rollback()
                logger.error("progress.%s storage error user=%s error=%s", kind, user_id, e)
                raise StorageUnavailable("Progress store unavailable") from e

        logger.error("progress.%s gave up after %s attempts user=%s", kind, self.max_attempts, user_id)
        raise StorageUnavailable("Progress update kept conflicting, retry later")

    def _parse_stored(self, user_id: str, document: dict) -> ProgressRecord:
        # A stored document that no longer validates is a server fault, not a bad request.
        try:
            return parse_record(document)
        except ValidationError as e:
            logger.error("stored progress document invalid user=%s errors=%s", user_id, e.errors)
            raise StorageUnavailable("Stored progress record is unreadable") from e

    def _mirror(self, user: User, record: ProgressRecord, now: datetime) -> None:
        user.points = record.total_points
        user.streak = record.streak
        user.level = level_for(record.total_points)
        user.badges = badges_for(record.total_points, user.badges or [])
        user.last_active = now
        self.db.add(user)
