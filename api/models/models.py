import uuid
from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import relationship

from api.config import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _uuid() -> str:
    return str(uuid.uuid4())


class User(Base):
    __tablename__ = "users"
    id = Column(String, primary_key=True, index=True, default=_uuid)  # uuid
    email = Column(String, unique=True, index=True, nullable=False)
    hashed_password = Column(String, nullable=False)
    preferences = Column(JSON)
    name = Column(String, nullable=True)
    preferred_topics = Column(JSON, nullable=True)  # list[str] of topic ids
    learning_style = Column(String, nullable=True)  # visual|practical
    # Mirrors of the progress record, kept in step by the progress store.
    points = Column(Integer, default=0, nullable=False)
    streak = Column(Integer, default=0, nullable=False)
    level = Column(Integer, default=1, nullable=False)
    completed_lessons = Column(JSON, nullable=True)  # list[str]
    badges = Column(JSON, nullable=True)  # list[str]
    last_active = Column(DateTime(timezone=True), nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    progress = relationship("LearningProgress", backref="user", uselist=False, cascade="all, delete-orphan")


class LearningProgress(Base):
    """One row per user. `document` holds the camelCase ProgressRecord as-is."""

    __tablename__ = "learning_progress"
    user_id = Column(String, ForeignKey("users.id"), primary_key=True)
    document = Column(JSON, nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)
    updated_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)

    # UPDATE ... WHERE version = :old; a concurrent writer raises StaleDataError.
    __mapper_args__ = {"version_id_col": version}


class AppliedEvent(Base):
    """Idempotency keys already applied to a user's record."""

    __tablename__ = "applied_events"
    __table_args__ = (UniqueConstraint("user_id", "event_key", name="uq_applied_events_user_key"),)
    id = Column(String, primary_key=True, index=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    event_key = Column(String, nullable=False)
    kind = Column(String, nullable=False)  # module|lesson|sync
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class PointsTransaction(Base):
    __tablename__ = "points_transactions"
    id = Column(String, primary_key=True, index=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    points = Column(Integer, nullable=False)
    reason = Column(String, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class ProgressHistory(Base):
    __tablename__ = "progress_history"
    id = Column(String, primary_key=True, index=True, default=_uuid)
    user_id = Column(String, ForeignKey("users.id"), index=True, nullable=False)
    action = Column(String, nullable=False)
    details = Column(JSON, nullable=True)
    created_at = Column(DateTime(timezone=True), default=_utcnow, nullable=False)


class Topic(Base):
    __tablename__ = "topics"
    id = Column(String, primary_key=True, index=True)  # slug, e.g. "basics"
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    icon = Column(String, nullable=True)
    required_points = Column(Integer, default=0, nullable=False)
    order_index = Column(Integer, nullable=False)

    modules = relationship(
        "TopicModule",
        backref="topic",
        cascade="all, delete-orphan",
        order_by="TopicModule.order_index",
    )


class TopicModule(Base):
    __tablename__ = "topic_modules"
    id = Column(String, primary_key=True, index=True)  # e.g. "basics-1"
    topic_id = Column(String, ForeignKey("topics.id"), index=True, nullable=False)
    title = Column(String, nullable=False)
    description = Column(Text, nullable=True)
    content = Column(Text, nullable=True)
    key_points = Column(JSON, nullable=True)  # list[str]
    difficulty = Column(String, default="beginner", nullable=False)
    order_index = Column(Integer, nullable=False)
