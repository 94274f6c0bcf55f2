"""
Learning progress data model.

One ProgressRecord per user. The wire/document shape uses camelCase keys
(userId, topicsProgress, completedModules, ...) so that the mobile client and
the stored document agree byte-for-byte; Python code uses snake_case.

Boundary rules applied on every construction:
- timestamps are normalised to timezone-aware UTC
- optional nested fields (modules, completedModules) default to empty
- completedModules and modules[*].completed are reconciled in both directions
- completedModules is kept sorted and de-duplicated
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Annotated, Any, Optional

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, Strict, StrictBool, StrictInt, field_validator, model_validator
from pydantic import ValidationError as PydanticValidationError
from pydantic.alias_generators import to_camel

from lajan.errors import ValidationError


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def as_utc(value: datetime) -> datetime:
    """Naive datetimes are taken to be UTC already."""
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


Timestamp = Annotated[datetime, AfterValidator(as_utc)]
Score = Annotated[float, Strict(), Field(ge=0.0, le=1.0)]
Counter = Annotated[StrictInt, Field(ge=0)]


class _WireModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


class ModuleProgress(_WireModel):
    completed: StrictBool = False
    score: Score = 0.0
    last_attempt: Optional[Timestamp] = None


class TopicProgress(_WireModel):
    # NOTE: set by the first completed module, not when every module is done.
    completed: StrictBool = False
    score: Score = 0.0
    last_attempt: Optional[Timestamp] = None
    questions_answered: Counter = 0
    correct_answers: Counter = 0
    modules: dict[str, ModuleProgress] = Field(default_factory=dict)
    completed_modules: list[str] = Field(default_factory=list)

    @field_validator("modules", mode="before")
    @classmethod
    def _default_modules(cls, value: Any) -> Any:
        return {} if value is None else value

    @field_validator("completed_modules", mode="before")
    @classmethod
    def _default_completed_modules(cls, value: Any) -> Any:
        return [] if value is None else value

    @model_validator(mode="after")
    def _link_completed_modules(self) -> "TopicProgress":
        done = set(self.completed_modules)
        done.update(mid for mid, m in self.modules.items() if m.completed)
        for mid in done:
            module = self.modules.get(mid)
            if module is None:
                # Listed as completed with no detail: synthesise the entry.
                self.modules[mid] = ModuleProgress(completed=True, last_attempt=self.last_attempt)
            elif not module.completed:
                self.modules[mid] = module.model_copy(update={"completed": True})
        self.completed_modules = sorted(done)
        return self

    @classmethod
    def fresh(cls, now: Optional[datetime] = None) -> "TopicProgress":
        return cls(last_attempt=now)


class ProgressRecord(_WireModel):
    user_id: str = Field(min_length=1)
    topics_progress: dict[str, TopicProgress] = Field(default_factory=dict)
    streak: Counter = 0
    last_completed_date: Optional[Timestamp] = None
    total_points: Counter = 0
    updated_at: Optional[Timestamp] = None

    @field_validator("topics_progress", mode="before")
    @classmethod
    def _default_topics(cls, value: Any) -> Any:
        return {} if value is None else value

    @model_validator(mode="after")
    def _streak_needs_a_completion(self) -> "ProgressRecord":
        if self.streak > 0 and self.last_completed_date is None:
            raise ValueError("streak > 0 requires lastCompletedDate")
        return self

    @classmethod
    def empty(cls, user_id: str, now: Optional[datetime] = None) -> "ProgressRecord":
        return cls(user_id=user_id, updated_at=now or utcnow())

    def topic(self, topic_id: str) -> Optional[TopicProgress]:
        return self.topics_progress.get(topic_id)

    def module(self, topic_id: str, module_id: str) -> Optional[ModuleProgress]:
        topic = self.topics_progress.get(topic_id)
        if topic is None:
            return None
        return topic.modules.get(module_id)

    def to_document(self) -> dict:
        """JSON-ready camelCase dict, the shape stored and sent over the wire."""
        return self.model_dump(mode="json", by_alias=True)


def parse_record(data: Any) -> ProgressRecord:
    """Validate an untrusted payload, raising the domain ValidationError."""
    if isinstance(data, ProgressRecord):
        return data
    try:
        return ProgressRecord.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError("Invalid progress record", errors=e.errors(include_url=False)) from e
