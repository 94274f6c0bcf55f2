"""
Learning progress endpoints: read, initialise, sync, completion events,
points, streak, rewards and history for the authenticated user.
"""

from dataclasses import asdict
from typing import Any, Optional

from fastapi import APIRouter, Body, Depends, Header, Query, status
from sqlalchemy.orm import Session

from api.config import get_db
from api.models.models import User
from api.schemas.progress_schemas import (
    AddPointsRequest,
    CompleteLessonRequest,
    CompleteLessonResponse,
    CompleteModuleRequest,
    HistoryItem,
    HistoryRequest,
    HistoryResponse,
    RewardItem,
    RewardsResponse,
    StreakResponse,
    TodayResponse,
)
from api.services.catalog import get_topic
from api.services.progress_service import ProgressService
from api.utils.auth import get_current_user
from api.utils.common import iso_format
from lajan.model import ProgressRecord

progress_routes = APIRouter()


def _history_item(entry) -> HistoryItem:
    return HistoryItem(
        id=entry.id,
        action=entry.action,
        details=entry.details,
        created_at=iso_format(entry.created_at),
    )


@progress_routes.get("", response_model=ProgressRecord)
async def get_progress(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProgressRecord:
    """Stored progress record for the caller; the empty default if none exists yet."""
    return ProgressService(db).get(current_user)


@progress_routes.post("/initialize", response_model=ProgressRecord, status_code=status.HTTP_201_CREATED)
async def initialize_progress(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProgressRecord:
    return ProgressService(db).initialize(current_user)


@progress_routes.post("/sync", response_model=ProgressRecord)
async def sync_progress(
    payload: dict[str, Any] = Body(...),
    idempotency_key: Optional[str] = Header(None),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProgressRecord:
    """
    Merge the client's ProgressRecord into the stored one and return the
    merged record, which the client should adopt as its local cache.
    Resending the same Idempotency-Key returns the stored record unchanged.
    """
    return ProgressService(db).sync(current_user, payload, idempotency_key)


@progress_routes.post("/module/complete", response_model=ProgressRecord)
async def complete_module(
    body: CompleteModuleRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProgressRecord:
    return ProgressService(db).complete_module(
        current_user, body.topic_id, body.module_id, body.score, body.event_id
    )


@progress_routes.post("/lesson/complete", response_model=CompleteLessonResponse)
async def complete_lesson(
    body: CompleteLessonRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> CompleteLessonResponse:
    record, lessons, achievement = ProgressService(db).complete_lesson(current_user, body.lesson_id, body.event_id)
    return CompleteLessonResponse(progress=record.to_document(), completed_lessons=lessons, achievement=achievement)


@progress_routes.post("/points/add", response_model=ProgressRecord)
async def add_points(
    body: AddPointsRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ProgressRecord:
    return ProgressService(db).add_points(current_user, body.points, body.reason)


@progress_routes.get("/streak", response_model=StreakResponse)
async def get_streak(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> StreakResponse:
    record, completed_today = ProgressService(db).streak(current_user)
    return StreakResponse(
        streak=record.streak,
        last_completed_date=record.last_completed_date,
        completed_today=completed_today,
    )


@progress_routes.get("/rewards", response_model=RewardsResponse)
async def get_rewards(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RewardsResponse:
    summary = ProgressService(db).rewards(current_user)
    upcoming = summary.pop("next_reward")
    unlocked = summary.pop("unlocked")
    return RewardsResponse(
        **summary,
        unlocked=[RewardItem(**asdict(r)) for r in unlocked],
        next_reward=RewardItem(**asdict(upcoming)) if upcoming else None,
    )


@progress_routes.post("/history/add", response_model=HistoryItem, status_code=status.HTTP_201_CREATED)
async def add_history(
    body: HistoryRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HistoryItem:
    entry = ProgressService(db).add_history(current_user, body.action, body.details)
    return _history_item(entry)


@progress_routes.get("/history", response_model=HistoryResponse)
async def get_history(
    limit: int = Query(50, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> HistoryResponse:
    entries = ProgressService(db).history(current_user, limit=limit)
    return HistoryResponse(items=[_history_item(e) for e in entries])


@progress_routes.get("/topics/{topic_id}/today", response_model=TodayResponse)
async def topic_completed_today(
    topic_id: str,
    module_ids: Optional[str] = Query(None, alias="moduleIds", description="Comma-separated; defaults to the topic's catalog modules"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> TodayResponse:
    if module_ids is not None:
        ids = [m.strip() for m in module_ids.split(",") if m.strip()]
    else:
        topic = get_topic(db, topic_id)
        ids = [m.id for m in topic.modules] if topic else []
    per_module, all_done = ProgressService(db).completed_today(current_user, topic_id, ids)
    return TodayResponse(topic_id=topic_id, modules=per_module, all_completed=all_done)
