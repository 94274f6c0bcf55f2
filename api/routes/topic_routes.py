"""
Topic catalog endpoints (read-only).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from api.config import get_db
from api.models.models import Topic as DbTopic, User
from api.schemas.topic_schemas import RecommendedTopicResponse, TopicListResponse, TopicModuleResponse, TopicResponse
from api.services.catalog import list_topics, recommended_topic
from api.services.progress_service import ProgressService
from api.utils.auth import get_current_user

topic_routes = APIRouter()


def _topic_response(row: DbTopic) -> TopicResponse:
    return TopicResponse(
        id=row.id,
        title=row.title,
        description=row.description,
        icon=row.icon,
        required_points=row.required_points or 0,
        modules=[
            TopicModuleResponse(
                id=m.id,
                title=m.title,
                description=m.description,
                content=m.content,
                key_points=list(m.key_points or []),
                difficulty=m.difficulty or "beginner",
            )
            for m in row.modules
        ],
    )


@topic_routes.get("", response_model=TopicListResponse)
async def get_topics(db: Session = Depends(get_db)) -> TopicListResponse:
    """All topics in catalog order."""
    return TopicListResponse(topics=[_topic_response(t) for t in list_topics(db)])


@topic_routes.get("/recommended", response_model=RecommendedTopicResponse)
async def get_recommended_topic(
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> RecommendedTopicResponse:
    """
    Topic of the day for the caller. Stable for the whole calendar day;
    preferred topics win when the user has enough points for one.
    """
    today = ProgressService(db).today()
    row = recommended_topic(db, current_user, today)
    return RecommendedTopicResponse(
        topic=_topic_response(row) if row else None,
        date=today.isoformat(),
    )
