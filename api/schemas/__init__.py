"""
API schemas package. Import from submodules or from this package.

Example:
    from api.schemas import CompleteModuleRequest, TopicResponse
    from api.schemas.progress_schemas import CompleteModuleRequest
"""

from api.schemas.auth_schemas import (
    AuthTokenPayload,
    LoginRequest,
    LoginResponse,
    LogoutResponse,
    RegisterRequest,
    RegisterResponse,
)
from api.schemas.user_schemas import User, UpdateProfileRequest
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
from api.schemas.topic_schemas import (
    RecommendedTopicResponse,
    TopicListResponse,
    TopicModuleResponse,
    TopicResponse,
)
from api.schemas.quiz_schemas import (
    QuizFeedbackRequest,
    QuizFeedbackResponse,
    QuizQuestionsRequest,
    QuizQuestionsResponse,
)

__all__ = [
    # auth
    "AuthTokenPayload",
    "LoginRequest",
    "LoginResponse",
    "LogoutResponse",
    "RegisterRequest",
    "RegisterResponse",
    # user
    "User",
    "UpdateProfileRequest",
    # progress
    "AddPointsRequest",
    "CompleteLessonRequest",
    "CompleteLessonResponse",
    "CompleteModuleRequest",
    "HistoryItem",
    "HistoryRequest",
    "HistoryResponse",
    "RewardItem",
    "RewardsResponse",
    "StreakResponse",
    "TodayResponse",
    # topics
    "RecommendedTopicResponse",
    "TopicListResponse",
    "TopicModuleResponse",
    "TopicResponse",
    # quiz
    "QuizFeedbackRequest",
    "QuizFeedbackResponse",
    "QuizQuestionsRequest",
    "QuizQuestionsResponse",
]
