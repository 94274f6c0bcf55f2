"""
API integration tests using FastAPI TestClient with in-memory DB.
"""
import pytest
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError
from sqlalchemy.orm import Session

from api.api import app
from api.services.progress_service import ProgressService
from api.services.progress_store import ProgressStore
from lajan.errors import StorageUnavailable
from lajan.quiz import QuizQuestion, QuizQuestionSet


def _bearer(user: dict) -> dict:
    return {"Authorization": f"Bearer {user['token']}"}


@pytest.mark.integration
class TestHealthRoutes:
    """Health and root endpoints (no auth)."""

    def test_root_returns_healthy(self, api_client: TestClient):
        response = api_client.get("/")
        assert response.status_code == 200
        assert "Healthy" in response.json()["message"]

    def test_request_id_header(self, api_client: TestClient):
        response = api_client.get("/", headers={"X-Request-ID": "req-123"})
        assert response.headers.get("X-Request-ID") == "req-123"


@pytest.mark.integration
class TestAuthRoutes:
    """Auth: register, login, logout, profile."""

    def test_register_creates_progress(self, api_client: TestClient, registered_user):
        response = api_client.get("/progress/history")
        assert response.status_code == 200
        assert [item["action"] for item in response.json()["items"]] == ["initialize"]

    def test_register_duplicate_fails(self, api_client: TestClient, registered_user):
        response = api_client.post(
            "/auth/register",
            json={"email": registered_user["email"], "password": "other1", "confirm_password": "other1"},
        )
        assert response.status_code == 400

    def test_register_password_mismatch(self, api_client: TestClient):
        response = api_client.post(
            "/auth/register",
            json={"email": "new@example.com", "password": "secret1", "confirm_password": "secret2"},
        )
        assert response.status_code == 400

    def test_login_success(self, api_client: TestClient, registered_user):
        response = api_client.post(
            "/auth/login",
            json={"email": registered_user["email"], "password": "testpass123"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["token_set"] is True
        assert data["message"] == "Welcome back, Test Learner"
        assert data["access_token"]

    def test_login_wrong_password_fails(self, api_client: TestClient, registered_user):
        response = api_client.post(
            "/auth/login",
            json={"email": registered_user["email"], "password": "wrong"},
        )
        assert response.status_code == 401

    def test_me_with_bearer(self, api_client: TestClient, registered_user):
        api_client.cookies.clear()
        response = api_client.get("/auth/me", headers=_bearer(registered_user))
        assert response.status_code == 200
        data = response.json()
        assert data["id"] == registered_user["id"]
        assert data["preferred_topics"] == ["banking"]
        assert "hashed_password" not in data

    def test_update_profile(self, api_client: TestClient, registered_user):
        response = api_client.patch(
            "/auth/me",
            json={"name": "Ada", "preferred_topics": ["taxes", "taxes", "credit"], "learning_style": "visual"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Ada"
        assert data["preferred_topics"] == ["taxes", "credit"]
        assert data["learning_style"] == "visual"

    def test_logout_clears_cookie(self, api_client: TestClient, registered_user):
        assert api_client.post("/auth/logout").status_code == 200
        assert api_client.get("/auth/me").status_code == 401

    def test_invalid_token(self, api_client: TestClient):
        response = api_client.get("/progress", headers={"Authorization": "Bearer not-a-jwt"})
        assert response.status_code == 401

    @pytest.mark.parametrize("path", ["/progress", "/progress/streak", "/progress/rewards", "/topics/recommended"])
    def test_requires_auth(self, api_client: TestClient, path):
        assert api_client.get(path).status_code == 401


@pytest.mark.integration
class TestProgressRoutes:
    def test_get_initial_record(self, api_client: TestClient, registered_user):
        response = api_client.get("/progress")
        assert response.status_code == 200
        data = response.json()
        assert data["userId"] == registered_user["id"]
        assert data["totalPoints"] == 0 and data["streak"] == 0
        assert data["topicsProgress"] == {}

    def test_initialize_is_idempotent(self, api_client: TestClient, registered_user):
        first = api_client.post("/progress/initialize")
        second = api_client.post("/progress/initialize")
        assert first.status_code == second.status_code == 201
        assert first.json() == second.json()

    def test_complete_module(self, api_client: TestClient, registered_user):
        response = api_client.post(
            "/progress/module/complete",
            json={"topicId": "basics", "moduleId": "basics-1", "score": 0.8},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["totalPoints"] == 50
        assert data["streak"] == 1
        topic = data["topicsProgress"]["basics"]
        assert topic["completed"] is True
        assert topic["completedModules"] == ["basics-1"]
        assert topic["modules"]["basics-1"]["score"] == 0.8

        me = api_client.get("/auth/me").json()
        assert (me["points"], me["streak"]) == (50, 1)

    def test_complete_module_replay_with_event_id(self, api_client: TestClient, registered_user):
        body = {"topicId": "basics", "moduleId": "basics-1", "score": 0.8, "eventId": "evt-1"}
        api_client.post("/progress/module/complete", json=body)
        data = api_client.post("/progress/module/complete", json=body).json()
        assert data["topicsProgress"]["basics"]["questionsAnswered"] == 1
        assert data["totalPoints"] == 50

    def test_complete_module_bad_score(self, api_client: TestClient, registered_user):
        response = api_client.post(
            "/progress/module/complete",
            json={"topicId": "basics", "moduleId": "basics-1", "score": 2},
        )
        assert response.status_code == 422
        assert response.json()["detail"][0]["loc"][-1] == "score"

    def test_sync_merges(self, api_client: TestClient, registered_user):
        api_client.post("/progress/module/complete", json={"topicId": "basics", "moduleId": "basics-1"})
        client_record = {
            "userId": registered_user["id"],
            "totalPoints": 120,
            "streak": 3,
            "lastCompletedDate": "2020-01-01T00:00:00Z",
            "topicsProgress": {
                "credit": {"completed": True, "score": 0.9, "completedModules": ["credit-1"]},
            },
        }
        response = api_client.post("/progress/sync", json=client_record)
        assert response.status_code == 200
        data = response.json()
        assert data["totalPoints"] == 120
        assert data["streak"] == 3
        assert set(data["topicsProgress"]) == {"basics", "credit"}
        assert data["topicsProgress"]["credit"]["modules"]["credit-1"]["completed"] is True
        assert api_client.get("/progress").json() == data

    def test_sync_user_mismatch(self, api_client: TestClient, registered_user):
        response = api_client.post("/progress/sync", json={"userId": "someone-else"})
        assert response.status_code == 400
        assert response.json()["detail"] == "User ID mismatch in progress data"

    def test_sync_invalid_record(self, api_client: TestClient, registered_user):
        response = api_client.post(
            "/progress/sync",
            json={"userId": registered_user["id"], "totalPoints": -5},
        )
        assert response.status_code == 422
        assert response.json()["errors"]

    def test_sync_rejects_string_completion_flag(self, api_client: TestClient, registered_user):
        response = api_client.post(
            "/progress/sync",
            json={"userId": registered_user["id"], "topicsProgress": {"credit": {"completed": "yes"}}},
        )
        assert response.status_code == 422
        assert api_client.get("/progress").json()["topicsProgress"] == {}

    def test_sync_idempotency_key(self, api_client: TestClient, registered_user):
        body = {
            "userId": registered_user["id"],
            "topicsProgress": {"basics": {"questionsAnswered": 2, "correctAnswers": 1}},
        }
        headers = {"Idempotency-Key": "sync-1"}
        api_client.post("/progress/sync", json=body, headers=headers)
        data = api_client.post("/progress/sync", json=body, headers=headers).json()
        assert data["topicsProgress"]["basics"]["questionsAnswered"] == 2

    def test_complete_lesson_achievement(self, api_client: TestClient, registered_user):
        response = api_client.post("/progress/lesson/complete", json={"lessonId": "lesson-1"})
        assert response.status_code == 200
        data = response.json()
        assert data["achievement"] == "First Lesson"
        assert data["completedLessons"] == ["lesson-1"]
        assert data["progress"]["totalPoints"] == 10

        again = api_client.post("/progress/lesson/complete", json={"lessonId": "lesson-1"}).json()
        assert again["achievement"] is None
        assert again["progress"]["totalPoints"] == 10

    def test_add_points(self, api_client: TestClient, registered_user):
        response = api_client.post("/progress/points/add", json={"points": 25, "reason": "daily bonus"})
        assert response.status_code == 200
        assert response.json()["totalPoints"] == 25

    def test_add_points_rejects_non_positive(self, api_client: TestClient, registered_user):
        response = api_client.post("/progress/points/add", json={"points": 0})
        assert response.status_code == 400
        assert response.json()["detail"] == "Points must be a positive number"

    def test_streak(self, api_client: TestClient, registered_user):
        assert api_client.get("/progress/streak").json()["completedToday"] is False
        api_client.post("/progress/module/complete", json={"topicId": "banking", "moduleId": "banking-1"})
        data = api_client.get("/progress/streak").json()
        assert data["streak"] == 1
        assert data["completedToday"] is True
        assert data["lastCompletedDate"]

    def test_rewards(self, api_client: TestClient, registered_user):
        api_client.post("/progress/points/add", json={"points": 520})
        api_client.post("/progress/lesson/complete", json={"lessonId": "lesson-1"})
        data = api_client.get("/progress/rewards").json()
        assert data["totalPoints"] == 530
        assert data["level"] == 6
        assert data["badges"] == ["Beginner", "Intermediate"]
        assert data["achievements"] == ["First Lesson"]
        assert data["completedLessons"] == 1
        assert [r["points"] for r in data["unlocked"]] == [500]
        assert data["nextReward"]["points"] == 750
        assert data["pointsToNextReward"] == 220

    def test_history(self, api_client: TestClient, registered_user):
        created = api_client.post(
            "/progress/history/add", json={"action": "opened_topic", "details": {"topicId": "credit"}}
        )
        assert created.status_code == 201
        assert created.json()["createdAt"].endswith("Z")

        items = api_client.get("/progress/history", params={"limit": 10}).json()["items"]
        actions = {item["action"] for item in items}
        assert {"initialize", "opened_topic"} <= actions
        assert len(api_client.get("/progress/history", params={"limit": 1}).json()["items"]) == 1

    def test_topic_completed_today(self, api_client: TestClient, registered_user):
        api_client.post("/progress/module/complete", json={"topicId": "investing", "moduleId": "investing-1"})

        data = api_client.get("/progress/topics/investing/today").json()
        assert data["modules"] == {"investing-1": True, "investing-2": False}
        assert data["allCompleted"] is False

        data = api_client.get("/progress/topics/investing/today", params={"moduleIds": "investing-1"}).json()
        assert data["allCompleted"] is True

        data = api_client.get("/progress/topics/unknown/today").json()
        assert data == {"topicId": "unknown", "modules": {}, "allCompleted": False}

    def test_storage_unavailable_is_503(self, api_client: TestClient, registered_user, monkeypatch):
        def unavailable(*_args, **_kwargs):
            raise StorageUnavailable("Progress store unavailable")

        monkeypatch.setattr(ProgressStore, "update", unavailable)
        response = api_client.post("/progress/points/add", json={"points": 5})
        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"

    def test_history_storage_failure_is_503(self, api_client: TestClient, registered_user, monkeypatch):
        def failing_commit(_session):
            raise OperationalError("INSERT INTO progress_history", {}, Exception("database is locked"))

        monkeypatch.setattr(Session, "commit", failing_commit)
        response = api_client.post("/progress/history/add", json={"action": "viewed"})
        assert response.status_code == 503
        assert response.headers["Retry-After"] == "5"
        assert "sync later" in response.json()["detail"]

    def test_unexpected_error_hides_details(self, api_client: TestClient, registered_user, monkeypatch):
        def boom(*_args, **_kwargs):
            raise RuntimeError("secret internals")

        monkeypatch.setattr(ProgressService, "get", boom)
        client = TestClient(app, raise_server_exceptions=False)
        response = client.get("/progress", headers=_bearer(registered_user))
        assert response.status_code == 500
        assert "secret" not in response.text


@pytest.mark.integration
class TestTopicRoutes:
    def test_list_in_catalog_order(self, api_client: TestClient):
        response = api_client.get("/topics")
        assert response.status_code == 200
        topics = response.json()["topics"]
        assert [t["id"] for t in topics] == [
            "basics", "investing", "credit", "banking", "taxes", "retirement", "economics",
        ]
        basics = topics[0]
        assert basics["requiredPoints"] == 190
        assert [m["id"] for m in basics["modules"]] == ["basics-1", "basics-2", "basics-3"]
        assert basics["modules"][0]["keyPoints"]

    def test_recommended_for_new_user(self, api_client: TestClient, registered_user):
        response = api_client.get("/topics/recommended")
        assert response.status_code == 200
        data = response.json()
        assert data["topic"]["id"] == "banking"
        assert data["date"]

    def test_recommended_is_stable(self, api_client: TestClient, registered_user):
        api_client.post("/progress/points/add", json={"points": 200})
        first = api_client.get("/topics/recommended").json()
        second = api_client.get("/topics/recommended").json()
        assert first == second


@pytest.mark.integration
class TestQuizRoutes:
    def test_questions_fallback_when_generator_down(self, api_client: TestClient, registered_user):
        response = api_client.post(
            "/quiz/questions",
            json={"moduleTitle": "Budgeting 101", "count": 3, "learningStyle": "practical"},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["generated"] is False
        assert len(data["questions"]) == 3
        assert all(q["practicalExample"] for q in data["questions"])

    def test_questions_generated(self, api_client: TestClient, registered_user, fake_llm):
        fake_llm.error = None
        fake_llm.structured = QuizQuestionSet(
            questions=[
                QuizQuestion(
                    question="What is compound interest?",
                    options=["Interest on interest", "A fee", "A tax", "A loan"],
                    correct_answer="Interest on interest",
                    explanation="Interest earned on previously earned interest.",
                )
            ]
        )
        response = api_client.post("/quiz/questions", json={"moduleTitle": "Saving Money"})
        data = response.json()
        assert data["generated"] is True
        assert data["questions"][0]["id"] == "saving-money-q1"
        assert data["questions"][0]["correctAnswer"] == "Interest on interest"
        assert fake_llm.calls[0][0] == "generate_structured"

    def test_feedback_fallback(self, api_client: TestClient, registered_user):
        response = api_client.post(
            "/quiz/feedback",
            json={"moduleTitle": "Budgeting 101", "score": 9, "totalQuestions": 10},
        )
        assert response.status_code == 200
        data = response.json()
        assert data["generated"] is False
        assert data["percentage"] == 90
        assert "Budgeting 101" in data["feedback"]

    def test_feedback_generated(self, api_client: TestClient, registered_user, fake_llm):
        fake_llm.error = None
        fake_llm.text = "Great job on credit scores!"
        data = api_client.post(
            "/quiz/feedback",
            json={"moduleTitle": "Credit Scores", "score": 2, "totalQuestions": 4},
        ).json()
        assert data == {"feedback": "Great job on credit scores!", "percentage": 50, "generated": True}

    def test_requires_auth(self, api_client: TestClient):
        response = api_client.post("/quiz/questions", json={"moduleTitle": "m"})
        assert response.status_code == 401
