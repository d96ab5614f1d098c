"""API tests for curriculum browsing and quiz test sessions."""

import random

import anyio
import httpx
import pytest
from anyio import to_thread
from fastapi.testclient import TestClient

from app.curriculum.index import CurriculumIndex
from app.state import AppState
from tests.helpers.factories import FakeClock

QUICK = {
    "test_type": "quick",
    "class_id": "class-10",
    "subject_id": "science",
    "chapter_id": "sci-10-life-processes",
    "topic_id": "sci-10-nutrition",
}
SPECIFIC = {
    "test_type": "specific",
    "class_id": "class-10",
    "subject_id": "science",
    "chapter_id": "sci-10-light",
}


@pytest.fixture
def fake_clock(client: TestClient, curriculum: CurriculumIndex) -> FakeClock:
    """Swap the app's state for one driven by a fake clock."""
    clock = FakeClock()
    client.app.state.learnsmart = AppState.create(
        curriculum, "local-user", "Learner", clock=clock, rng=random.Random(11)
    )
    return clock


def _start(client: TestClient, payload: dict = QUICK) -> dict:
    response = client.post("/v1/tests/sessions", json=payload)
    assert response.status_code == 201, response.text
    return response.json()


# ============================================================================
# Curriculum
# ============================================================================


class TestCurriculumAPI:
    def test_classes(self, client: TestClient):
        response = client.get("/v1/curriculum/classes")
        assert response.status_code == 200
        assert [c["id"] for c in response.json()] == ["class-10"]

    def test_chapter_summaries(self, client: TestClient):
        response = client.get(
            "/v1/curriculum/subjects/science/chapters", params={"class_id": "class-10"}
        )
        assert response.status_code == 200
        first = response.json()[0]
        assert first == {
            "id": "sci-10-life-processes",
            "title": "Life Processes",
            "topic_count": 4,
            "concept_count": 10,
        }

    def test_topics_and_concept(self, client: TestClient):
        topics = client.get("/v1/curriculum/chapters/sci-10-light/topics").json()
        assert [t["id"] for t in topics] == ["sci-10-reflection"]

        concept = client.get("/v1/curriculum/concepts/autotrophic-nutrition").json()
        assert concept["title"] == "Autotrophic Nutrition"

    @pytest.mark.parametrize(
        "path",
        [
            "/v1/curriculum/classes/class-99",
            "/v1/curriculum/subjects/history/chapters",
            "/v1/curriculum/chapters/missing",
            "/v1/curriculum/chapters/missing/topics",
            "/v1/curriculum/topics/missing",
            "/v1/curriculum/concepts/missing",
        ],
    )
    def test_unknown_nodes(self, client: TestClient, path: str):
        response = client.get(path)
        assert response.status_code == 404
        assert response.json()["error_code"] == "NOT_FOUND"

    def test_search(self, client: TestClient):
        hits = client.get("/v1/curriculum/search", params={"q": "mirror"}).json()
        assert "spherical-mirrors" in {h["id"] for h in hits}
        assert client.get("/v1/curriculum/search", params={"q": "mi"}).json() == []


# ============================================================================
# Question generation
# ============================================================================


def test_generate_quick_questions(client: TestClient):
    response = client.post(
        "/v1/tests/questions/quick",
        json={key: QUICK[key] for key in ("topic_id", "class_id", "subject_id", "chapter_id")},
    )
    assert response.status_code == 200
    questions = response.json()
    assert len(questions) == 3
    assert all(q["topic_id"] == "sci-10-nutrition" for q in questions)


def test_generate_specific_questions_for_empty_chapter(client: TestClient):
    response = client.post(
        "/v1/tests/questions/specific",
        json={"class_id": "class-10", "subject_id": "mathematics", "chapter_id": "math-10-empty"},
    )
    assert response.status_code == 200
    assert response.json() == []


# ============================================================================
# Session lifecycle
# ============================================================================


class TestSessionAPI:
    def test_start_quick_session(self, client: TestClient):
        body = _start(client)
        assert body["test_type"] == "quick"
        assert body["progress"] == {
            "answered_count": 0,
            "total_questions": 3,
            "current_question_index": 0,
        }
        assert body["user_answers"] == [-1, -1, -1]
        assert body["expires_at"] is None

    def test_quick_session_needs_topic(self, client: TestClient):
        payload = {k: v for k, v in QUICK.items() if k != "topic_id"}
        response = client.post("/v1/tests/sessions", json=payload)
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_empty_chapter_cannot_start(self, client: TestClient):
        response = client.post(
            "/v1/tests/sessions",
            json={**SPECIFIC, "subject_id": "mathematics", "chapter_id": "math-10-empty"},
        )
        assert response.status_code == 400
        assert response.json()["error_code"] == "EMPTY_TEST"

    def test_single_active_session(self, client: TestClient):
        first = _start(client)

        response = client.post("/v1/tests/sessions", json=SPECIFIC)
        assert response.status_code == 409
        assert response.json()["error_code"] == "SESSION_ALREADY_ACTIVE"
        assert response.json()["details"]["test_id"] == first["test_id"]

        replaced = _start(client, {**SPECIFIC, "replace": True})
        assert replaced["test_id"] != first["test_id"]
        assert replaced["progress"]["total_questions"] == 10

    def test_answer_and_navigate(self, client: TestClient):
        _start(client)

        body = client.post("/v1/tests/sessions/current/answer", json={"answer_index": 1}).json()
        assert body["user_answers"][0] == 1
        assert body["progress"]["answered_count"] == 1

        body = client.post("/v1/tests/sessions/current/next").json()
        assert body["progress"]["current_question_index"] == 1

        body = client.post("/v1/tests/sessions/current/previous").json()
        assert body["progress"]["current_question_index"] == 0

        current = client.get("/v1/tests/sessions/current").json()
        assert current["current_question"]["id"] == body["current_question"]["id"]

    def test_invalid_answers(self, client: TestClient):
        _start(client)

        response = client.post("/v1/tests/sessions/current/answer", json={"answer_index": 7})
        assert response.status_code == 422
        assert response.json()["error_code"] == "INVALID_ANSWER"

        response = client.post("/v1/tests/sessions/current/answer", json={"answer_index": -1})
        assert response.status_code == 422
        assert response.json()["error_code"] == "VALIDATION_ERROR"

    def test_submit_and_history(self, client: TestClient):
        session = _start(client)
        question = session["current_question"]
        client.post(
            "/v1/tests/sessions/current/answer",
            json={"answer_index": question["correct_answer"]},
        )

        response = client.post("/v1/tests/sessions/current/submit")
        assert response.status_code == 200
        result = response.json()
        assert result["test_id"] == session["test_id"]
        assert result["correct_answers"] >= 1
        assert result["status"] == "submitted"

        history = client.get("/v1/tests/history").json()
        assert [r["test_id"] for r in history] == [session["test_id"]]
        topic_history = client.get(
            "/v1/tests/history", params={"topic_id": "sci-10-respiration"}
        ).json()
        assert topic_history == []

        summary = client.get("/v1/tests/history/summary").json()
        assert summary == {"total_tests_taken": 1, "average_score": result["score"]}

        fetched = client.get(f"/v1/tests/results/{session['test_id']}").json()
        assert fetched["score"] == result["score"]

        response = client.get("/v1/tests/sessions/current")
        assert response.status_code == 409
        assert response.json()["error_code"] == "NO_ACTIVE_SESSION"

    def test_submit_without_session(self, client: TestClient):
        response = client.post("/v1/tests/sessions/current/submit")
        assert response.status_code == 409
        assert response.json()["error_code"] == "NO_ACTIVE_SESSION"

    def test_unknown_result(self, client: TestClient):
        response = client.get("/v1/tests/results/test-0-missing")
        assert response.status_code == 404

    def test_cancel(self, client: TestClient):
        _start(client)
        assert client.delete("/v1/tests/sessions/current").status_code == 204
        assert client.get("/v1/tests/history").json() == []
        assert client.delete("/v1/tests/sessions/current").status_code == 409

    def test_clear_recently_asked(self, client: TestClient):
        _start(client)
        client.post("/v1/tests/sessions/current/submit")
        assert client.delete("/v1/tests/recently-asked").status_code == 204
        assert client.app.state.learnsmart.tests.state.recently_asked_question_ids == []


class TestTimedSessions:
    def test_expiry_on_answer(self, client: TestClient, fake_clock: FakeClock):
        body = _start(client, {**QUICK, "duration_seconds": 60})
        assert body["expires_at"] == fake_clock.now + 60_000

        fake_clock.advance(60_001)
        response = client.post("/v1/tests/sessions/current/answer", json={"answer_index": 0})

        assert response.status_code == 409
        assert response.json()["error_code"] == "SESSION_EXPIRED"
        history = client.get("/v1/tests/history").json()
        assert history[0]["status"] == "expired"
        assert history[0]["test_id"] == body["test_id"]

    def test_late_submit_returns_expired_result(self, client: TestClient, fake_clock: FakeClock):
        _start(client, {**QUICK, "duration_seconds": 30})
        fake_clock.advance(45_000)

        response = client.post("/v1/tests/sessions/current/submit")

        assert response.status_code == 200
        assert response.json()["status"] == "expired"
        assert response.json()["time_taken"] == 45_000


# ============================================================================
# Persistence across restarts
# ============================================================================


def test_session_survives_restart(client: TestClient):
    from app.main import create_app

    started = _start(client)
    client.post("/v1/tests/sessions/current/answer", json={"answer_index": 0})

    with TestClient(create_app()) as restarted:
        current = restarted.get("/v1/tests/sessions/current")
        assert current.status_code == 200
        assert current.json()["test_id"] == started["test_id"]
        assert current.json()["user_answers"][0] == 0


def test_request_id_is_echoed(client: TestClient):
    response = client.get("/v1/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/v1/health").headers["X-Request-ID"]


# ============================================================================
# Concurrency
# ============================================================================


def test_concurrent_writes_outnumbering_worker_threads(kv):
    """Queued writers must not hold worker threads the lock holder needs."""
    from app.main import create_app

    app = create_app()
    statuses: list[int] = []

    async def exercise() -> None:
        to_thread.current_default_thread_limiter().total_tokens = 2
        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:

                async def clear() -> None:
                    response = await client.delete("/v1/tests/recently-asked")
                    statuses.append(response.status_code)

                with anyio.fail_after(10):
                    async with anyio.create_task_group() as tg:
                        for _ in range(5):
                            tg.start_soon(clear)

    anyio.run(exercise)

    assert statuses == [204] * 5
