# tests/test_quiz_api.py
import pytest
from fastapi.testclient import TestClient

from brainquest.services import session_registry
from brainquest.utils.config import settings


def correct_option_id(session_id: str) -> str:
    session = session_registry.quiz_sessions[session_id]
    return session.current_question.correct_answer.id


def wrong_option_id(session_id: str) -> str:
    session = session_registry.quiz_sessions[session_id]
    correct = session.current_question.correct_answer.id
    return next(o.id for o in session.current_question.options if o.id != correct)


@pytest.mark.api
class TestQuizAPI:
    USER_ID = "quiz_tester"

    def start_quiz(self, client: TestClient, user_id: str, **overrides):
        payload = {"user_id": user_id, "topics": ["arithmetic"], "count": 3, "difficulty": 1, "seed": 7}
        payload.update(overrides)
        response = client.post("/quiz/", json=payload)
        assert response.status_code == 200, response.text
        return response.json()

    def test_create_quiz(self, client: TestClient):
        data = self.start_quiz(client, self.USER_ID)
        assert data["phase"] == "presenting"
        assert data["index"] == 0
        assert data["total_questions"] == 3
        assert data["type"] == "practice"
        question = data["question"]
        assert len(question["options"]) == 4
        # The answer is never sent before the question is answered
        assert "correct_answer" not in question
        assert "explanation" not in question

        fetched = client.get(f"/quiz/{data['session_id']}")
        assert fetched.status_code == 200
        assert fetched.json()["question"]["prompt"] == question["prompt"]

    def test_same_seed_same_questions(self, client: TestClient):
        first = self.start_quiz(client, self.USER_ID, seed=123)
        second = self.start_quiz(client, self.USER_ID, seed=123)
        assert first["question"]["prompt"] == second["question"]["prompt"]
        assert ([o["label"] for o in first["question"]["options"]]
                == [o["label"] for o in second["question"]["options"]])

    def test_full_quiz_flow_persists_progress(self, client: TestClient):
        user_id = "quiz_flow_tester"
        data = self.start_quiz(client, user_id)
        session_id = data["session_id"]

        unlocked = []
        for i in range(3):
            option_id = correct_option_id(session_id) if i < 2 else wrong_option_id(session_id)
            answered = client.post(f"/quiz/{session_id}/select", json={"option_id": option_id})
            assert answered.status_code == 200
            answered = answered.json()
            unlocked += answered["achievements_unlocked"]
            assert answered["phase"] == "feedback"
            assert answered["result"]["is_correct"] is (i < 2)
            assert answered["result"]["selected_option_id"] == option_id
            assert "explanation" in answered["question"]

            moved = client.post(f"/quiz/{session_id}/continue")
            assert moved.status_code == 200
            unlocked += moved.json()["achievements_unlocked"]
            if moved.json()["phase"] == "level_up":
                moved = client.post(f"/quiz/{session_id}/advance")
                assert moved.status_code == 200
                unlocked += moved.json()["achievements_unlocked"]

        final = moved.json()
        assert final["phase"] == "finished"
        summary = final["summary"]
        assert summary["total_questions"] == 3
        assert summary["correct_answers"] == 2
        assert summary["accuracy"] == pytest.approx(2 / 3)
        assert summary["subject"] == "maths"

        sessions = client.get(f"/users/{user_id}/sessions").json()
        assert [s["id"] for s in sessions] == [session_id]
        assert sessions[0]["xp_earned"] == summary["xp_earned"]

        attempts = client.get(f"/users/{user_id}/attempts", params={"session_id": session_id}).json()
        assert len(attempts) == 3
        assert sum(a["xp_earned"] for a in attempts) == summary["xp_earned"]

        # Achievement rewards are credited on top of what the session earned
        xp = client.get(f"/users/{user_id}/xp").json()
        assert xp["total_xp"] == summary["xp_earned"] + sum(a["xp_reward"] for a in unlocked)

        profile = client.get(f"/users/{user_id}/profile").json()
        assert profile["completed_sessions"] == 1
        assert profile["streak"]["current_streak"] == 1

    def test_repeat_selection_is_ignored(self, client: TestClient):
        data = self.start_quiz(client, self.USER_ID)
        session_id = data["session_id"]
        wrong = wrong_option_id(session_id)
        right = correct_option_id(session_id)

        first = client.post(f"/quiz/{session_id}/select", json={"option_id": wrong}).json()
        second = client.post(f"/quiz/{session_id}/select", json={"option_id": right}).json()
        assert second["result"] == first["result"]
        assert second["xp_earned"] == first["xp_earned"]
        assert len(session_registry.quiz_sessions[session_id].attempts) == 1

    def test_invalid_transition_is_conflict(self, client: TestClient):
        data = self.start_quiz(client, self.USER_ID)
        response = client.post(f"/quiz/{data['session_id']}/continue")
        assert response.status_code == 409

    def test_unknown_option_is_bad_request(self, client: TestClient):
        data = self.start_quiz(client, self.USER_ID)
        response = client.post(f"/quiz/{data['session_id']}/select", json={"option_id": "nope"})
        assert response.status_code == 400

    def test_unknown_topic_is_not_available(self, client: TestClient):
        response = client.post("/quiz/", json={"user_id": self.USER_ID, "topics": ["astrology"]})
        assert response.status_code == 404

    def test_unknown_session(self, client: TestClient):
        assert client.get("/quiz/does-not-exist").status_code == 404

    def test_retry_starts_over_with_new_id(self, client: TestClient):
        data = self.start_quiz(client, self.USER_ID)
        old_id = data["session_id"]
        client.post(f"/quiz/{old_id}/select", json={"option_id": correct_option_id(old_id)})

        retried = client.post(f"/quiz/{old_id}/retry")
        assert retried.status_code == 200
        retried = retried.json()
        assert retried["phase"] == "presenting"
        assert retried["index"] == 0
        assert retried["xp_earned"] == 0
        assert retried["session_id"] != old_id
        assert client.get(f"/quiz/{old_id}").status_code == 404
        assert client.get(f"/quiz/{retried['session_id']}").status_code == 200

    def test_finished_session_is_released_after_ttl(self, client: TestClient, monkeypatch):
        monkeypatch.setattr(settings, "closed_session_ttl", 0)
        data = self.start_quiz(client, self.USER_ID, count=1)
        session_id = data["session_id"]
        client.post(f"/quiz/{session_id}/select", json={"option_id": correct_option_id(session_id)})
        finished = client.post(f"/quiz/{session_id}/continue").json()
        if finished["phase"] == "level_up":
            finished = client.post(f"/quiz/{session_id}/advance").json()
        # The finishing response still carries the summary
        assert finished["phase"] == "finished"
        assert finished["summary"]["total_questions"] == 1
        assert client.get(f"/quiz/{session_id}").status_code == 404
        assert session_id not in session_registry.quiz_sessions

    def test_abandon_closes_the_session(self, client: TestClient):
        data = self.start_quiz(client, self.USER_ID)
        session_id = data["session_id"]
        response = client.delete(f"/quiz/{session_id}")
        assert response.status_code == 200
        assert client.get(f"/quiz/{session_id}").status_code == 404


@pytest.mark.api
class TestDailyChallengeAPI:
    def test_list_daily_challenges(self, client: TestClient):
        response = client.get("/challenges/daily", params={"day": "2026-10-17"})
        assert response.status_code == 200
        data = response.json()
        assert len(data) == 3
        assert data == client.get("/challenges/daily", params={"day": "2026-10-17"}).json()

    def test_start_challenge_quiz(self, client: TestClient):
        challenge = client.get("/challenges/daily", params={"day": "2026-10-17"}).json()[0]
        response = client.post(f"/challenges/daily/{challenge['id']}/quiz", json={"user_id": "challenger"})
        assert response.status_code == 200
        data = response.json()
        assert data["type"] == "daily_challenge"
        assert data["total_questions"] == challenge["question_count"]
        assert data["challenge"]["id"] == challenge["id"]

    def test_unknown_challenge(self, client: TestClient):
        response = client.post("/challenges/daily/daily-2026-10-17-7/quiz", json={"user_id": "challenger"})
        assert response.status_code == 404
