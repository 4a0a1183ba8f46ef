# tests/test_boss_api.py
import pytest
from fastapi.testclient import TestClient

from brainquest.services import session_registry
from brainquest.services.boss_catalog import find_boss


def correct_option_id(encounter_id: str) -> str:
    return session_registry.battles[encounter_id].current_question.correct_answer.id


def wrong_option_id(encounter_id: str) -> str:
    question = session_registry.battles[encounter_id].current_question
    return next(o.id for o in question.options if o.id != question.correct_answer.id)


@pytest.mark.api
class TestBossAPI:
    USER_ID = "boss_tester"
    BOSS_ID = "number_nibbler"

    def create_battle(self, client: TestClient, user_id: str = USER_ID):
        response = client.post(f"/bosses/{self.BOSS_ID}/battles", json={"user_id": user_id})
        assert response.status_code == 200, response.text
        return response.json()

    def test_list_bosses(self, client: TestClient):
        response = client.get("/bosses/")
        assert response.status_code == 200
        assert len(response.json()) == 6

        maths = client.get("/bosses/", params={"subject": "maths"}).json()
        assert {b["id"] for b in maths} == {"number_nibbler", "times_table_titan"}

    def test_get_boss(self, client: TestClient):
        assert client.get(f"/bosses/{self.BOSS_ID}").json()["total_hp"] == 100
        assert client.get("/bosses/nobody").status_code == 404

    def test_unknown_boss_cannot_be_challenged(self, client: TestClient):
        response = client.post("/bosses/nobody/battles", json={"user_id": self.USER_ID})
        assert response.status_code == 404

    def test_battle_starts_in_intro(self, client: TestClient):
        data = self.create_battle(client)
        assert data["phase"] == "intro"
        assert data["boss_hp"] == 100
        assert data["player_hp"] == 100
        assert data["question"] is None

        # Answers are refused until the battle starts
        response = client.post(f"/battles/{data['encounter_id']}/answer", json={"option_id": "x"})
        assert response.status_code == 409

    def test_victory_flow(self, client: TestClient):
        user_id = "boss_victor"
        boss = find_boss(self.BOSS_ID)
        encounter_id = self.create_battle(client, user_id)["encounter_id"]

        started = client.post(f"/battles/{encounter_id}/start").json()
        assert started["phase"] == "battle"
        assert started["remaining_seconds"] is not None

        hits_needed = -(-boss.total_hp // boss.damage_per_correct)
        unlocked = []
        for i in range(hits_needed):
            data = client.post(f"/battles/{encounter_id}/answer",
                               json={"option_id": correct_option_id(encounter_id)}).json()
            unlocked += data["achievements_unlocked"]
            assert data["last_answer"]["is_correct"] is True
            assert data["boss_hp"] == max(0, boss.total_hp - (i + 1) * boss.damage_per_correct)

        assert data["phase"] == "victory"
        assert data["summary"]["type"] == "boss_battle"
        assert data["summary"]["id"] == encounter_id
        assert data["xp_earned"] >= boss.xp_reward

        sessions = client.get(f"/users/{user_id}/sessions").json()
        assert [s["id"] for s in sessions] == [encounter_id]
        assert sessions[0]["outcome"] == "victory"
        assert "boss_slayer" in [a["id"] for a in unlocked]
        xp = client.get(f"/users/{user_id}/xp").json()
        assert xp["total_xp"] == data["xp_earned"] + sum(a["xp_reward"] for a in unlocked)

    def test_wrong_answers_cost_player_hp(self, client: TestClient):
        encounter_id = self.create_battle(client)["encounter_id"]
        client.post(f"/battles/{encounter_id}/start")
        data = client.post(f"/battles/{encounter_id}/answer",
                           json={"option_id": wrong_option_id(encounter_id)}).json()
        assert data["player_hp"] == 85
        assert data["boss_hp"] == 100
        assert data["index"] == 1

    def test_reset_returns_to_intro(self, client: TestClient):
        encounter_id = self.create_battle(client)["encounter_id"]
        client.post(f"/battles/{encounter_id}/start")
        client.post(f"/battles/{encounter_id}/answer", json={"option_id": wrong_option_id(encounter_id)})

        data = client.post(f"/battles/{encounter_id}/reset").json()
        assert data["phase"] == "intro"
        assert data["player_hp"] == 100
        assert data["encounter_id"] != encounter_id
        assert client.get(f"/battles/{encounter_id}").status_code == 404

    def test_abandon_closes_the_battle(self, client: TestClient):
        encounter_id = self.create_battle(client)["encounter_id"]
        assert client.delete(f"/battles/{encounter_id}").status_code == 200
        assert client.get(f"/battles/{encounter_id}").status_code == 404
