"""
Flask JSON API, exercised through Flask's test client.
"""
import pytest

import app as touchline_app

SMALL_WORLD = {"num_divisions": 2, "clubs_per_division": 4, "squad_size_max": 20, "promotion_spots": 1, "seed": 99}


@pytest.fixture
def client(monkeypatch):
    monkeypatch.setattr(touchline_app, "_session", None)
    touchline_app.app.config["TESTING"] = True
    with touchline_app.app.test_client() as c:
        yield c


@pytest.fixture
def game(client):
    resp = client.post("/api/new-game", json=SMALL_WORLD)
    assert resp.status_code == 201
    return resp.get_json()


def test_state_without_game_is_404(client):
    assert client.get("/api/state").status_code == 404
    assert client.post("/api/dispatch", json={"type": "ADVANCE_DAY"}).status_code == 404


def test_new_game_returns_pre_season_world(game):
    assert game["phase"] == "PRE_SEASON"
    assert game["player_club_id"] is None
    assert len(game["clubs"]) == 8
    assert game["season"] == "2024/2025"


def test_new_game_rejects_bad_config(client):
    resp = client.post("/api/new-game", json={"clubs_per_division": 3})
    assert resp.status_code == 400
    assert "error" in resp.get_json()


def test_dispatch_round_trip(client, game):
    club_id = int(next(iter(game["clubs"])))
    resp = client.post("/api/dispatch", json={"type": "SELECT_PLAYER_CLUB", "payload": {"club_id": club_id}})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["phase"] == "IN_SEASON"
    assert body["player_club_id"] == club_id

    resp = client.post("/api/dispatch", json={"type": "ADVANCE_DAY"})
    assert resp.get_json()["current_date"] == "2024-08-02"
    assert client.get("/api/state").get_json()["current_date"] == "2024-08-02"


def test_illegal_intent_reports_an_error(client, game):
    resp = client.post("/api/dispatch", json={"type": "ADVANCE_DAY"})
    assert resp.status_code == 200
    body = resp.get_json()
    assert body["intent_error"]
    assert body["current_date"] == game["current_date"]


@pytest.mark.parametrize(
    "payload",
    [
        {"type": "KICK_THE_BALL"},
        {"type": "SELECT_PLAYER_CLUB", "payload": {}},
        {"type": "MAKE_TRANSFER_OFFER", "payload": {"player_id": "x", "fee": 10}},
        ["ADVANCE_DAY"],
    ],
)
def test_malformed_intents_are_400(client, game, payload):
    assert client.post("/api/dispatch", json=payload).status_code == 400


def test_non_json_body_is_400(client, game):
    resp = client.post("/api/dispatch", data="not json", content_type="text/plain")
    assert resp.status_code == 400


def test_division_table(client, game):
    resp = client.get("/api/divisions/1/table")
    assert resp.status_code == 200
    body = resp.get_json()
    assert [row["position"] for row in body["table"]] == [1, 2, 3, 4]
    assert all(row["club_name"] for row in body["table"])
    assert client.get("/api/divisions/42/table").status_code == 404


def test_club_squad(client, game):
    club_id = next(iter(game["clubs"]))
    body = client.get(f"/api/clubs/{club_id}/squad").get_json()
    assert len(body["players"]) >= 18
    assert len(body["staff"]) == 3
    assert client.get("/api/clubs/999/squad").status_code == 404
