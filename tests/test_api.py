import pytest

from app.api import leaderboard as leaderboard_api
from app.services.scoring_engine import MalformedSnapshotError

SEASON_STATE = {
    "seasonId": "us-s4",
    "castStatus": {
        "Winner": {"isWinner": True},
        "FirstOut": {"isFirstOut": True, "isEliminated": True},
        "Traitor1": {"isTraitor": True},
    },
    "players": [
        {
            "id": "p-ana",
            "name": "Ana",
            "picks": [{"member": "Winner", "rank": 1, "role": "Faithful"}],
            "predWinner": "Winner",
            "weeklyPredictions": {"weekId": "week-1", "nextBanished": "Traitor1"},
        },
        {
            "id": "p-ben",
            "name": "Ben",
            "predWinner": "FirstOut",
            "predTraitors": ["Traitor1"],
        },
    ],
    "weeklyResults": {"weekId": "week-1", "nextBanished": "Traitor1"},
}


@pytest.fixture
def season_id(client, commissioner_headers):
    response = client.post("/api/seasons", json={"name": "Test Season"}, headers=commissioner_headers)
    assert response.status_code == 201
    season_id = response.json()["id"]

    response = client.put(f"/api/seasons/{season_id}/state", json=SEASON_STATE, headers=commissioner_headers)
    assert response.status_code == 200
    return season_id


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy"}


def test_list_rule_packs(client):
    packs = client.get("/api/rule-packs").json()
    assert [p["id"] for p in packs] == ["traitors-classic", "survivor-style", "generic-elimination"]
    assert [p["is_default"] for p in packs] == [True, False, False]


def test_get_rule_pack_points_use_event_keys(client):
    pack = client.get("/api/rule-packs/survivor-style").json()
    assert pack["id"] == "survivor-style"
    assert pack["points"]["REDEMPTION_ROULETTE_CORRECT"] == 5


def test_unknown_rule_pack_serves_default(client):
    assert client.get("/api/rule-packs/celebrity-edition").json()["id"] == "traitors-classic"


def test_commissioner_routes_need_the_key(client, commissioner_headers):
    assert client.post("/api/seasons", json={"name": "Nope"}).status_code == 403
    response = client.post("/api/seasons", json={"name": "Nope"}, headers={"X-Commissioner-Key": "wrong"})
    assert response.status_code == 403


def test_unknown_season_is_404(client):
    assert client.get("/api/seasons/999999/leaderboard").status_code == 404


def test_season_detail_and_state(client, season_id):
    detail = client.get(f"/api/seasons/{season_id}").json()
    assert detail["player_count"] == 2
    assert detail["cast_count"] == 3
    assert detail["snapshot_count"] == 0

    state = client.get(f"/api/seasons/{season_id}/state").json()
    assert state["castStatus"]["Winner"]["isWinner"] is True
    assert state["players"][0]["weeklyPredictions"]["weekId"] == "week-1"


def test_leaderboard(client, season_id):
    response = client.get(f"/api/seasons/{season_id}/leaderboard")
    assert response.status_code == 200
    board = response.json()

    assert board["rule_pack_id"] == "traitors-classic"
    assert board["week_id"] == "week-1"
    # Ana: draft winner 10 + prophecy 10 + weekly 1; Ben: traitor 3 - penalty 2
    assert [(e["player_id"], e["total"]) for e in board["entries"]] == [("p-ana", 21), ("p-ben", 1)]
    assert board["entries"][0]["display_total"] == "21"
    assert board["entries"][1]["score"]["breakdown"]["penalty"] is True


def test_player_score(client, season_id):
    response = client.get(f"/api/seasons/{season_id}/players/p-ben/score")
    assert response.status_code == 200
    body = response.json()
    assert body["display_total"] == "1"
    assert body["score"]["breakdown"]["traitor_bonus"] == ["Traitor1"]

    assert client.get(f"/api/seasons/{season_id}/players/nobody/score").status_code == 404


def test_malformed_state_reports_scores_unavailable(client, season_id, monkeypatch):
    def broken(season):
        raise MalformedSnapshotError("castStatus missing")

    monkeypatch.setattr(leaderboard_api, "season_state_from_row", broken)

    response = client.get(f"/api/seasons/{season_id}/leaderboard")
    assert response.status_code == 503
    assert response.json()["detail"] == "Scores unavailable"
    # Archived history stays readable
    assert client.get(f"/api/seasons/{season_id}/snapshots").status_code == 200


def test_archive_snapshot_then_show_archived_totals(client, season_id, commissioner_headers):
    assert client.post(f"/api/seasons/{season_id}/snapshots", json={"label": "Week 1"}).status_code == 403

    response = client.post(
        f"/api/seasons/{season_id}/snapshots", json={"label": "Week 1"}, headers=commissioner_headers
    )
    assert response.status_code == 201
    snapshot = response.json()
    assert snapshot["week_id"] == "week-1"
    assert snapshot["totals"] == {"p-ana": 21, "p-ben": 1}

    history = client.get(f"/api/seasons/{season_id}/snapshots").json()
    assert [s["label"] for s in history] == ["Week 1"]

    # Next week starts: outcomes cleared, so the archived totals are shown
    next_week = dict(SEASON_STATE, weeklyResults={"weekId": "week-2"}, activeWeekId="week-2")
    client.put(f"/api/seasons/{season_id}/state", json=next_week, headers=commissioner_headers)

    entries = client.get(f"/api/seasons/{season_id}/leaderboard").json()["entries"]
    assert [(e["player_id"], e["total"], e["is_archived_total"]) for e in entries] == [
        ("p-ana", 21, True),
        ("p-ben", 1, True),
    ]
    # Only one archived week: nothing to compare against yet
    assert [e["display_movement"] for e in entries] == [None, None]


def test_movement_between_archived_weeks(client, season_id, commissioner_headers):
    client.post(f"/api/seasons/{season_id}/snapshots", json={"label": "Week 1"}, headers=commissioner_headers)

    # Week 2: Ana's week-1 call no longer counts, Ben calls the banishment
    players = [
        SEASON_STATE["players"][0],
        dict(SEASON_STATE["players"][1], weeklyPredictions={"weekId": "week-2", "nextBanished": "Traitor1"}),
    ]
    week_two = dict(
        SEASON_STATE,
        players=players,
        activeWeekId="week-2",
        weeklyResults={"weekId": "week-2", "nextBanished": "Traitor1"},
    )
    client.put(f"/api/seasons/{season_id}/state", json=week_two, headers=commissioner_headers)
    response = client.post(
        f"/api/seasons/{season_id}/snapshots", json={"label": "Week 2"}, headers=commissioner_headers
    )
    assert response.json()["totals"] == {"p-ana": 20, "p-ben": 2}

    week_three = dict(week_two, activeWeekId="week-3", weeklyResults={"weekId": "week-3"})
    client.put(f"/api/seasons/{season_id}/state", json=week_three, headers=commissioner_headers)

    entries = client.get(f"/api/seasons/{season_id}/leaderboard").json()["entries"]
    assert [(e["player_id"], e["total"], e["display_movement"]) for e in entries] == [
        ("p-ana", 20, "-1.0"),
        ("p-ben", 2, "+1.0"),
    ]


def test_snapshot_history_is_capped(client, season_id, commissioner_headers, monkeypatch):
    from app.core.config import get_settings

    monkeypatch.setattr(get_settings(), "score_history_limit", 2)
    for week in range(1, 4):
        client.post(
            f"/api/seasons/{season_id}/snapshots", json={"label": f"Week {week}"}, headers=commissioner_headers
        )

    history = client.get(f"/api/seasons/{season_id}/snapshots").json()
    assert [s["label"] for s in history] == ["Week 2", "Week 3"]


def _keys(value):
    if isinstance(value, dict):
        for key, item in value.items():
            yield key
            yield from _keys(item)
    elif isinstance(value, list):
        for item in value:
            yield from _keys(item)


def test_score_responses_use_snake_case_keys(client, season_id):
    board = client.get(f"/api/seasons/{season_id}/leaderboard").json()
    player = client.get(f"/api/seasons/{season_id}/players/p-ana/score").json()

    keys = set(_keys(board)) | set(_keys(player))
    assert {"draft_winners", "weekly_council", "is_archived_total", "display_total"} <= keys
    assert all(key == key.lower() for key in keys)
