"""Tests for opponent metrics, tendencies and the scouting endpoints."""

import pytest

from filmroom.modules.scouting.metrics import compute_opponent_metrics, matches_opponent
from filmroom.modules.scouting.service import ScoutingService
from filmroom.modules.scouting.tendencies import distance_bucket, opponent_tendencies


@pytest.fixture
def scouting_film(supabase, team):
    supabase.seed(
        "games",
        {"id": "g1", "team_id": "team-1", "name": "Week 1", "opponent": "Central Eagles", "is_opponent_game": False},
        {"id": "g2", "team_id": "team-1", "name": "Eagles film", "opponent_team_name": "Central Eagles",
         "is_opponent_game": True},
        {"id": "g3", "team_id": "team-1", "name": "Week 2", "opponent": "Hawks"},
    )
    supabase.seed("videos", {"id": "v1", "game_id": "g1"}, {"id": "v2", "game_id": "g2"}, {"id": "v3", "game_id": "g3"})
    supabase.seed(
        "play_instances",
        {"id": "p1", "team_id": "team-1", "video_id": "v1", "is_opponent_play": True, "play_type": "run",
         "yards_gained": 6, "down": 1, "distance": 10, "formation": "Pistol"},
        {"id": "p2", "team_id": "team-1", "video_id": "v1", "is_opponent_play": True, "play_type": "pass",
         "yards_gained": 14, "is_complete": True, "down": 3, "distance": 2, "formation": "Pistol"},
        {"id": "p3", "team_id": "team-1", "video_id": "v2", "is_opponent_play": True, "play_type": "run",
         "yards_gained": 2, "down": 3, "distance": 5, "formation": "Wing-T"},
        {"id": "p4", "team_id": "team-1", "video_id": "v1", "is_opponent_play": False, "play_type": "run",
         "yards_gained": 4, "is_turnover": True, "is_fumble": True},
        {"id": "p5", "team_id": "team-1", "video_id": "v3", "is_opponent_play": True, "play_type": "pass",
         "yards_gained": 40},
    )
    return supabase


class TestOpponentMatching:
    def test_substring_case_insensitive(self):
        assert matches_opponent({"opponent": "Central Eagles"}, "eagles")
        assert matches_opponent({"opponent_team_name": "Central Eagles"}, "CENTRAL")
        assert not matches_opponent({"opponent": "Hawks"}, "eagles")

    def test_distance_buckets(self):
        assert distance_bucket(3) == "short"
        assert distance_bucket(4) == "medium"
        assert distance_bucket(7) == "long"
        assert distance_bucket(None) == "long"


class TestOpponentMetrics:
    def test_no_games_returns_zeroes(self):
        metrics = compute_opponent_metrics("team-1", "Nobody", [], [], [])
        assert metrics["filters"]["gamesAnalyzed"] == 0
        assert metrics["offense"]["volume"]["totalYardsPerGame"] == 0

    def test_opponent_offense_from_their_plays(self, scouting_film):
        metrics = ScoutingService(scouting_film).calculate_opponent_metrics("team-1", "eagles")
        assert metrics["filters"]["gamesAnalyzed"] == 2
        assert metrics["offense"]["volume"]["totalYards"] == 22
        assert metrics["offense"]["volume"]["totalYardsPerGame"] == 11.0
        assert metrics["defense"]["disruptive"]["takeaways"] == 1
        assert metrics["overall"]["turnoverDifferential"] == 1

    def test_empty_name_rejected(self, scouting_film):
        from fastapi import HTTPException
        with pytest.raises(HTTPException) as exc:
            ScoutingService(scouting_film).calculate_opponent_metrics("team-1", "  ")
        assert exc.value.status_code == 400


class TestTendencies:
    def test_by_down_and_distance(self):
        plays = [
            {"play_type": "run", "down": 1, "distance": 10, "formation": "I"},
            {"play_type": "pass", "down": 1, "distance": 10, "formation": "I"},
            {"play_type": "run", "down": 3, "distance": 1, "formation": "Gun"},
        ]
        result = opponent_tendencies("Eagles", plays)
        assert result["totalPlays"] == 3
        assert result["runPercentage"] == 66.7
        first = result["byDownAndDistance"][0]
        assert (first["down"], first["distance"], first["plays"]) == (1, "long", 2)
        assert first["runPercentage"] == 50.0
        assert result["topFormations"][0] == {"formation": "I", "plays": 2, "percentage": 66.7}

    def test_no_plays(self):
        result = opponent_tendencies("Eagles", [])
        assert result["totalPlays"] == 0
        assert result["runPercentage"] is None

    def test_endpoint(self, client, scouting_film):
        response = client.get("/api/v1/teams/team-1/scouting/tendencies", params={"opponent": "eagles"})
        assert response.status_code == 200
        body = response.json()
        assert body["totalPlays"] == 3
        assert [f["formation"] for f in body["topFormations"]] == ["Pistol", "Wing-T"]

    def test_list_opponents(self, client, scouting_film):
        response = client.get("/api/v1/teams/team-1/scouting/opponents")
        assert response.status_code == 200
        assert response.json() == [
            {"name": "Central Eagles", "games": 2, "scouting_games": 1},
            {"name": "Hawks", "games": 1, "scouting_games": 0},
        ]
