"""Tests for tagging tier gating and play creation against it."""

import pytest

from filmroom.modules.plays.tiers import allowed_fields, disallowed_fields, is_upgrade, play_unit


class TestTiers:
    def test_upgrade_only_moves_up(self):
        assert is_upgrade(None, "quick")
        assert is_upgrade("quick", "comprehensive")
        assert not is_upgrade("standard", "quick")
        assert not is_upgrade("standard", "standard")
        assert not is_upgrade("quick", "ultra")

    def test_comprehensive_allows_everything(self):
        assert allowed_fields("comprehensive", "offense") == ["all"]
        assert disallowed_fields("comprehensive", "offense", {"lt_id": "p1"}) == []

    def test_quick_rejects_player_attribution(self):
        data = {"formation": "Trips", "qb_id": "p1", "ball_carrier_id": None}
        assert disallowed_fields("quick", "offense", data) == ["qb_id"]

    def test_standard_rejects_line_grades(self):
        data = {"qb_id": "p1", "lt_id": "p2", "lt_block_result": "win"}
        assert disallowed_fields("standard", "offense", data) == ["lt_block_result", "lt_id"]

    def test_ungated_fields_pass(self):
        assert disallowed_fields("quick", "offense", {"is_touchdown": True, "video_id": "v1"}) == []

    def test_unit_detection(self):
        assert play_unit({"special_teams_unit": "punt"}) == "special_teams"
        assert play_unit({"is_opponent_play": True}) == "defense"
        assert play_unit({}) == "offense"

    def test_unknown_unit(self):
        with pytest.raises(ValueError):
            allowed_fields("quick", "coaching")


class TestPlayEndpoints:
    @pytest.fixture
    def quick_game(self, supabase, team):
        supabase.seed("games", {"id": "g1", "team_id": "team-1", "name": "Week 1", "tagging_tier": "quick",
                                "is_locked": False})
        supabase.seed("videos", {"id": "v1", "game_id": "g1"})
        return supabase

    def test_create_play(self, client, quick_game):
        response = client.post("/api/v1/teams/team-1/plays", json={
            "video_id": "v1", "timestamp_start": 12.5, "play_type": "run", "yards_gained": 4,
        })
        assert response.status_code == 201
        assert response.json()["team_id"] == "team-1"

    def test_gated_field_rejected(self, client, quick_game):
        response = client.post("/api/v1/teams/team-1/plays", json={
            "video_id": "v1", "timestamp_start": 12.5, "qb_id": "player-1",
        })
        assert response.status_code == 400
        assert "qb_id" in response.json()["detail"]

    def test_duplicate_timestamp(self, client, quick_game):
        quick_game.seed("play_instances", {"team_id": "team-1", "video_id": "v1", "timestamp_start": 11.0})
        response = client.post("/api/v1/teams/team-1/plays", json={"video_id": "v1", "timestamp_start": 12.5})
        assert response.status_code == 409

    @pytest.fixture
    def tagged_play(self, quick_game):
        quick_game.seed("play_instances", {"id": "p1", "team_id": "team-1", "video_id": "v1",
                                           "timestamp_start": 30.0, "play_type": "run"})
        return quick_game

    def test_update_play(self, client, tagged_play):
        response = client.put("/api/v1/teams/team-1/plays/p1", json={"yards_gained": 7})
        assert response.status_code == 200
        assert response.json()["yards_gained"] == 7

    def test_locked_game_refuses_edits(self, client, tagged_play):
        tagged_play.rows("games", id="g1")[0]["is_locked"] = True

        update = client.put("/api/v1/teams/team-1/plays/p1", json={"yards_gained": 7})
        assert update.status_code == 403
        assert "locked" in update.json()["detail"]

        delete = client.delete("/api/v1/teams/team-1/plays/p1")
        assert delete.status_code == 403

        participants = client.post("/api/v1/teams/team-1/plays/p1/participants",
                                   json=[{"player_id": "pl1", "participation_type": "tackle"}])
        assert participants.status_code == 403

        assert tagged_play.rows("play_instances", id="p1")[0].get("yards_gained") is None
        assert tagged_play.rows("player_participation") == []

    def test_expired_game_refuses_delete(self, client, tagged_play):
        tagged_play.rows("games", id="g1")[0]["expires_at"] = "2020-01-01T00:00:00Z"
        response = client.delete("/api/v1/teams/team-1/plays/p1")
        assert response.status_code == 403
        assert len(tagged_play.rows("play_instances", id="p1")) == 1

    def test_delete_play_on_open_game(self, client, tagged_play):
        tagged_play.seed("player_participation", {"play_instance_id": "p1", "player_id": "pl1"})
        assert client.delete("/api/v1/teams/team-1/plays/p1").status_code == 204
        assert tagged_play.rows("play_instances") == []
        assert tagged_play.rows("player_participation") == []
