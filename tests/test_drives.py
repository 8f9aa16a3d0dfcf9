"""Tests for drive grouping, derived flags and the drive endpoints."""

import pytest

from filmroom.modules.drives.derivation import (
    derived_flags,
    drive_rates,
    group_plays_into_drives,
    points_for_result,
    summarize_drive_plays,
)
from filmroom.modules.drives.service import DriveService


@pytest.fixture
def game_plays():
    return [
        {"id": "a", "quarter": 1, "yard_line": 25, "timestamp_start": 0, "yards_gained": 5, "is_opponent_play": False},
        {"id": "b", "quarter": 1, "yard_line": 30, "timestamp_start": 10, "yards_gained": 15,
         "resulted_in_first_down": True, "is_opponent_play": False},
        {"id": "c", "quarter": 1, "yard_line": 45, "timestamp_start": 20, "yards_gained": 55,
         "result": "touchdown", "is_opponent_play": False},
        {"id": "d", "quarter": 2, "yard_line": 20, "timestamp_start": 30, "yards_gained": 2, "is_opponent_play": False},
    ]


class TestDerivation:
    def test_points(self):
        assert points_for_result("touchdown") == 6
        assert points_for_result("field_goal") == 3
        assert points_for_result("punt") == 0

    def test_three_and_out(self):
        assert derived_flags(3, 0, 0) == {"three_and_out": True, "scoring_drive": False}
        assert derived_flags(3, 1, 0)["three_and_out"] is False
        assert derived_flags(5, 2, 3)["scoring_drive"] is True

    def test_summary_red_zone(self):
        stats = summarize_drive_plays([{"yards_gained": 4, "yard_line": 82}, {"yards_gained": None}])
        assert stats == {"plays_count": 2, "yards_gained": 4, "first_downs": 0, "reached_red_zone": True}

    def test_grouping(self, game_plays):
        drives = group_plays_into_drives(game_plays)
        assert [d["play_ids"] for d in drives] == [["a", "b"], ["c"], ["d"]]
        assert [d["result"] for d in drives] == ["touchdown", "end_half", "end_game"]
        assert drives[0]["points"] == 6
        assert drives[0]["end_yard_line"] == 45
        assert drives[2]["quarter"] == 2

    def test_rates(self):
        drives = [
            {"points": 6, "result": "touchdown", "reached_red_zone": True},
            {"points": 0, "result": "punt", "three_and_out": True},
            {"points": 3, "result": "field_goal", "reached_red_zone": True},
        ]
        rates = drive_rates(drives)
        assert rates["points_per_drive"] == 3.0
        assert rates["red_zone_td_rate"] == 50.0
        assert rates["three_and_out_rate"] == pytest.approx(33.333, rel=1e-3)

    def test_rates_without_drives(self):
        assert drive_rates([])["points_per_drive"] == 0.0


class TestDriveService:
    @pytest.fixture
    def game(self, supabase, team, game_plays):
        supabase.seed("games", {"id": "g1", "team_id": "team-1", "name": "Week 1"})
        supabase.seed("videos", {"id": "v1", "game_id": "g1"})
        supabase.seed("play_instances", *[dict(p, team_id="team-1", video_id="v1") for p in game_plays])
        return supabase

    def test_auto_create_links_plays(self, game):
        drives = DriveService(game).auto_create_drives("team-1", "g1")
        assert len(drives) == 3
        first = drives[0]
        assert first.result == "touchdown"
        assert first.plays_count == 2
        assert first.yards_gained == 20
        assert first.scoring_drive is True
        linked = game.rows("play_instances", drive_id=first.id)
        assert {p["id"] for p in linked} == {"a", "b"}

    def test_complete_sets_points_and_flags(self, game):
        service = DriveService(game)
        drive = service.auto_create_drives("team-1", "g1")[1]
        from filmroom.modules.drives.schemas import DriveComplete
        completed = service.complete_drive("team-1", drive.id, DriveComplete(result="field_goal", end_yard_line=70))
        assert completed.points == 3
        assert completed.scoring_drive is True

    def test_invalid_result_rejected(self, client, game):
        drive = DriveService(game).auto_create_drives("team-1", "g1")[0]
        response = client.post(
            f"/api/v1/teams/team-1/drives/{drive.id}/complete",
            json={"result": "kneel", "end_yard_line": 50},
        )
        assert response.status_code == 400

    def test_remove_play_recalculates(self, game):
        service = DriveService(game)
        first = service.auto_create_drives("team-1", "g1")[0]
        updated = service.remove_play("team-1", "b")
        assert updated.id == first.id
        assert updated.plays_count == 1
        assert updated.first_downs == 0

    def test_metrics_endpoint(self, client, game):
        DriveService(game).auto_create_drives("team-1", "g1")
        response = client.get("/api/v1/teams/team-1/drives/metrics", params={"game_id": "g1"})
        assert response.status_code == 200
        assert response.json()["drives"] == 3
        assert response.json()["points_per_drive"] == 2.0

    def test_unknown_game(self, game):
        from fastapi import HTTPException
        with pytest.raises(HTTPException) as exc:
            DriveService(game).auto_create_drives("team-1", "missing")
        assert exc.value.status_code == 404
