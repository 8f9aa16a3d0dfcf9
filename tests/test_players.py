"""Tests for roster management."""

import pytest
from fastapi import HTTPException

from filmroom.modules.players.schemas import PlayerCreate, PlayerUpdate, position_group_for
from filmroom.modules.players.service import PlayerService


@pytest.fixture
def service(supabase, team):
    return PlayerService(supabase)


def _player(number, position="QB", **extra):
    return PlayerCreate(jersey_number=number, first_name="Sam", last_name=f"Player{number}",
                        primary_position=position, **extra)


class TestPositionGroups:
    @pytest.mark.parametrize("position, group", [
        ("QB", "offense"), ("lt", "offense"), ("MIKE", "defense"), ("fs", "defense"),
        ("K", "special_teams"), ("Water", None), (None, None),
    ])
    def test_derived(self, position, group):
        assert position_group_for(position) == group


class TestRoster:
    def test_create_derives_group(self, service):
        player = service.create_player("team-1", _player(7, "CB"))
        assert player.position_group == "defense"
        assert player.team_id == "team-1"

    def test_explicit_group_wins(self, service):
        player = service.create_player("team-1", _player(12, "QB", position_group="special_teams"))
        assert player.position_group == "special_teams"

    def test_invalid_group(self, service):
        with pytest.raises(HTTPException) as exc:
            service.create_player("team-1", _player(12, position_group="bench"))
        assert exc.value.status_code == 400

    def test_jersey_taken_by_active_player(self, service):
        service.create_player("team-1", _player(22, "RB"))
        with pytest.raises(HTTPException) as exc:
            service.create_player("team-1", _player(22, "WR"))
        assert exc.value.status_code == 409

    def test_inactive_player_frees_jersey(self, service):
        first = service.create_player("team-1", _player(22, "RB"))
        service.update_player("team-1", first.id, PlayerUpdate(is_active=False))
        assert service.create_player("team-1", _player(22, "WR")).jersey_number == 22

    def test_list_ordered_and_filtered(self, service):
        service.create_player("team-1", _player(40, "LB"))
        service.create_player("team-1", _player(3, "QB"))
        service.create_player("team-1", _player(15, "WR"))
        assert [p.jersey_number for p in service.list_players("team-1")] == [3, 15, 40]
        assert [p.jersey_number for p in service.list_players("team-1", position_group="defense")] == [40]

    def test_update_position_regroups(self, service):
        player = service.create_player("team-1", _player(9, "QB"))
        updated = service.update_player("team-1", player.id, PlayerUpdate(primary_position="SS"))
        assert updated.position_group == "defense"

    def test_delete_removes_participation(self, service, supabase):
        player = service.create_player("team-1", _player(5))
        supabase.seed("player_participation", {"player_id": player.id, "play_instance_id": "p1"})
        service.delete_player("team-1", player.id)
        assert supabase.rows("players", id=player.id) == []
        assert supabase.rows("player_participation", player_id=player.id) == []

    def test_other_team_player_not_found(self, service, supabase):
        supabase.seed("players", {"id": "far", "team_id": "team-9", "jersey_number": 1,
                                  "first_name": "A", "last_name": "B", "primary_position": "QB"})
        with pytest.raises(HTTPException) as exc:
            service.get_player("team-1", "far")
        assert exc.value.status_code == 404


class TestRosterEndpoints:
    def test_create_and_list(self, client, team):
        body = {"jersey_number": 1, "first_name": "Tay", "last_name": "Lor", "primary_position": "WR"}
        assert client.post("/api/v1/teams/team-1/players", json=body).status_code == 201
        listed = client.get("/api/v1/teams/team-1/players").json()
        assert [p["first_name"] for p in listed] == ["Tay"]

    def test_jersey_bounds(self, client, team):
        body = {"jersey_number": 100, "first_name": "Tay", "last_name": "Lor", "primary_position": "WR"}
        assert client.post("/api/v1/teams/team-1/players", json=body).status_code == 422
