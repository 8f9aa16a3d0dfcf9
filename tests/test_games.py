"""Tests for game creation against plan limits, tagging tiers, scores and deletion refunds."""

from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from filmroom.modules.entitlements.token_service import no_tokens_reason
from filmroom.modules.games.schemas import GameCreate, QuarterScores, QuarterScoresInput, ScoreUpdate
from filmroom.modules.games.service import GameService, game_result


@pytest.fixture
def service(supabase, team):
    return GameService(supabase)


def _balance(supabase):
    return supabase.rows("token_balance", team_id="team-1")[0]["subscription_tokens_available"]


class TestCreateGame:
    def test_spends_token_and_sets_expiry(self, service, supabase, coach):
        game = service.create_game("team-1", GameCreate(name="Week 1", opponent="Eagles"), coach)
        assert game.team_id == "team-1"
        assert _balance(supabase) == 1
        assert game.expires_at - datetime.utcnow() > timedelta(days=29)
        [tx] = supabase.rows("token_transactions", transaction_type="consumption")
        assert tx["reference_id"] == game.id
        assert tx["amount"] == -1

    def test_basic_plan_team_game_limit(self, service, coach):
        service.create_game("team-1", GameCreate(name="Week 1"), coach)
        with pytest.raises(HTTPException) as exc:
            service.create_game("team-1", GameCreate(name="Week 2"), coach)
        assert exc.value.status_code == 403
        assert exc.value.detail.startswith("Team game limit reached")

    def test_opponent_games_counted_separately(self, service, coach):
        service.create_game("team-1", GameCreate(name="Week 1"), coach)
        scouting = service.create_game("team-1", GameCreate(name="Eagles film", is_opponent_game=True), coach)
        assert scouting.is_opponent_game

    def test_opponent_game_spends_opponent_token(self, service, supabase, coach):
        service.create_game("team-1", GameCreate(name="Eagles film", is_opponent_game=True), coach)
        balance = supabase.rows("token_balance", team_id="team-1")[0]
        assert balance["opponent_subscription_tokens_available"] == 0
        assert balance["team_subscription_tokens_available"] == 1
        [tx] = supabase.rows("token_transactions", transaction_type="consumption")
        assert tx["game_type"] == "opponent"

    def test_no_team_tokens(self, service, supabase, coach):
        supabase.rows("token_balance", team_id="team-1")[0]["team_subscription_tokens_available"] = 0
        with pytest.raises(HTTPException) as exc:
            service.create_game("team-1", GameCreate(name="Week 1"), coach)
        assert exc.value.status_code == 403
        assert exc.value.detail == no_tokens_reason("team")
        assert supabase.rows("games") == []

    def test_inactive_subscription(self, service, supabase, coach):
        supabase.rows("subscriptions", team_id="team-1")[0]["status"] = "canceled"
        with pytest.raises(HTTPException) as exc:
            service.create_game("team-1", GameCreate(name="Week 1"), coach)
        assert exc.value.detail == "Subscription is not active"

    def test_endpoint(self, client, team):
        response = client.post("/api/v1/teams/team-1/games", json={"name": "Week 1", "date": "2024-09-06"})
        assert response.status_code == 201
        assert response.json()["date"] == "2024-09-06"


class TestTaggingTier:
    def test_upgrade_then_refuse_downgrade(self, service, supabase, coach):
        game = service.create_game("team-1", GameCreate(name="Week 1"), coach)
        service.set_tagging_tier("team-1", game.id, "quick", coach)
        upgraded = service.set_tagging_tier("team-1", game.id, "comprehensive", coach)
        assert upgraded.tagging_tier == "comprehensive"
        with pytest.raises(HTTPException) as exc:
            service.set_tagging_tier("team-1", game.id, "standard", coach)
        assert exc.value.status_code == 400
        actions = [row["action"] for row in supabase.rows("audit_logs")]
        assert actions == ["tagging_tier_selected", "tagging_tier_upgraded"]


class TestScores:
    def test_result(self):
        assert game_result(21, 14) == "win"
        assert game_result(0, 3) == "loss"
        assert game_result(7, 7) == "tie"

    def test_quarter_scores_drive_totals(self, service, coach):
        game = service.create_game("team-1", GameCreate(name="Week 1"), coach)
        score = ScoreUpdate(quarter_scores=QuarterScoresInput(
            team=QuarterScores(q1=7, q3=7),
            opponent=QuarterScores(q2=3),
        ))
        updated = service.update_score("team-1", game.id, score)
        assert (updated.team_score, updated.opponent_score, updated.game_result) == (14, 3, "win")
        assert updated.quarter_scores["source"] == "manual"

    def test_negative_rejected(self, service, coach):
        game = service.create_game("team-1", GameCreate(name="Week 1"), coach)
        with pytest.raises(HTTPException) as exc:
            service.update_score("team-1", game.id, ScoreUpdate(team_score=-1))
        assert exc.value.status_code == 400


class TestDeleteGame:
    def test_untagged_game_refunds_token(self, service, supabase, coach):
        game = service.create_game("team-1", GameCreate(name="Week 1"), coach)
        supabase.seed("videos", {"id": "v1", "game_id": game.id, "file_path": f"{game.id}/1_film.mp4"})
        result = service.delete_game("team-1", game.id, coach["id"])
        assert result.token_refunded is True
        assert result.deleted_videos == 1
        assert _balance(supabase) == 2
        assert supabase.rows("token_balance", team_id="team-1")[0]["team_subscription_tokens_available"] == 1
        assert supabase.rows("games") == []

    def test_tagged_game_keeps_token_and_removes_plays(self, service, supabase, coach):
        game = service.create_game("team-1", GameCreate(name="Week 1"), coach)
        supabase.seed("videos", {"id": "v1", "game_id": game.id})
        supabase.seed("play_instances", {"id": "p1", "video_id": "v1", "team_id": "team-1"})
        supabase.seed("player_participation", {"play_instance_id": "p1", "player_id": "pl1"})
        result = service.delete_game("team-1", game.id, coach["id"])
        assert result.token_refunded is False
        assert result.deleted_tags == 1
        assert _balance(supabase) == 1
        assert supabase.rows("play_instances") == []
        assert supabase.rows("player_participation") == []

    def test_other_teams_game(self, service, supabase, coach):
        supabase.seed("games", {"id": "g-other", "team_id": "team-2", "name": "Theirs"})
        with pytest.raises(HTTPException) as exc:
            service.delete_game("team-1", "g-other")
        assert exc.value.status_code == 404


class TestRetention:
    def test_expired_games_locked(self, service, supabase):
        past = (datetime.utcnow() - timedelta(days=1)).isoformat()
        supabase.seed("games", {"id": "g-old", "team_id": "team-1", "name": "Old", "is_locked": False,
                                "expires_at": past})
        expired = service.get_expired_games()
        assert [g["id"] for g in expired] == ["g-old"]
        service.lock_expired_game(expired[0])
        assert supabase.rows("games", id="g-old")[0]["is_locked"] is True
