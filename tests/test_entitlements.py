"""Tests for plan capability checks and token accounting."""

import pytest
from fastapi import HTTPException

from filmroom.config.tier_config import get_next_tier, is_active_status
from filmroom.modules.entitlements.service import EntitlementsService
from filmroom.scripts.seed_tier_config import seed_tier_configs


@pytest.fixture
def service(supabase, team):
    return EntitlementsService(supabase)


class TestTierConfig:
    def test_next_tier(self):
        assert get_next_tier("basic") == "plus"
        assert get_next_tier("premium") is None
        assert get_next_tier("gold") is None

    def test_active_statuses(self):
        assert is_active_status("past_due")
        assert not is_active_status("canceled")
        assert is_active_status("canceled", billing_waived=True)


class TestCapabilities:
    def test_camera_limit_on_basic(self, service, supabase):
        supabase.seed("games", {"id": "g1", "team_id": "team-1", "is_locked": False})
        assert service.can_add_camera("team-1", "g1").allowed
        supabase.seed("videos", {"id": "v1", "game_id": "g1"})
        refused = service.can_add_camera("team-1", "g1")
        assert not refused.allowed
        assert refused.limit == 1
        assert refused.upgrade_option == "plus"

    def test_locked_game_access(self, service, supabase):
        supabase.seed("games", {"id": "g1", "team_id": "team-1", "is_locked": True, "locked_reason": "Retention ended"})
        result = service.can_access_game("team-1", "g1")
        assert not result.allowed
        assert result.reason == "Retention ended"

    def test_expired_game_access(self, service, supabase):
        supabase.seed("games", {"id": "g1", "team_id": "team-1", "is_locked": False,
                                "expires_at": "2020-01-01T00:00:00+00:00"})
        assert not service.can_access_game("team-1", "g1").allowed

    def test_enforce_maps_missing_game_to_404(self, service):
        with pytest.raises(HTTPException) as exc:
            service.enforce(service.can_access_game("team-1", "nope"))
        assert exc.value.status_code == 404

    def test_no_subscription(self, supabase):
        result = EntitlementsService(supabase).can_create_game("team-x", "team")
        assert result.reason == "No subscription found"


class TestTokens:
    @pytest.fixture
    def balance(self, supabase, team):
        return supabase.rows("token_balance", team_id="team-1")[0]

    def test_subscription_pool_spent_first(self, service, balance):
        balance.update({"team_purchased_tokens_available": 1, "purchased_tokens_available": 1})
        spent = service.token_service.consume_token("team-1", "g1")
        assert spent == {"success": True, "source": "subscription", "game_type": "team", "remaining": 1}
        assert balance["team_subscription_tokens_available"] == 0
        assert balance["team_subscription_tokens_used_this_period"] == 1
        assert balance["subscription_tokens_available"] == 1
        assert balance["opponent_subscription_tokens_available"] == 1

    def test_purchased_pool_after_subscription(self, service, balance):
        balance.update({"team_subscription_tokens_available": 0, "team_purchased_tokens_available": 1,
                        "purchased_tokens_available": 1})
        assert service.token_service.consume_token("team-1", "g1")["source"] == "purchased"
        assert balance["purchased_tokens_available"] == 0
        with pytest.raises(HTTPException) as exc:
            service.token_service.consume_token("team-1", "g2")
        assert exc.value.status_code == 403
        assert exc.value.detail.startswith("No team film tokens available")

    def test_pools_are_separate(self, service, balance, supabase):
        service.token_service.consume_token("team-1", "g1", "opponent")
        with pytest.raises(HTTPException) as exc:
            service.token_service.consume_token("team-1", "g2", "opponent")
        assert exc.value.detail.startswith("No opponent scouting tokens available")
        assert service.token_service.consume_token("team-1", "g3", "team")["remaining"] == 0
        assert [tx["game_type"] for tx in supabase.rows("token_transactions")] == ["opponent", "team"]

    def test_invalid_game_type(self, service):
        with pytest.raises(HTTPException) as exc:
            service.token_service.consume_token("team-1", "g1", "scrimmage")
        assert exc.value.status_code == 400

    def test_spend_lost_to_concurrent_request(self, service, balance, supabase, monkeypatch):
        tokens = service.token_service
        read_balance = tokens.get_balance
        raced = []

        def read_then_other_request_spends(team_id):
            snapshot = read_balance(team_id)
            if not raced:
                raced.append(True)
                balance["team_subscription_tokens_available"] -= 1
                balance["subscription_tokens_available"] -= 1
            return snapshot

        monkeypatch.setattr(tokens, "get_balance", read_then_other_request_spends)
        with pytest.raises(HTTPException) as exc:
            tokens.consume_token("team-1", "g1")
        assert exc.value.status_code == 403
        assert balance["team_subscription_tokens_available"] == 0
        assert balance["subscription_tokens_available"] == 1
        assert supabase.rows("token_transactions", transaction_type="consumption") == []

    def test_spend_retries_after_concurrent_change(self, service, balance, supabase, monkeypatch):
        balance.update({"team_subscription_tokens_available": 2, "subscription_tokens_available": 3})
        tokens = service.token_service
        read_balance = tokens.get_balance
        raced = []

        def read_then_other_request_spends(team_id):
            snapshot = read_balance(team_id)
            if not raced:
                raced.append(True)
                balance["team_subscription_tokens_available"] -= 1
                balance["subscription_tokens_available"] -= 1
            return snapshot

        monkeypatch.setattr(tokens, "get_balance", read_then_other_request_spends)
        assert tokens.consume_token("team-1", "g1")["remaining"] == 0
        assert balance["team_subscription_tokens_available"] == 0
        assert balance["subscription_tokens_available"] == 1
        assert len(supabase.rows("token_transactions", transaction_type="consumption")) == 1

    def test_constant_contention_is_409(self, service, balance, monkeypatch):
        tokens = service.token_service
        read_balance = tokens.get_balance

        def read_then_balance_moves(team_id):
            snapshot = read_balance(team_id)
            balance["subscription_tokens_available"] += 1
            return snapshot

        monkeypatch.setattr(tokens, "get_balance", read_then_balance_moves)
        with pytest.raises(HTTPException) as exc:
            tokens.consume_token("team-1", "g1")
        assert exc.value.status_code == 409
        assert balance["team_subscription_tokens_available"] == 1

    def test_refund_to_game_type_pool(self, service, balance):
        assert service.token_service.refund_token("team-1", "g1", "deleted", "opponent")
        assert balance["opponent_subscription_tokens_available"] == 2
        assert balance["team_subscription_tokens_available"] == 1
        assert balance["subscription_tokens_available"] == 3

    def test_summary_breaks_down_pools(self, service, balance):
        balance.update({"opponent_purchased_tokens_available": 2, "purchased_tokens_available": 2})
        summary = service.token_service.get_balance_summary("team-1")
        assert (summary.team_available, summary.opponent_available) == (1, 3)
        assert summary.total_available == 4
        assert (summary.monthly_team_allocation, summary.monthly_opponent_allocation) == (1, 1)

    def test_grant_split_for_tier_without_designated_columns(self, supabase):
        from filmroom.modules.entitlements.token_service import TokenService

        TokenService(supabase).initialize_subscription_tokens("team-9", {"monthly_upload_tokens": 3})
        [row] = supabase.rows("token_balance", team_id="team-9")
        assert row["team_subscription_tokens_available"] == 2
        assert row["opponent_subscription_tokens_available"] == 1
        assert row["subscription_tokens_available"] == 3

    def test_overview_endpoint(self, client, team):
        response = client.get("/api/v1/teams/team-1/subscription")
        assert response.status_code == 200
        body = response.json()
        assert body["tier"]["tier_key"] == "basic"
        assert body["tokens"]["total_available"] == 2
        assert body["tokens"]["team_available"] == 1
        assert body["camera_limit"] == 1

    def test_game_creation_check_endpoint(self, client, team):
        response = client.get("/api/v1/teams/team-1/entitlements/games")
        assert response.status_code == 200
        assert response.json()["team"]["allowed"] is True


class TestSeedTierConfig:
    def test_creates_then_updates(self, supabase):
        assert seed_tier_configs(supabase) == 3
        assert len(supabase.rows("tier_config")) == 3
        supabase.rows("tier_config", tier_key="plus")[0]["price_monthly_cents"] = 1
        assert seed_tier_configs(supabase) == 3
        assert len(supabase.rows("tier_config")) == 3
        assert supabase.rows("tier_config", tier_key="plus")[0]["price_monthly_cents"] == 2900
