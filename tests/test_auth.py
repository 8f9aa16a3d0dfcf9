"""Tests for bearer token validation and activity tracking."""

import time
from datetime import datetime

import pytest
from fastapi import HTTPException

from filmroom.modules.auth import service as auth_service
from filmroom.modules.auth.service import AuthService, clear_auth_cache


@pytest.fixture(autouse=True)
def fresh_cache():
    clear_auth_cache()
    yield
    clear_auth_cache()


@pytest.fixture
def auth(supabase):
    supabase.auth_users["good-token"] = {
        "id": "user-1",
        "email": "one@example.com",
        "user_metadata": {"full_name": "One"},
        "app_metadata": None,
    }
    return AuthService(supabase)


class TestTokenValidation:
    def test_valid_token(self, auth):
        user = auth.get_current_user("good-token")
        assert user["id"] == "user-1"
        assert user["app_metadata"] == {}

    def test_cached_for_repeat_calls(self, auth, supabase):
        auth.get_current_user("good-token")
        del supabase.auth_users["good-token"]
        assert auth.get_current_user("good-token")["email"] == "one@example.com"

    def test_invalid_token(self, auth):
        with pytest.raises(HTTPException) as exc:
            auth.get_current_user("bad-token")
        assert exc.value.status_code == 401
        assert exc.value.detail == "Invalid or expired token"

    def test_full_cache_drops_expired_entries(self, auth, monkeypatch):
        monkeypatch.setattr(auth_service, "_AUTH_CACHE_MAX_SIZE", 2)
        past = time.monotonic() - 1
        auth_service._AUTH_USER_CACHE["stale-1"] = ({"id": "old"}, past)
        auth_service._AUTH_USER_CACHE["stale-2"] = ({"id": "old"}, past)

        auth.get_current_user("good-token")

        assert "stale-1" not in auth_service._AUTH_USER_CACHE
        assert "stale-2" not in auth_service._AUTH_USER_CACHE
        assert len(auth_service._AUTH_USER_CACHE) == 1

    def test_full_cache_of_live_entries_skips_caching(self, auth, supabase, monkeypatch):
        monkeypatch.setattr(auth_service, "_AUTH_CACHE_MAX_SIZE", 1)
        auth_service._AUTH_USER_CACHE["live"] = ({"id": "other"}, time.monotonic() + 60)

        auth.get_current_user("good-token")
        del supabase.auth_users["good-token"]

        with pytest.raises(HTTPException):
            auth.get_current_user("good-token")


class TestActivity:
    def test_record_activity(self, auth, supabase):
        supabase.seed("profiles", {"id": "user-1", "email": "one@example.com"})
        auth.record_activity("user-1", now=datetime(2024, 9, 1, 8, 30))
        assert supabase.rows("profiles", id="user-1")[0]["last_active_at"] == "2024-09-01T08:30:00"

    def test_me_stamps_profile(self, client, supabase, coach):
        supabase.seed("profiles", {"id": coach["id"], "email": coach["email"]})
        assert client.get("/api/v1/auth/me").status_code == 200
        assert supabase.rows("profiles", id=coach["id"])[0]["last_active_at"] is not None


class TestUserTeams:
    def test_roles_carry_permissions(self, auth, supabase):
        supabase.seed("teams", {"id": "t-own", "name": "Owned", "user_id": "user-1"},
                      {"id": "t-view", "name": "Watched", "user_id": "other"})
        supabase.seed("team_memberships", {"team_id": "t-view", "user_id": "user-1", "role": "viewer",
                                           "is_active": True})
        teams = {t.team_id: t for t in auth.get_user_teams("user-1")}
        assert teams["t-own"].role == "owner"
        assert "teams:delete" in teams["t-own"].permissions
        assert teams["t-view"].team_name == "Watched"
        assert "games:read" in teams["t-view"].permissions
        assert "games:create" not in teams["t-view"].permissions
