"""Tests for the application shell: health checks and response headers."""

import asyncio

from filmroom.config.tier_config import DEFAULT_TIER_CONFIGS


class TestHealthEndpoints:
    def test_health(self, client):
        response = client.get("/health")
        assert response.json() == {"status": "healthy"}
        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "DENY"

    def test_ready_needs_tier_config(self, client, supabase):
        assert client.get("/ready").status_code == 503
        supabase.seed("tier_config", *DEFAULT_TIER_CONFIGS)
        response = client.get("/ready")
        assert response.status_code == 200
        assert response.json() == {"status": "ready"}


class TestRetentionTask:
    def test_task_held_and_cancelled_on_shutdown(self, monkeypatch):
        from fastapi.testclient import TestClient
        from filmroom import main
        from filmroom.modules.games import retention_scheduler

        async def idle_loop():
            await asyncio.sleep(3600)

        monkeypatch.setattr(main.settings, "enable_retention_scheduler", True)
        monkeypatch.setattr(retention_scheduler, "retention_scheduler_loop", idle_loop)
        with TestClient(main.app):
            task = main._retention_task
            assert task is not None
            assert not task.done()
        assert task.cancelled()
        assert main._retention_task is None

    def test_disabled_scheduler_starts_nothing(self, monkeypatch):
        from fastapi.testclient import TestClient
        from filmroom import main

        monkeypatch.setattr(main.settings, "enable_retention_scheduler", False)
        with TestClient(main.app):
            assert main._retention_task is None
