"""Tests for the platform back office: organization status, dashboard and trial extension."""

from datetime import datetime, timedelta

import pytest
from fastapi import HTTPException

from filmroom.config.tier_config import DEFAULT_TIER_CONFIGS
from filmroom.modules.admin.service import AdminService, derive_organization_status

NOW = datetime(2024, 10, 1, 12, 0, 0)


@pytest.fixture
def platform(supabase):
    supabase.seed("tier_config", *DEFAULT_TIER_CONFIGS)
    supabase.seed(
        "organizations",
        {"id": "org-a", "name": "Acme Youth", "status": "active", "owner_user_id": "u-a",
         "created_at": "2024-09-01T00:00:00"},
        {"id": "org-b", "name": "Bears Club", "status": "active", "owner_user_id": "u-b",
         "created_at": "2024-09-20T00:00:00"},
        {"id": "org-c", "name": "Comets", "status": "churned", "created_at": "2024-08-01T00:00:00"},
    )
    supabase.seed(
        "teams",
        {"id": "t-a1", "name": "Acme Varsity", "organization_id": "org-a"},
        {"id": "t-a2", "name": "Acme JV", "organization_id": "org-a"},
        {"id": "t-b1", "name": "Bears", "organization_id": "org-b"},
    )
    supabase.seed(
        "subscriptions",
        {"team_id": "t-a1", "tier": "plus", "status": "active"},
        {"team_id": "t-a2", "tier": "premium", "status": "past_due"},
        {"team_id": "t-b1", "tier": "plus", "status": "trialing",
         "trial_ends_at": (NOW + timedelta(days=2)).isoformat()},
    )
    supabase.seed(
        "profiles",
        {"id": "u-a", "email": "owner@acme.org", "full_name": "Ada", "organization_id": "org-a",
         "last_active_at": (NOW - timedelta(hours=2)).isoformat()},
        {"id": "u-b", "email": "coach@bears.org", "organization_id": "org-b",
         "last_active_at": (NOW - timedelta(days=10)).isoformat()},
        {"id": "admin", "email": "ops@filmroom.app", "is_platform_admin": True},
    )
    return supabase


class TestDerivedStatus:
    @pytest.mark.parametrize("org_status, statuses, expected", [
        ("churned", ["active"], "churned"),
        ("active", [], "inactive"),
        ("active", ["active", "past_due"], "past_due"),
        ("active", ["trialing", "active"], "active"),
        ("active", ["trialing"], "trialing"),
        ("active", ["waived"], "active"),
        ("active", ["canceled"], "inactive"),
    ])
    def test_precedence(self, org_status, statuses, expected):
        assert derive_organization_status(org_status, statuses) == expected


class TestDashboard:
    def test_counts_revenue_and_alerts(self, platform):
        dashboard = AdminService(platform).get_dashboard(now=NOW)
        assert dashboard.metrics.organizations.total == 3
        assert dashboard.metrics.organizations.churned == 1
        assert dashboard.metrics.teams.by_tier == {"basic": 0, "plus": 2, "premium": 1}
        assert dashboard.metrics.users.total == 2
        assert dashboard.metrics.users.active_today == 1
        assert dashboard.metrics.users.active_month == 2
        assert dashboard.revenue.mrr_cents == 5800
        assert dashboard.revenue.arr_cents == 69600
        assert {a.type: a.severity for a in dashboard.alerts} == {"failed_payment": "high", "expiring_trials": "medium"}
        assert dashboard.recent_signups[0].organization_id == "org-b"
        assert dashboard.recent_signups[0].owner_email == "coach@bears.org"


class TestOrganizations:
    def test_list_derives_status_and_mrr(self, platform):
        listing = AdminService(platform).list_organizations(sort_by="name", sort_order="asc")
        by_id = {o.id: o for o in listing.organizations}
        assert [o.id for o in listing.organizations] == ["org-a", "org-b", "org-c"]
        assert by_id["org-a"].derived_status == "past_due"
        assert by_id["org-a"].mrr_cents == 2900
        assert by_id["org-a"].teams_count == 2
        assert by_id["org-b"].derived_status == "trialing"
        assert by_id["org-c"].owner_email == "Unknown"

    def test_search_and_paging(self, platform):
        service = AdminService(platform)
        assert [o.id for o in service.list_organizations(search="acme.org").organizations] == ["org-a"]
        page = service.list_organizations(page=2, page_size=2)
        assert (page.total, page.total_pages, len(page.organizations)) == (3, 2, 1)

    def test_status_filter(self, platform):
        listing = AdminService(platform).list_organizations(status="churned")
        assert [o.id for o in listing.organizations] == ["org-c"]

    def test_detail(self, platform):
        detail = AdminService(platform).get_organization("org-a")
        assert [t.name for t in detail.teams] == ["Acme JV", "Acme Varsity"]
        assert detail.owner_email == "owner@acme.org"

    def test_missing(self, platform):
        with pytest.raises(HTTPException) as exc:
            AdminService(platform).get_organization("nope")
        assert exc.value.status_code == 404


class TestTrialExtension:
    def test_extends_from_current_end(self, platform):
        result = AdminService(platform).extend_trial("t-b1", 7, "admin", now=NOW)
        assert result.trial_ends_at == NOW + timedelta(days=9)
        stored = platform.rows("subscriptions", team_id="t-b1")[0]["trial_ends_at"]
        assert stored == (NOW + timedelta(days=9)).isoformat()

    def test_lapsed_trial_extends_from_now(self, platform):
        platform.rows("subscriptions", team_id="t-b1")[0]["trial_ends_at"] = (NOW - timedelta(days=5)).isoformat()
        result = AdminService(platform).extend_trial("t-b1", 3, now=NOW)
        assert result.trial_ends_at == NOW + timedelta(days=3)

    def test_not_trialing(self, platform):
        with pytest.raises(HTTPException) as exc:
            AdminService(platform).extend_trial("t-a1", 7, now=NOW)
        assert exc.value.detail == "Team is not currently in a trial"

    def test_no_subscription(self, platform):
        with pytest.raises(HTTPException) as exc:
            AdminService(platform).extend_trial("t-zz", 7, now=NOW)
        assert exc.value.status_code == 404

    def test_day_bounds(self, platform):
        with pytest.raises(HTTPException) as exc:
            AdminService(platform).extend_trial("t-b1", 91, now=NOW)
        assert exc.value.status_code == 400


class TestAdminEndpoints:
    def test_requires_platform_admin(self, client, platform):
        response = client.get("/api/v1/admin/organizations")
        assert response.status_code == 403

    def test_admin_via_app_metadata(self, client, platform, coach):
        coach["app_metadata"] = {"type": "platform_admin"}
        response = client.put("/api/v1/admin/teams/t-b1/trial", json={"additional_days": 5})
        assert response.status_code == 200
        assert response.json()["days_added"] == 5

    def test_trial_days_validated(self, client, platform, coach):
        coach["app_metadata"] = {"type": "platform_admin"}
        response = client.put("/api/v1/admin/teams/t-b1/trial", json={"additional_days": 0})
        assert response.status_code == 422

    def test_system_stats(self, client, platform, coach):
        coach["app_metadata"] = {"type": "platform_admin"}
        platform.rpc_results["get_db_stats"] = {"database_size": "12 MB"}
        response = client.get("/api/v1/admin/system/stats")
        assert response.json() == {"database_size": "12 MB"}
