from supabase import Client
from filmroom.config.tier_config import TIER_ORDER
from filmroom.core.timeutils import parse_timestamp
from filmroom.modules.admin.schemas import (
    Activity, DashboardAlert, DashboardMetrics, DashboardResponse, OrganizationCounts, OrganizationDetail,
    OrganizationListItem, OrganizationListResponse, OrganizationTeam, RecentSignup, Revenue, TeamCounts,
    TrialExtendResponse, UserCounts
)
from typing import Dict, List, Optional
from fastapi import HTTPException
from datetime import datetime, timedelta
import logging
import math

logger = logging.getLogger(__name__)

EXPIRING_TRIAL_WINDOW_DAYS = 3
RECENT_SIGNUP_COUNT = 5
MAX_PAGE_SIZE = 100


def derive_organization_status(org_status: Optional[str], subscription_statuses: List[str]) -> str:
    """Org status from its teams' subscriptions; churned orgs stay churned."""
    if org_status == "churned":
        return "churned"
    if not subscription_statuses:
        return "inactive"
    if "past_due" in subscription_statuses:
        return "past_due"
    if "active" in subscription_statuses:
        return "active"
    if "trialing" in subscription_statuses:
        return "trialing"
    if "waived" in subscription_statuses:
        return "active"
    return "inactive"


def _timestamp(value: Optional[datetime]) -> float:
    return value.timestamp() if value else 0.0


def _plural_alert(count: int, singular: str, plural: str) -> str:
    return singular if count == 1 else plural


class AdminService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _rows(self, table: str, columns: str = "*") -> List[dict]:
        result = self.supabase.table(table).select(columns).execute()
        return result.data or []

    def _created_since(self, table: str, since: datetime) -> int:
        result = self.supabase.table(table)\
            .select("id")\
            .gte("created_at", since.isoformat())\
            .execute()
        return len(result.data or [])

    def _tier_prices(self) -> Dict[str, int]:
        return {row["tier_key"]: row.get("price_monthly_cents") or 0 for row in self._rows("tier_config")}

    # ------------------------------------------------------------------
    # Dashboard
    # ------------------------------------------------------------------

    def get_dashboard(self, now: Optional[datetime] = None) -> DashboardResponse:
        """Platform-wide counts, revenue, activity, alerts and recent signups."""
        now = now or datetime.utcnow()
        day_ago = now - timedelta(days=1)
        week_ago = now - timedelta(days=7)
        month_ago = now - timedelta(days=30)
        try:
            orgs = self._rows("organizations", "id, status")
            teams = self._rows("teams", "id")
            subscriptions = self._rows("subscriptions", "team_id, tier, status, trial_ends_at")
            profiles = self._rows("profiles", "id, is_platform_admin, last_active_at")
            prices = self._tier_prices()

            by_tier = {tier: 0 for tier in TIER_ORDER}
            for sub in subscriptions:
                if sub.get("tier") in by_tier:
                    by_tier[sub["tier"]] += 1

            organizations = OrganizationCounts(
                total=len(orgs),
                active=sum(1 for o in orgs if o.get("status") == "active"),
                trial=sum(1 for s in subscriptions if s.get("status") == "trialing"),
                churned=sum(1 for o in orgs if o.get("status") == "churned"),
            )

            users = [p for p in profiles if not p.get("is_platform_admin")]
            last_active = [parse_timestamp(p.get("last_active_at")) for p in users]
            user_counts = UserCounts(
                total=len(users),
                active_today=sum(1 for ts in last_active if ts and ts >= day_ago),
                active_week=sum(1 for ts in last_active if ts and ts >= week_ago),
                active_month=sum(1 for ts in last_active if ts and ts >= month_ago),
            )

            mrr = sum(
                prices.get(sub.get("tier"), 0)
                for sub in subscriptions
                if sub.get("status") in ("active", "trialing")
            )

            activity = Activity(
                games_today=self._created_since("games", day_ago),
                games_week=self._created_since("games", week_ago),
                plays_today=self._created_since("play_instances", day_ago),
                plays_week=self._created_since("play_instances", week_ago),
            )

            return DashboardResponse(
                metrics=DashboardMetrics(
                    organizations=organizations,
                    teams=TeamCounts(total=len(teams), by_tier=by_tier),
                    users=user_counts,
                ),
                revenue=Revenue(mrr_cents=mrr, arr_cents=mrr * 12),
                activity=activity,
                alerts=self._alerts(subscriptions, now),
                recent_signups=self._recent_signups(),
            )
        except HTTPException:
            raise
        except Exception as e:
            logger.error(f"Error building admin dashboard: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch dashboard data")

    def _alerts(self, subscriptions: List[dict], now: datetime) -> List[DashboardAlert]:
        alerts = []
        past_due = sum(1 for s in subscriptions if s.get("status") == "past_due")
        if past_due:
            verb = _plural_alert(past_due, "team has", "teams have")
            alerts.append(DashboardAlert(
                type="failed_payment",
                severity="high",
                message=f"{past_due} {verb} failed payments",
                count=past_due,
            ))

        window_end = now + timedelta(days=EXPIRING_TRIAL_WINDOW_DAYS)
        expiring = 0
        for sub in subscriptions:
            ends = parse_timestamp(sub.get("trial_ends_at"))
            if sub.get("status") == "trialing" and ends and now <= ends <= window_end:
                expiring += 1
        if expiring:
            noun = _plural_alert(expiring, "trial", "trials")
            alerts.append(DashboardAlert(
                type="expiring_trials",
                severity="medium",
                message=f"{expiring} {noun} expiring within {EXPIRING_TRIAL_WINDOW_DAYS} days",
                count=expiring,
            ))
        return alerts

    def _recent_signups(self) -> List[RecentSignup]:
        recent = self.supabase.table("organizations")\
            .select("id, name, created_at, owner_user_id")\
            .order("created_at", desc=True)\
            .limit(RECENT_SIGNUP_COUNT)\
            .execute()
        signups = []
        for org in recent.data or []:
            signups.append(RecentSignup(
                organization_id=org["id"],
                name=org["name"],
                created_at=org.get("created_at"),
                owner_email=self._owner_email(org.get("owner_user_id")),
            ))
        return signups

    def _owner_email(self, user_id: Optional[str]) -> Optional[str]:
        if not user_id:
            return None
        profile = self.supabase.table("profiles")\
            .select("email")\
            .eq("id", user_id)\
            .limit(1)\
            .execute()
        return profile.data[0].get("email") if profile.data else None

    # ------------------------------------------------------------------
    # Organizations
    # ------------------------------------------------------------------

    def _organization_items(self) -> List[OrganizationListItem]:
        orgs = self._rows("organizations", "id, name, status, created_at, owner_user_id")
        teams = self._rows("teams", "id, organization_id")
        subscriptions = {s["team_id"]: s for s in self._rows("subscriptions", "team_id, tier, status")}
        profiles = self._rows("profiles", "id, email, full_name, organization_id, last_active_at")
        prices = self._tier_prices()

        profiles_by_id = {p["id"]: p for p in profiles}
        teams_by_org: Dict[str, List[dict]] = {}
        for team in teams:
            if team.get("organization_id"):
                teams_by_org.setdefault(team["organization_id"], []).append(team)
        users_by_org: Dict[str, int] = {}
        last_activity: Dict[str, str] = {}
        for profile in profiles:
            org_id = profile.get("organization_id")
            if not org_id:
                continue
            users_by_org[org_id] = users_by_org.get(org_id, 0) + 1
            active_at = profile.get("last_active_at")
            if active_at and (org_id not in last_activity or active_at > last_activity[org_id]):
                last_activity[org_id] = active_at

        items = []
        for org in orgs:
            org_subs = [subscriptions[t["id"]] for t in teams_by_org.get(org["id"], []) if t["id"] in subscriptions]
            statuses = [s.get("status") for s in org_subs]
            mrr = sum(prices.get(s.get("tier"), 0) for s in org_subs if s.get("status") in ("active", "waived"))
            owner = profiles_by_id.get(org.get("owner_user_id")) or {}
            items.append(OrganizationListItem(
                id=org["id"],
                name=org["name"],
                owner_email=owner.get("email") or "Unknown",
                owner_name=owner.get("full_name"),
                derived_status=derive_organization_status(org.get("status"), statuses),
                teams_count=len(teams_by_org.get(org["id"], [])),
                users_count=users_by_org.get(org["id"], 0),
                mrr_cents=mrr,
                created_at=org.get("created_at"),
                last_activity_at=last_activity.get(org["id"]),
            ))
        return items

    def list_organizations(self, search: Optional[str] = None, status: Optional[str] = None,
                           sort_by: str = "created_at", sort_order: str = "desc",
                           page: int = 1, page_size: int = 20) -> OrganizationListResponse:
        """Filter by name/owner email and derived status, sort, then page (1-indexed)."""
        page = max(1, page)
        page_size = min(MAX_PAGE_SIZE, max(1, page_size))
        try:
            items = self._organization_items()
        except Exception as e:
            logger.error(f"Error listing organizations: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch organizations")

        if search:
            needle = search.lower()
            items = [o for o in items if needle in o.name.lower() or needle in o.owner_email.lower()]
        if status:
            items = [o for o in items if o.derived_status == status]

        sort_keys = {
            "name": lambda o: o.name.lower(),
            "mrr": lambda o: o.mrr_cents,
            "teams_count": lambda o: o.teams_count,
            "last_activity": lambda o: _timestamp(o.last_activity_at),
            "created_at": lambda o: _timestamp(o.created_at),
        }
        items.sort(key=sort_keys.get(sort_by, sort_keys["created_at"]), reverse=sort_order != "asc")

        total = len(items)
        offset = (page - 1) * page_size
        return OrganizationListResponse(
            organizations=items[offset:offset + page_size],
            total=total,
            page=page,
            page_size=page_size,
            total_pages=math.ceil(total / page_size),
        )

    def get_organization(self, organization_id: str) -> OrganizationDetail:
        org = self.supabase.table("organizations")\
            .select("*")\
            .eq("id", organization_id)\
            .limit(1)\
            .execute()
        if not org.data:
            raise HTTPException(status_code=404, detail="Organization not found")
        org = org.data[0]

        teams = self.supabase.table("teams")\
            .select("id, name, level")\
            .eq("organization_id", organization_id)\
            .order("name")\
            .execute()
        team_rows = teams.data or []
        subscriptions = {}
        if team_rows:
            subs = self.supabase.table("subscriptions")\
                .select("*")\
                .in_("team_id", [t["id"] for t in team_rows])\
                .execute()
            subscriptions = {s["team_id"]: s for s in subs.data or []}
        users = self.supabase.table("profiles")\
            .select("id")\
            .eq("organization_id", organization_id)\
            .execute()
        prices = self._tier_prices()

        org_subs = list(subscriptions.values())
        return OrganizationDetail(
            id=org["id"],
            name=org["name"],
            status=org.get("status"),
            derived_status=derive_organization_status(org.get("status"), [s.get("status") for s in org_subs]),
            owner_user_id=org.get("owner_user_id"),
            owner_email=self._owner_email(org.get("owner_user_id")),
            created_at=org.get("created_at"),
            teams=[OrganizationTeam(**t, subscription=subscriptions.get(t["id"])) for t in team_rows],
            users_count=len(users.data or []),
            mrr_cents=sum(prices.get(s.get("tier"), 0) for s in org_subs if s.get("status") in ("active", "waived")),
        )

    # ------------------------------------------------------------------
    # Trials and system
    # ------------------------------------------------------------------

    def extend_trial(self, team_id: str, additional_days: int, admin_id: Optional[str] = None,
                     now: Optional[datetime] = None) -> TrialExtendResponse:
        """Push trial_ends_at forward; an already-lapsed trial extends from now."""
        if additional_days < 1 or additional_days > 90:
            raise HTTPException(status_code=400, detail="additional_days must be between 1 and 90")
        subscription = self.supabase.table("subscriptions")\
            .select("tier, status, trial_ends_at")\
            .eq("team_id", team_id)\
            .limit(1)\
            .execute()
        if not subscription.data:
            raise HTTPException(status_code=404, detail="No subscription found for this team")
        subscription = subscription.data[0]
        if subscription.get("status") != "trialing":
            raise HTTPException(status_code=400, detail="Team is not currently in a trial")

        now = now or datetime.utcnow()
        current_end = parse_timestamp(subscription.get("trial_ends_at"))
        base = current_end if current_end and current_end > now else now
        new_end = base + timedelta(days=additional_days)
        try:
            self.supabase.table("subscriptions")\
                .update({"trial_ends_at": new_end.isoformat(), "updated_at": now.isoformat()})\
                .eq("team_id", team_id)\
                .execute()
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
        logger.info(f"Admin {admin_id} extended trial for team {team_id} by {additional_days} day(s)")
        return TrialExtendResponse(team_id=team_id, trial_ends_at=new_end, days_added=additional_days)

    def get_system_stats(self) -> dict:
        try:
            result = self.supabase.rpc("get_db_stats").execute()
        except Exception as e:
            logger.error(f"get_db_stats failed: {e}")
            raise HTTPException(status_code=500, detail="Failed to fetch system stats")
        return result.data or {}
