from pydantic import BaseModel, Field
from typing import Any, Dict, List, Literal, Optional
from datetime import datetime

OrganizationStatus = Literal["active", "trialing", "past_due", "churned", "inactive"]
SortField = Literal["name", "created_at", "mrr", "teams_count", "last_activity"]


class OrganizationCounts(BaseModel):
    total: int = 0
    active: int = 0
    trial: int = 0
    churned: int = 0


class TeamCounts(BaseModel):
    total: int = 0
    by_tier: Dict[str, int] = {}


class UserCounts(BaseModel):
    total: int = 0
    active_today: int = 0
    active_week: int = 0
    active_month: int = 0


class DashboardMetrics(BaseModel):
    organizations: OrganizationCounts
    teams: TeamCounts
    users: UserCounts


class Revenue(BaseModel):
    mrr_cents: int = 0
    arr_cents: int = 0


class Activity(BaseModel):
    games_today: int = 0
    games_week: int = 0
    plays_today: int = 0
    plays_week: int = 0


class DashboardAlert(BaseModel):
    type: str
    severity: Literal["high", "medium", "low"]
    message: str
    count: Optional[int] = None


class RecentSignup(BaseModel):
    organization_id: str
    name: str
    created_at: Optional[datetime] = None
    owner_email: Optional[str] = None


class DashboardResponse(BaseModel):
    metrics: DashboardMetrics
    revenue: Revenue
    activity: Activity
    alerts: List[DashboardAlert] = []
    recent_signups: List[RecentSignup] = []


class OrganizationListItem(BaseModel):
    id: str
    name: str
    owner_email: str = "Unknown"
    owner_name: Optional[str] = None
    derived_status: OrganizationStatus
    teams_count: int = 0
    users_count: int = 0
    mrr_cents: int = 0
    created_at: Optional[datetime] = None
    last_activity_at: Optional[datetime] = None


class OrganizationListResponse(BaseModel):
    organizations: List[OrganizationListItem]
    total: int
    page: int
    page_size: int
    total_pages: int


class OrganizationTeam(BaseModel):
    id: str
    name: str
    level: Optional[str] = None
    subscription: Optional[Dict[str, Any]] = None


class OrganizationDetail(BaseModel):
    id: str
    name: str
    status: Optional[str] = None
    derived_status: OrganizationStatus
    owner_user_id: Optional[str] = None
    owner_email: Optional[str] = None
    created_at: Optional[datetime] = None
    teams: List[OrganizationTeam] = []
    users_count: int = 0
    mrr_cents: int = 0


class TrialExtendRequest(BaseModel):
    additional_days: int = Field(ge=1, le=90)


class TrialExtendResponse(BaseModel):
    team_id: str
    trial_ends_at: datetime
    days_added: int
