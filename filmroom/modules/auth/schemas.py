from pydantic import BaseModel
from typing import Optional, List, Dict, Any


class TeamMembershipSummary(BaseModel):
    team_id: str
    team_name: Optional[str] = None
    role: str
    permissions: List[str] = []


class CurrentUserResponse(BaseModel):
    id: str
    email: Optional[str] = None
    user_metadata: Dict[str, Any] = {}
    app_metadata: Dict[str, Any] = {}
    is_platform_admin: bool = False
    teams: List[TeamMembershipSummary] = []
