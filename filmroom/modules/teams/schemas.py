from pydantic import BaseModel, EmailStr
from typing import Optional, Dict, Any
from datetime import datetime


class TeamCreate(BaseModel):
    name: str
    level: Optional[str] = None
    organization_id: Optional[str] = None
    colors: Optional[Dict[str, Any]] = None


class TeamUpdate(BaseModel):
    name: Optional[str] = None
    level: Optional[str] = None
    colors: Optional[Dict[str, Any]] = None


class TeamResponse(BaseModel):
    id: str
    name: str
    level: Optional[str] = None
    organization_id: Optional[str] = None
    user_id: str
    colors: Optional[Dict[str, Any]] = None
    role: Optional[str] = None  # caller's role, on list responses
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class TeamDeleteResponse(BaseModel):
    team_id: str
    deleted_games: int
    deleted_players: int


class MemberInvite(BaseModel):
    email: EmailStr
    role: str = "viewer"


class MemberRoleUpdate(BaseModel):
    role: str


class MemberResponse(BaseModel):
    id: str
    team_id: str
    user_id: str
    role: str
    invited_by: Optional[str] = None
    invited_at: Optional[datetime] = None
    joined_at: Optional[datetime] = None
    is_active: bool = True
    email: Optional[str] = None
    full_name: Optional[str] = None

    class Config:
        from_attributes = True
