from pydantic import BaseModel, Field
from typing import Optional
from datetime import datetime

POSITION_GROUPS = ("offense", "defense", "special_teams")

OFFENSE_POSITIONS = {
    "QB", "RB", "TB", "HB", "FB", "WR", "X", "Y", "Z", "SL", "TE", "OL", "LT", "LG", "C", "RG", "RT",
}
DEFENSE_POSITIONS = {
    "DL", "DE", "DT", "NT", "NG", "SDE", "WDE", "LB", "MLB", "ILB", "OLB", "MIKE", "WILL", "SAM",
    "DB", "CB", "NB", "S", "FS", "SS",
}
SPECIAL_TEAMS_POSITIONS = {"K", "P", "LS", "H", "KR", "PR"}


def position_group_for(position: Optional[str]) -> Optional[str]:
    """Group a position abbreviation belongs to, or None when unknown."""
    code = (position or "").strip().upper()
    if code in OFFENSE_POSITIONS:
        return "offense"
    if code in DEFENSE_POSITIONS:
        return "defense"
    if code in SPECIAL_TEAMS_POSITIONS:
        return "special_teams"
    return None


class PlayerCreate(BaseModel):
    jersey_number: int = Field(ge=0, le=99)
    first_name: str
    last_name: str
    primary_position: str
    secondary_position: Optional[str] = None
    position_group: Optional[str] = None  # derived from primary_position when omitted
    depth_order: int = 1
    grade_level: Optional[str] = None
    weight: Optional[int] = None
    height: Optional[int] = None
    notes: Optional[str] = None
    is_active: bool = True


class PlayerUpdate(BaseModel):
    jersey_number: Optional[int] = Field(default=None, ge=0, le=99)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    primary_position: Optional[str] = None
    secondary_position: Optional[str] = None
    position_group: Optional[str] = None
    depth_order: Optional[int] = None
    grade_level: Optional[str] = None
    weight: Optional[int] = None
    height: Optional[int] = None
    notes: Optional[str] = None
    is_active: Optional[bool] = None


class PlayerResponse(BaseModel):
    id: str
    team_id: str
    jersey_number: int
    first_name: str
    last_name: str
    primary_position: str
    secondary_position: Optional[str] = None
    position_group: Optional[str] = None
    depth_order: int = 1
    grade_level: Optional[str] = None
    weight: Optional[int] = None
    height: Optional[int] = None
    notes: Optional[str] = None
    is_active: bool = True
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
