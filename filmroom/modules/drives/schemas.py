from pydantic import BaseModel, Field
from typing import Optional, List, Literal
from datetime import datetime

PossessionType = Literal["offense", "defense"]


class DriveCreate(BaseModel):
    game_id: str
    drive_number: int = Field(ge=1)
    quarter: int = Field(ge=1)
    start_yard_line: int = Field(ge=0, le=100)
    possession_type: PossessionType = "offense"
    start_time: Optional[float] = None


class DriveUpdate(BaseModel):
    end_yard_line: Optional[int] = Field(default=None, ge=0, le=100)
    end_time: Optional[float] = None
    result: Optional[str] = None
    notes: Optional[str] = None


class DriveComplete(BaseModel):
    result: str
    end_yard_line: int = Field(ge=0, le=100)
    end_time: Optional[float] = None


class AutoCreateRequest(BaseModel):
    possession_type: PossessionType = "offense"


class DriveResponse(BaseModel):
    id: str
    game_id: str
    team_id: Optional[str] = None
    drive_number: int
    quarter: int
    possession_type: str = "offense"
    start_time: Optional[float] = None
    end_time: Optional[float] = None
    start_yard_line: int
    end_yard_line: int
    plays_count: int = 0
    yards_gained: int = 0
    first_downs: int = 0
    result: str = "end_half"
    points: int = 0
    three_and_out: bool = False
    reached_red_zone: bool = False
    scoring_drive: bool = False
    notes: Optional[str] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class DriveWithPlays(DriveResponse):
    plays: List[dict] = []


class DriveMetrics(BaseModel):
    drives: int
    points_per_drive: float
    three_and_out_rate: float
    red_zone_td_rate: float
