from pydantic import BaseModel
from typing import Optional, Dict, Any
from datetime import date as DateType, datetime


class GameCreate(BaseModel):
    name: str
    opponent: Optional[str] = None
    opponent_team_name: Optional[str] = None
    date: Optional[DateType] = None
    location: Optional[str] = None
    is_opponent_game: bool = False
    tagging_tier: Optional[str] = None


class GameUpdate(BaseModel):
    name: Optional[str] = None
    opponent: Optional[str] = None
    opponent_team_name: Optional[str] = None
    date: Optional[DateType] = None
    location: Optional[str] = None


class QuarterScores(BaseModel):
    q1: int = 0
    q2: int = 0
    q3: int = 0
    q4: int = 0
    ot: int = 0
    total: Optional[int] = None  # summed from the quarters when omitted


class QuarterScoresInput(BaseModel):
    team: QuarterScores
    opponent: QuarterScores


class ScoreUpdate(BaseModel):
    team_score: Optional[int] = None
    opponent_score: Optional[int] = None
    quarter_scores: Optional[QuarterScoresInput] = None


class TaggingTierUpdate(BaseModel):
    tagging_tier: str


class GameResponse(BaseModel):
    id: str
    team_id: str
    name: str
    opponent: Optional[str] = None
    opponent_team_name: Optional[str] = None
    date: Optional[DateType] = None
    location: Optional[str] = None
    is_opponent_game: bool = False
    team_score: Optional[int] = None
    opponent_score: Optional[int] = None
    game_result: Optional[str] = None
    quarter_scores: Optional[Dict[str, Any]] = None
    tagging_tier: Optional[str] = None
    is_locked: bool = False
    locked_reason: Optional[str] = None
    expires_at: Optional[datetime] = None
    created_by: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class GameDeleteResponse(BaseModel):
    game_id: str
    token_refunded: bool
    deleted_videos: int
    deleted_tags: int
