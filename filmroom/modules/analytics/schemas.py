from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional
from datetime import date as DateType


class MetricFilters(BaseModel):
    team_id: str
    game_id: Optional[str] = None
    game_ids: Optional[List[str]] = None
    start_date: Optional[DateType] = None
    end_date: Optional[DateType] = None
    opponent: Optional[str] = None


class CompareGamesRequest(BaseModel):
    game_ids: List[str] = Field(min_length=1)


class CompareTeamsRequest(BaseModel):
    team_ids: List[str] = Field(min_length=1)


class TurnoverDifferentialResponse(BaseModel):
    team_id: str
    game_id: Optional[str] = None
    turnover_differential: int


class PerformanceCheckResponse(BaseModel):
    good_offense: bool
    good_defense: bool
    metrics: Dict[str, Any]


class MetricDefinition(BaseModel):
    key: str
    title: str
    description: str
    calculation: str
