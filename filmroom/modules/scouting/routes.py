from fastapi import APIRouter, Depends, Query
from filmroom.database.supabase_client import get_supabase
from filmroom.modules.scouting.schemas import OpponentSummary
from filmroom.modules.scouting.service import ScoutingService
from filmroom.core.dependencies import require_team_permission
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/teams/{team_id}/scouting", tags=["scouting"])


def get_scouting_service(supabase: Client = Depends(get_supabase)) -> ScoutingService:
    return ScoutingService(supabase)


@router.get("/opponents", response_model=List[OpponentSummary])
async def list_opponents(
    team_id: str,
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: ScoutingService = Depends(get_scouting_service)
):
    return service.list_opponents(team_id)


@router.get("/metrics")
async def get_opponent_metrics(
    team_id: str,
    opponent: str,
    game_id: Optional[str] = None,
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: ScoutingService = Depends(get_scouting_service)
):
    """Opponent offense, defense and special teams from every game against them"""
    return service.calculate_opponent_metrics(team_id, opponent, game_id)


@router.get("/tendencies")
async def get_opponent_tendencies(
    team_id: str,
    opponent: str,
    top_formations: int = Query(5, ge=1, le=20),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: ScoutingService = Depends(get_scouting_service)
):
    return service.get_tendencies(team_id, opponent, top_formations)
