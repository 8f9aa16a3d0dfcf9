from fastapi import APIRouter, Depends
from filmroom.database.supabase_client import get_supabase
from filmroom.modules.games.schemas import (
    GameCreate, GameDeleteResponse, GameResponse, GameUpdate, ScoreUpdate, TaggingTierUpdate
)
from filmroom.modules.games.service import GameService
from filmroom.core.dependencies import require_team_permission
from supabase import Client
from typing import Dict, List, Optional

router = APIRouter(prefix="/teams/{team_id}/games", tags=["games"])


def get_game_service(supabase: Client = Depends(get_supabase)) -> GameService:
    return GameService(supabase)


@router.post("", response_model=GameResponse, status_code=201)
async def create_game(
    team_id: str,
    game_data: GameCreate,
    user_data: Dict = Depends(require_team_permission("games:create")),
    service: GameService = Depends(get_game_service)
):
    """Create a game. Uses one upload token and starts the retention clock."""
    return service.create_game(team_id, game_data, user_data)


@router.get("", response_model=List[GameResponse])
async def list_games(
    team_id: str,
    is_opponent_game: Optional[bool] = None,
    opponent: Optional[str] = None,
    start_date: Optional[str] = None,
    end_date: Optional[str] = None,
    user_data: Dict = Depends(require_team_permission("games:read")),
    service: GameService = Depends(get_game_service)
):
    """List games, newest first"""
    return service.list_games(team_id, is_opponent_game, opponent, start_date, end_date)


@router.get("/{game_id}", response_model=GameResponse)
async def get_game(
    team_id: str,
    game_id: str,
    user_data: Dict = Depends(require_team_permission("games:read")),
    service: GameService = Depends(get_game_service)
):
    return service.get_game(team_id, game_id)


@router.get("/{game_id}/access", response_model=GameResponse)
async def check_game_access(
    team_id: str,
    game_id: str,
    user_data: Dict = Depends(require_team_permission("games:read")),
    service: GameService = Depends(get_game_service)
):
    """403 when the game is locked or its film has expired"""
    return service.check_access(team_id, game_id)


@router.put("/{game_id}", response_model=GameResponse)
async def update_game(
    team_id: str,
    game_id: str,
    game_data: GameUpdate,
    user_data: Dict = Depends(require_team_permission("games:update")),
    service: GameService = Depends(get_game_service)
):
    return service.update_game(team_id, game_id, game_data)


@router.put("/{game_id}/score", response_model=GameResponse)
async def update_score(
    team_id: str,
    game_id: str,
    score: ScoreUpdate,
    user_data: Dict = Depends(require_team_permission("games:update")),
    service: GameService = Depends(get_game_service)
):
    """Set final score, optionally by quarter"""
    return service.update_score(team_id, game_id, score)


@router.post("/{game_id}/score/calculate")
async def calculate_quarter_scores(
    team_id: str,
    game_id: str,
    user_data: Dict = Depends(require_team_permission("games:update")),
    service: GameService = Depends(get_game_service)
):
    """Recompute the quarter breakdown from tagged scoring plays"""
    return service.calculate_quarter_scores(team_id, game_id)


@router.get("/{game_id}/tagging-tier")
async def get_tagging_tier(
    team_id: str,
    game_id: str,
    user_data: Dict = Depends(require_team_permission("games:read")),
    service: GameService = Depends(get_game_service)
):
    return service.get_tagging_tier(team_id, game_id)


@router.put("/{game_id}/tagging-tier", response_model=GameResponse)
async def set_tagging_tier(
    team_id: str,
    game_id: str,
    data: TaggingTierUpdate,
    user_data: Dict = Depends(require_team_permission("plays:tag")),
    service: GameService = Depends(get_game_service)
):
    """Select or upgrade the tagging tier. Downgrades are rejected."""
    return service.set_tagging_tier(team_id, game_id, data.tagging_tier, user_data)


@router.delete("/{game_id}", response_model=GameDeleteResponse)
async def delete_game(
    team_id: str,
    game_id: str,
    user_data: Dict = Depends(require_team_permission("games:delete")),
    service: GameService = Depends(get_game_service)
):
    """Delete a game with its film, tags and drives"""
    return service.delete_game(team_id, game_id, user_data["id"])
