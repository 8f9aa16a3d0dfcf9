from fastapi import APIRouter, Depends, Query
from filmroom.database.supabase_client import get_supabase
from filmroom.modules.analytics.schemas import (
    CompareGamesRequest, CompareTeamsRequest, MetricDefinition, MetricFilters, PerformanceCheckResponse,
    TurnoverDifferentialResponse
)
from filmroom.modules.analytics.service import AnalyticsService
from filmroom.config.permissions_config import min_role_for
from filmroom.core.dependencies import check_team_role, get_current_user_id, require_team_permission
from supabase import Client
from typing import Dict, List, Optional
from datetime import date

router = APIRouter(tags=["analytics"])


def get_analytics_service(supabase: Client = Depends(get_supabase)) -> AnalyticsService:
    return AnalyticsService(supabase)


def metric_filters(
    team_id: str,
    game_id: Optional[str] = None,
    game_ids: Optional[List[str]] = Query(None),
    start_date: Optional[date] = None,
    end_date: Optional[date] = None,
    opponent: Optional[str] = None
) -> MetricFilters:
    return MetricFilters(
        team_id=team_id,
        game_id=game_id,
        game_ids=game_ids,
        start_date=start_date,
        end_date=end_date,
        opponent=opponent
    )


@router.get("/analytics/definitions", response_model=List[MetricDefinition])
async def list_metric_definitions(user_data: Dict = Depends(get_current_user_id)):
    return AnalyticsService.get_definitions()


@router.post("/analytics/compare-teams")
async def compare_teams(
    body: CompareTeamsRequest,
    user_data: Dict = Depends(get_current_user_id),
    supabase: Client = Depends(get_supabase),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Season metrics for several teams; the caller needs read access on each"""
    min_role = min_role_for("analytics:read")
    for team_id in body.team_ids:
        check_team_role(team_id, user_data, supabase, min_role)
    return service.compare_teams(body.team_ids)


@router.get("/teams/{team_id}/analytics/metrics")
async def get_team_metrics(
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """
    Offense, defense, special teams and overall metrics.

    Game filter priority is game_ids, then game_id, then the date range.
    """
    return service.get_comprehensive_metrics(filters)


@router.get("/teams/{team_id}/analytics/offense")
async def get_offensive_metrics(
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_offensive_metrics(filters)


@router.get("/teams/{team_id}/analytics/defense")
async def get_defensive_metrics(
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_defensive_metrics(filters)


@router.get("/teams/{team_id}/analytics/special-teams")
async def get_special_teams_metrics(
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_special_teams_metrics(filters)


@router.get("/teams/{team_id}/analytics/performance", response_model=PerformanceCheckResponse)
async def check_performance(
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.check_performance(filters)


@router.get("/teams/{team_id}/analytics/turnover-differential", response_model=TurnoverDifferentialResponse)
async def get_turnover_differential(
    team_id: str,
    game_id: Optional[str] = None,
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_turnover_differential(team_id, game_id)


@router.post("/teams/{team_id}/analytics/compare-games")
async def compare_games(
    team_id: str,
    body: CompareGamesRequest,
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.compare_games(team_id, body.game_ids)


@router.get("/teams/{team_id}/analytics/player-attribution")
async def get_player_attribution(
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_player_attribution(filters)


@router.get("/teams/{team_id}/analytics/players/{player_id}")
async def get_player_stats(
    player_id: str,
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """Rushing, passing and receiving lines, yards by down and the player's best plays"""
    return service.get_player_stats(filters, player_id)


@router.get("/teams/{team_id}/analytics/players/{player_id}/positions/{position}")
async def get_position_stats(
    player_id: str,
    position: str,
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    """
    Position section for one player: qb, rb, wr-te, ol, dl, lb or db.

    Returns null when the player has no snaps the section counts.
    """
    return service.get_position_stats(filters, player_id, position)


@router.get("/teams/{team_id}/analytics/offensive-line")
async def get_offensive_line_stats(
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_offensive_line_stats(filters)


@router.get("/teams/{team_id}/analytics/defensive-players")
async def get_defensive_player_stats(
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_defensive_player_stats(filters)


@router.get("/teams/{team_id}/analytics/situational-splits")
async def get_situational_splits(
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_situational_splits(filters)


@router.get("/teams/{team_id}/analytics/defense/downs")
async def get_defensive_down_breakdown(
    filters: MetricFilters = Depends(metric_filters),
    user_data: Dict = Depends(require_team_permission("analytics:read")),
    service: AnalyticsService = Depends(get_analytics_service)
):
    return service.get_defensive_down_breakdown(filters)
