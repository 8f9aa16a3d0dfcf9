from supabase import Client
from filmroom.modules.analytics.definitions import METRIC_DEFINITIONS, is_good_defense, is_good_offense
from filmroom.modules.analytics.schemas import (
    MetricDefinition, MetricFilters, PerformanceCheckResponse, TurnoverDifferentialResponse
)
from filmroom.modules.analytics.aggregation import (
    block_stats, db_stats, defensive_down_breakdown, dl_stats, game_filter_mask, lb_stats, player_stats,
    plays_frame, qb_stats, rb_stats, situational_splits, wr_te_stats
)
from filmroom.modules.analytics.team_metrics import compute_team_metrics, filter_kwargs
from typing import Dict, List, Optional
from fastapi import HTTPException
import pandas as pd
import logging

logger = logging.getLogger(__name__)

POSITION_SECTIONS = {
    "qb": qb_stats,
    "rb": rb_stats,
    "wr-te": wr_te_stats,
    "ol": block_stats,
    "dl": dl_stats,
    "lb": lb_stats,
    "db": db_stats,
}

OFFENSIVE_LINE_POSITIONS = {"OL", "LT", "LG", "C", "RG", "RT"}

# Defensive roster spot -> stat section
DEFENSIVE_SECTIONS = {
    **{pos: dl_stats for pos in ("DL", "DE", "DT", "NT", "NG", "SDE", "WDE")},
    **{pos: lb_stats for pos in ("LB", "MLB", "ILB", "OLB", "MIKE", "WILL", "SAM")},
    **{pos: db_stats for pos in ("DB", "CB", "NB", "S", "FS", "SS")},
}


class AnalyticsService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def _load_team_rows(self, team_id: str) -> Dict[str, list]:
        """Everything the metrics need for one team; filtering happens in pandas."""
        try:
            games = self.supabase.table("games")\
                .select("id, date, opponent, opponent_team_name, is_opponent_game")\
                .eq("team_id", team_id)\
                .execute()
            game_ids = [g["id"] for g in games.data or []]
            videos = []
            if game_ids:
                videos = self.supabase.table("videos")\
                    .select("id, game_id")\
                    .in_("game_id", game_ids)\
                    .execute().data or []
            plays = self.supabase.table("play_instances")\
                .select("*")\
                .eq("team_id", team_id)\
                .execute()
            opponent_play_ids = [p["id"] for p in plays.data or [] if p.get("is_opponent_play")]
            participation = []
            if opponent_play_ids:
                participation = self.supabase.table("player_participation")\
                    .select("play_instance_id, participation_type, result")\
                    .in_("play_instance_id", opponent_play_ids)\
                    .execute().data or []
            drives = self.supabase.table("drives")\
                .select("game_id, possession_type, start_yard_line")\
                .eq("team_id", team_id)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to load metrics data for team {team_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to calculate metrics: {str(e)}")
        return {
            "games": games.data or [],
            "videos": videos,
            "plays": plays.data or [],
            "participation": participation,
            "drives": drives.data or [],
        }

    def get_comprehensive_metrics(self, filters: MetricFilters, rows: Optional[Dict[str, list]] = None) -> dict:
        if rows is None:
            rows = self._load_team_rows(filters.team_id)
        return compute_team_metrics(filters, **rows)

    def get_offensive_metrics(self, filters: MetricFilters) -> dict:
        return self.get_comprehensive_metrics(filters)["offense"]

    def get_defensive_metrics(self, filters: MetricFilters) -> dict:
        return self.get_comprehensive_metrics(filters)["defense"]

    def get_special_teams_metrics(self, filters: MetricFilters) -> dict:
        return self.get_comprehensive_metrics(filters)["specialTeams"]

    def get_turnover_differential(self, team_id: str, game_id: Optional[str] = None) -> TurnoverDifferentialResponse:
        metrics = self.get_comprehensive_metrics(MetricFilters(team_id=team_id, game_id=game_id))
        return TurnoverDifferentialResponse(
            team_id=team_id,
            game_id=game_id,
            turnover_differential=metrics["overall"]["turnoverDifferential"]
        )

    def compare_games(self, team_id: str, game_ids: List[str]) -> List[dict]:
        """One metrics object per game, in the order given"""
        rows = self._load_team_rows(team_id)
        known = {g["id"] for g in rows["games"]}
        missing = [game_id for game_id in game_ids if game_id not in known]
        if missing:
            raise HTTPException(status_code=404, detail=f"Game not found: {missing[0]}")
        return [
            self.get_comprehensive_metrics(MetricFilters(team_id=team_id, game_id=game_id), rows)
            for game_id in game_ids
        ]

    def compare_teams(self, team_ids: List[str]) -> Dict[str, dict]:
        """Season metrics keyed by team id"""
        return {
            team_id: self.get_comprehensive_metrics(MetricFilters(team_id=team_id))
            for team_id in team_ids
        }

    def check_performance(self, filters: MetricFilters) -> PerformanceCheckResponse:
        metrics = self.get_comprehensive_metrics(filters)
        return PerformanceCheckResponse(
            good_offense=is_good_offense(metrics["offense"]),
            good_defense=is_good_defense(metrics["defense"]),
            metrics=metrics
        )

    def _filtered_plays(self, filters: MetricFilters) -> pd.DataFrame:
        rows = self._load_team_rows(filters.team_id)
        df = plays_frame(rows["plays"], rows["videos"], rows["games"])
        return df[game_filter_mask(df, **filter_kwargs(filters))]

    def _get_player(self, team_id: str, player_id: str) -> dict:
        try:
            result = self.supabase.table("players")\
                .select("*")\
                .eq("id", player_id)\
                .eq("team_id", team_id)\
                .limit(1)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to load player {player_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to load player: {str(e)}")
        if not result.data:
            raise HTTPException(status_code=404, detail="Player not found")
        return result.data[0]

    def _active_players(self, team_id: str) -> List[dict]:
        try:
            result = self.supabase.table("players")\
                .select("*")\
                .eq("team_id", team_id)\
                .eq("is_active", True)\
                .execute()
        except Exception as e:
            logger.error(f"Failed to load roster for team {team_id}: {e}")
            raise HTTPException(status_code=500, detail=f"Failed to load roster: {str(e)}")
        return result.data or []

    def get_player_stats(self, filters: MetricFilters, player_id: str) -> dict:
        player = self._get_player(filters.team_id, player_id)
        return player_stats(self._filtered_plays(filters), player)

    def get_position_stats(self, filters: MetricFilters, player_id: str, position: str) -> Optional[dict]:
        """One position section for a player; None when the player has no snaps it counts."""
        section = POSITION_SECTIONS.get(position)
        if section is None:
            raise HTTPException(status_code=404, detail=f"Unknown position section: {position}")
        player = self._get_player(filters.team_id, player_id)
        return section(self._filtered_plays(filters), player)

    def get_player_attribution(self, filters: MetricFilters) -> List[dict]:
        """Offensive stat lines for every active player who carried, threw or was targeted"""
        df = self._filtered_plays(filters)
        lines = []
        for player in self._active_players(filters.team_id):
            stats = player_stats(df, player)
            if stats["rushing"]["attempts"] or stats["passing"]["attempts"] or stats["receiving"]["targets"]:
                lines.append(stats)
        return lines

    def get_offensive_line_stats(self, filters: MetricFilters) -> List[dict]:
        df = self._filtered_plays(filters)
        return [
            block_stats(df, player)
            for player in self._active_players(filters.team_id)
            if (player.get("primary_position") or "").upper() in OFFENSIVE_LINE_POSITIONS
        ]

    def get_defensive_player_stats(self, filters: MetricFilters) -> List[dict]:
        """Each active defender's section for their roster spot; defenders with no snaps are left out"""
        df = self._filtered_plays(filters)
        lines = []
        for player in self._active_players(filters.team_id):
            section = DEFENSIVE_SECTIONS.get((player.get("primary_position") or "").upper())
            if section is None:
                continue
            stats = section(df, player)
            if stats is not None:
                lines.append(stats)
        return lines

    def get_situational_splits(self, filters: MetricFilters) -> List[dict]:
        return situational_splits(self._filtered_plays(filters))

    def get_defensive_down_breakdown(self, filters: MetricFilters) -> List[dict]:
        return defensive_down_breakdown(self._filtered_plays(filters))

    @staticmethod
    def get_definitions() -> List[MetricDefinition]:
        return [MetricDefinition(key=key, **value) for key, value in METRIC_DEFINITIONS.items()]
