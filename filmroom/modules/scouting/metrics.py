"""
Opponent metrics from scouting film, shaped like team metrics with the
roles swapped: the opponent's offense is the plays tagged as opponent
plays, its defense is what our plays gained against it.
"""

from typing import Dict, Iterable, Optional
import pandas as pd

from filmroom.modules.analytics.aggregation import (
    defense_block, defense_totals, kicking_totals, offense_block, offense_totals, plays_frame,
    special_teams_flat
)


def matches_opponent(game: dict, opponent_name: str) -> bool:
    """Case-insensitive substring match on the game's opponent or opponent team name."""
    needle = opponent_name.lower()
    for field in ("opponent", "opponent_team_name"):
        value = game.get(field)
        if value and needle in value.lower():
            return True
    return False


def estimated_disruptive(ours: pd.DataFrame) -> Dict[str, int]:
    """No participation rows exist for opponents; estimate from our plays' flags."""
    return {
        "takeaways": int(ours["is_turnover"].sum()),
        "sacks": int(ours["is_sack"].sum()),
        "tfls": int(ours["is_tfl"].sum()),
        "forced_fumbles": int((ours["is_fumble"] & ours["is_turnover"]).sum()),
        "interceptions": int(ours["is_interception"].sum()),
        "pass_breakups": 0,
    }


def empty_opponent_metrics(team_id: str, opponent_name: str) -> dict:
    return {
        "filters": {"teamId": team_id, "opponentName": opponent_name, "gamesAnalyzed": 0},
        "offense": {
            "volume": {"totalYardsPerGame": 0, "rushingYardsPerGame": 0, "passingYardsPerGame": 0,
                       "touchdowns": 0, "touchdownsPerGame": 0},
            "efficiency": {"yardsPerPlay": 0, "yardsPerCarry": 0, "yardsPerCompletion": 0,
                           "completionPercentage": 0, "thirdDownConversionRate": 0, "redZoneEfficiency": 0},
            "ballSecurity": {"turnovers": 0, "turnoversPerGame": 0, "fumbles": 0, "interceptions": 0},
            "possession": {"timeOfPossessionSeconds": 0, "timeOfPossessionPerGame": 0,
                           "timeOfPossessionFormatted": "00:00", "averagePlayDuration": 0},
        },
        "defense": {
            "volume": {"totalYardsAllowedPerGame": 0, "rushingYardsAllowedPerGame": 0,
                       "passingYardsAllowedPerGame": 0, "pointsAllowedPerGame": 0},
            "efficiency": {"yardsPerPlayAllowed": 0, "thirdDownStopPercentage": 0, "redZoneDefense": 0},
            "disruptive": {"takeaways": 0, "takeawaysPerGame": 0, "sacks": 0, "tacklesForLoss": 0, "havocRate": 0},
        },
        "specialTeams": {
            "fieldGoalPercentage": 0, "fieldGoalsMade": 0, "fieldGoalsAttempted": 0,
            "extraPointPercentage": 0, "extraPointsMade": 0, "extraPointsAttempted": 0,
            "puntReturnAverage": 0, "puntReturns": 0,
            "kickoffReturnAverage": 0, "kickoffReturns": 0,
        },
        "overall": {"turnoverDifferential": 0, "gamesAnalyzed": 0},
    }


def compute_opponent_metrics(team_id: str, opponent_name: str, games: Iterable[dict], videos: Iterable[dict],
                             plays: Iterable[dict], game_id: Optional[str] = None) -> dict:
    """
    games must already be limited to the ones played against the opponent.
    Touchdowns and points count the play flags only.
    """
    games = list(games)
    if not games:
        return empty_opponent_metrics(team_id, opponent_name)
    games_analyzed = len(games)
    game_ids = [g["id"] for g in games]

    df = plays_frame(plays, videos, games)
    df = df[df["game_id"].isin(game_ids)]
    theirs = df[df["is_opponent_play"]]
    ours = df[~df["is_opponent_play"]]

    offense = offense_totals(theirs, count_scoring_type=False)
    defense = defense_totals(ours, count_scoring_type=False)
    disruptive = estimated_disruptive(ours)
    kicking = kicking_totals(theirs)

    differential = disruptive["takeaways"] - offense["turnovers"]
    return {
        "filters": {
            "teamId": team_id,
            "opponentName": opponent_name,
            "gameId": game_id,
            "gamesAnalyzed": games_analyzed,
        },
        "offense": offense_block(offense, games_analyzed),
        "defense": defense_block(defense, disruptive, games_analyzed, floor_fumble_recoveries=True),
        "specialTeams": special_teams_flat(kicking, 0),
        "overall": {
            "turnoverDifferential": differential,
            "turnoverMargin": differential,
            "gamesAnalyzed": games_analyzed,
        },
    }
