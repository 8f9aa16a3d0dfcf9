"""
Comprehensive team metrics from a team's play rows.

Offense is the team's own run and pass plays, defense is the opponent's
plays, disruptive stats come from player participation on opponent plays,
special teams counts both sides, and starting field position comes from
offensive drives. Ratios are None when their denominator is zero.
"""

from decimal import Decimal
from typing import Dict, Iterable
import pandas as pd

from filmroom.modules.analytics.aggregation import (
    defense_block, defense_totals, drives_frame, game_filter_mask, kicking_totals, offense_block,
    offense_totals, plays_frame, ratio, round_half_up, special_teams_flat
)
from filmroom.modules.analytics.schemas import MetricFilters

TAKEAWAY_TYPES = ("interception", "fumble_recovery")
TFL_TYPES = ("tfl", "tackle_for_loss")


def filter_kwargs(filters: MetricFilters) -> dict:
    return {
        "game_ids": filters.game_ids,
        "game_id": filters.game_id,
        "start_date": filters.start_date,
        "end_date": filters.end_date,
        "opponent": filters.opponent,
    }


def disruptive_totals(participation: Iterable[dict], play_ids) -> Dict[str, int]:
    """Takeaways, sacks, TFLs, forced fumbles, interceptions and pass breakups credited on the given plays."""
    pp = pd.DataFrame(list(participation))
    for column in ("play_instance_id", "participation_type", "result"):
        if column not in pp.columns:
            pp[column] = None
    pp = pp[pp["play_instance_id"].isin(list(play_ids))]
    kind = pp["participation_type"]
    return {
        "takeaways": int(kind.isin(TAKEAWAY_TYPES).sum()),
        "sacks": int(((kind == "pressure") & (pp["result"] == "sack")).sum()),
        "tfls": int(kind.isin(TFL_TYPES).sum()),
        "forced_fumbles": int((kind == "forced_fumble").sum()),
        "interceptions": int((kind == "interception").sum()),
        "pass_breakups": int((kind == "pass_breakup").sum()),
    }


def special_teams_totals(df: pd.DataFrame) -> Dict[str, int]:
    """Our kicking plus returns on either side of the ball."""
    ours = df[~df["is_opponent_play"]]
    totals = kicking_totals(ours)
    returns = kicking_totals(df)
    for key in ("punt_returns", "punt_return_yards", "kickoff_returns", "kickoff_return_yards"):
        totals[key] = returns[key]
    kickoffs = ours["is_kickoff"]
    punts = ours["is_punt"]
    totals.update({
        "kickoffs": int(kickoffs.sum()),
        "touchbacks": int((kickoffs & ours["is_touchback"]).sum()),
        "punts": int(punts.sum()),
        "punt_yards": int(ours["kick_distance"][punts].sum()),
        "longest_return": int(df["return_yards"].max()) if not df.empty else 0,
        "fg_blocked": int((df["is_opponent_play"] & df["is_field_goal_attempt"]
                           & (df["kick_result"] == "blocked")).sum()),
    })
    return totals


def average_starting_field_position(drives: Iterable[dict], games: Iterable[dict], filters: MetricFilters):
    """Mean start yard line of offensive drives, or Decimal 0 when there are none."""
    df = drives_frame(drives, games)
    df = df[game_filter_mask(df, **filter_kwargs(filters)) & (df["possession_type"] == "offense")]
    starts = df["start_yard_line"].dropna()
    if starts.empty:
        return Decimal(0)
    return Decimal(str(starts.sum())) / Decimal(len(starts))


def compute_team_metrics(filters: MetricFilters, games: Iterable[dict], videos: Iterable[dict],
                         plays: Iterable[dict], participation: Iterable[dict], drives: Iterable[dict]) -> dict:
    games = list(games)
    df = plays_frame(plays, videos, games)
    df = df[game_filter_mask(df, **filter_kwargs(filters))]

    offense_plays = df[~df["is_opponent_play"] & df["play_type"].isin(["run", "pass"])]
    defense_plays = df[df["is_opponent_play"]]
    games_played = int(offense_plays["game_id"].dropna().nunique())

    offense = offense_totals(offense_plays)
    defense = defense_totals(defense_plays)
    disruptive = disruptive_totals(participation, defense_plays["id"])
    st = special_teams_totals(df)
    average_start = average_starting_field_position(drives, games, filters)

    returns = st["punt_returns"] + st["kickoff_returns"]
    return_yards = st["punt_return_yards"] + st["kickoff_return_yards"]
    special_teams = special_teams_flat(st, round_half_up(average_start, 1))
    special_teams.update({
        "kickoff": {
            "kickoffs": st["kickoffs"],
            "touchbacks": st["touchbacks"],
            "touchbackRate": ratio(st["touchbacks"], st["kickoffs"], 1, scale=100),
            "averageKickoffYardLine": float(average_start),
        },
        "punt": {
            "punts": st["punts"],
            "totalYards": st["punt_yards"],
            "averagePuntYards": ratio(st["punt_yards"], st["punts"], 1),
            "netPuntAverage": ratio(st["punt_yards"] - st["punt_return_yards"], st["punts"], 1),
        },
        "returns": {
            "returns": returns,
            "kickReturns": st["kickoff_returns"],
            "puntReturns": st["punt_returns"],
            "totalYards": return_yards,
            "averageReturnYards": ratio(return_yards, returns, 1),
            "longestReturn": st["longest_return"],
        },
        "fieldGoal": {
            "made": st["fg_made"],
            "attempted": st["fg_attempted"],
            "percentage": ratio(st["fg_made"], st["fg_attempted"], 1, scale=100),
            "blocked": 0,
        },
        "pat": {
            "made": st["xp_made"],
            "attempted": st["xp_attempted"],
            "percentage": ratio(st["xp_made"], st["xp_attempted"], 1, scale=100),
        },
        "fgBlock": {
            "blocks": st["fg_blocked"],
            "blocksRecovered": 0,
            "blocksReturnedForTD": 0,
        },
    })

    differential = disruptive["takeaways"] - offense["turnovers"]
    return {
        "filters": {
            "teamId": filters.team_id,
            "gameId": filters.game_id,
            "startDate": filters.start_date.isoformat() if filters.start_date else None,
            "endDate": filters.end_date.isoformat() if filters.end_date else None,
            "opponent": filters.opponent,
            "gamesPlayed": games_played,
        },
        "offense": offense_block(offense, games_played),
        "defense": defense_block(defense, disruptive, games_played),
        "specialTeams": special_teams,
        "overall": {
            "turnoverDifferential": differential,
            "turnoverMargin": differential,
            "gamesPlayed": games_played,
        },
    }
