"""
Play-row aggregation shared by team and opponent metrics.

Rows come straight from Supabase as dicts. They are loaded into pandas
frames with the game each play belongs to attached (through its video),
then counted and summed. The team totals return plain dicts of ints and
leave rounding to the block builders; the player and position sections
further down round their own ratios.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Iterable, List, Optional
import numpy as np
import pandas as pd

RED_ZONE_YARD_LINE = 80

PLAY_BOOL_COLUMNS = (
    "is_opponent_play", "is_complete", "is_touchdown", "resulted_in_first_down",
    "is_turnover", "is_fumble", "is_interception", "is_sack", "is_tfl",
    "is_field_goal_attempt", "is_field_goal_made", "is_extra_point_attempt",
    "is_extra_point_made", "is_two_point_made", "is_safety",
    "is_kickoff", "is_touchback", "is_punt", "is_punt_return", "is_kickoff_return",
    "is_forced_fumble", "is_pbu", "drop", "has_motion", "is_play_action", "facing_blitz",
)
PLAY_SUM_COLUMNS = ("yards_gained", "play_duration_seconds", "return_yards", "kick_distance")
PLAY_NULLABLE_NUMERIC_COLUMNS = ("down", "distance", "yard_line", "quarter")
PLAY_TEXT_COLUMNS = ("id", "video_id", "play_type", "scoring_type", "kick_result", "formation")
OFFENSIVE_LINE_POSITIONS = ("lt", "lg", "c", "rg", "rt")
PLAY_ATTRIBUTION_COLUMNS = (
    "result", "play_code", "qb_id", "ball_carrier_id", "target_id", "sack_player_id",
    "coverage_player_id", "coverage_result", "ol_penalty_player_id",
) + tuple(f"{pos}_{suffix}" for pos in OFFENSIVE_LINE_POSITIONS for suffix in ("id", "block_result"))
PLAY_LIST_COLUMNS = ("tackler_ids", "missed_tackle_ids", "pressure_player_ids")

# Scoring value by play, first match wins
SCORING_VALUES = (
    ("is_touchdown", "touchdown", 6),
    ("is_field_goal_made", "field_goal", 3),
    ("is_safety", "safety", 2),
    ("is_two_point_made", "two_point_conversion", 2),
    ("is_extra_point_made", "extra_point", 1),
)


def round_half_up(value, places: int):
    """Round like Postgres NUMERIC: halves go away from zero."""
    quantum = Decimal(1).scaleb(-places)
    rounded = Decimal(value).quantize(quantum, rounding=ROUND_HALF_UP)
    if places == 0:
        return int(rounded)
    return float(rounded)


def ratio(numerator, denominator, places: int, scale: int = 1):
    """numerator * scale / denominator rounded to places; None when the denominator is zero."""
    if not denominator:
        return None
    value = Decimal(str(numerator)) * scale / Decimal(str(denominator))
    return round_half_up(value, places)


def format_time_of_possession(seconds) -> str:
    minutes, secs = divmod(int(seconds or 0), 60)
    return f"{minutes:02d}:{secs:02d}"


def attach_games(df: pd.DataFrame, games: Iterable[dict]) -> pd.DataFrame:
    """Add game_date and game_opponent columns from df.game_id."""
    dates = {}
    opponents = {}
    for game in games:
        dates[game["id"]] = game.get("date")
        opponents[game["id"]] = game.get("opponent")
    df["game_date"] = pd.to_datetime(df["game_id"].map(dates), errors="coerce")
    df["game_opponent"] = df["game_id"].map(opponents)
    return df


def plays_frame(plays: Iterable[dict], videos: Iterable[dict], games: Iterable[dict]) -> pd.DataFrame:
    """Normalize play rows into a frame with game columns attached."""
    df = pd.DataFrame(list(plays))
    for column in (PLAY_TEXT_COLUMNS + PLAY_ATTRIBUTION_COLUMNS + PLAY_LIST_COLUMNS + PLAY_BOOL_COLUMNS
                   + PLAY_SUM_COLUMNS + PLAY_NULLABLE_NUMERIC_COLUMNS):
        if column not in df.columns:
            df[column] = None
    for column in PLAY_LIST_COLUMNS:
        df[column] = df[column].map(lambda ids: ids if isinstance(ids, list) else []).astype(object)
    for column in PLAY_BOOL_COLUMNS:
        df[column] = df[column].eq(True)
    for column in PLAY_SUM_COLUMNS:
        df[column] = pd.to_numeric(df[column], errors="coerce").fillna(0)
    for column in PLAY_NULLABLE_NUMERIC_COLUMNS:
        df[column] = pd.to_numeric(df[column], errors="coerce")

    video_games = {v["id"]: v.get("game_id") for v in videos}
    df["game_id"] = df["video_id"].map(video_games)
    return attach_games(df, games)


def drives_frame(drives: Iterable[dict], games: Iterable[dict]) -> pd.DataFrame:
    df = pd.DataFrame(list(drives))
    for column in ("game_id", "possession_type", "start_yard_line"):
        if column not in df.columns:
            df[column] = None
    df["start_yard_line"] = pd.to_numeric(df["start_yard_line"], errors="coerce")
    return attach_games(df, games)


def game_filter_mask(df: pd.DataFrame, game_ids: Optional[List[str]] = None, game_id: Optional[str] = None,
                     start_date=None, end_date=None, opponent: Optional[str] = None) -> pd.Series:
    """
    Rows matching the game filters. game_ids wins over game_id, which wins
    over the start date; the end date is ignored when game_ids is given.
    Rows without a game fail every date or opponent condition.
    """
    mask = pd.Series(True, index=df.index)
    if game_ids:
        mask &= df["game_id"].isin(game_ids)
    elif game_id:
        mask &= df["game_id"] == game_id
    elif start_date:
        mask &= df["game_date"] >= pd.Timestamp(start_date)
    if not game_ids and end_date:
        mask &= df["game_date"] <= pd.Timestamp(end_date)
    if opponent:
        mask &= df["game_opponent"] == opponent
    return mask


def touchdown_mask(df: pd.DataFrame, count_scoring_type: bool = True) -> pd.Series:
    touchdown = df["is_touchdown"]
    if count_scoring_type:
        touchdown = touchdown | (df["scoring_type"] == "touchdown")
    return touchdown


def scoring_points(df: pd.DataFrame, count_scoring_type: bool = True) -> int:
    if df.empty:
        return 0
    conditions = []
    values = []
    for flag, scoring_type, value in SCORING_VALUES:
        condition = df[flag]
        if count_scoring_type:
            condition = condition | (df["scoring_type"] == scoring_type)
        conditions.append(condition.to_numpy())
        values.append(value)
    return int(np.select(conditions, values, default=0).sum())


def offense_totals(df: pd.DataFrame, count_scoring_type: bool = True) -> Dict[str, int]:
    """Volume, efficiency, ball security and possession counts for the side with the ball."""
    run = df["play_type"] == "run"
    passes = df["play_type"] == "pass"
    complete = passes & df["is_complete"]
    touchdown = touchdown_mask(df, count_scoring_type)
    third_down = df["down"] == 3
    red_zone = df["yard_line"] >= RED_ZONE_YARD_LINE
    yards = df["yards_gained"]
    return {
        "total_yards": int(yards.sum()),
        "rushing_yards": int(yards[run].sum()),
        "passing_yards": int(yards[complete].sum()),
        "touchdowns": int(touchdown.sum()),
        "total_plays": int(len(df)),
        "rushing_attempts": int(run.sum()),
        "completions": int(complete.sum()),
        "pass_attempts": int(passes.sum()),
        "third_down_attempts": int(third_down.sum()),
        "third_down_conversions": int((third_down & df["resulted_in_first_down"]).sum()),
        "red_zone_attempts": int(red_zone.sum()),
        "red_zone_touchdowns": int((red_zone & touchdown).sum()),
        "turnovers": int(df["is_turnover"].sum()),
        "fumbles": int((df["is_fumble"] & df["is_turnover"]).sum()),
        "interceptions": int(df["is_interception"].sum()),
        "top_seconds": round_half_up(Decimal(str(df["play_duration_seconds"].sum())), 0),
    }


def defense_totals(df: pd.DataFrame, count_scoring_type: bool = True) -> Dict[str, int]:
    """What the side without the ball gave up."""
    touchdown = touchdown_mask(df, count_scoring_type)
    third_down = df["down"] == 3
    red_zone = df["yard_line"] >= RED_ZONE_YARD_LINE
    complete = (df["play_type"] == "pass") & df["is_complete"]
    yards = df["yards_gained"]
    return {
        "plays": int(len(df)),
        "yards_allowed": int(yards.sum()),
        "rushing_yards_allowed": int(yards[df["play_type"] == "run"].sum()),
        "passing_yards_allowed": int(yards[complete].sum()),
        "points_allowed": scoring_points(df, count_scoring_type),
        "third_down_attempts": int(third_down.sum()),
        "third_down_conversions": int((third_down & df["resulted_in_first_down"]).sum()),
        "red_zone_attempts": int(red_zone.sum()),
        "red_zone_touchdowns": int((red_zone & touchdown).sum()),
    }


def offense_block(t: Dict[str, int], games: int) -> dict:
    return {
        "volume": {
            "totalYardsPerGame": ratio(t["total_yards"], games, 1),
            "rushingYardsPerGame": ratio(t["rushing_yards"], games, 1),
            "passingYardsPerGame": ratio(t["passing_yards"], games, 1),
            "touchdowns": t["touchdowns"],
            "touchdownsPerGame": ratio(t["touchdowns"], games, 2),
            "totalYards": t["total_yards"],
            "rushingYards": t["rushing_yards"],
            "passingYards": t["passing_yards"],
        },
        "efficiency": {
            "yardsPerPlay": ratio(t["total_yards"], t["total_plays"], 2),
            "yardsPerCarry": ratio(t["rushing_yards"], t["rushing_attempts"], 2),
            "yardsPerCompletion": ratio(t["passing_yards"], t["completions"], 2),
            "completionPercentage": ratio(t["completions"], t["pass_attempts"], 1, scale=100),
            "thirdDownConversionRate": ratio(t["third_down_conversions"], t["third_down_attempts"], 1, scale=100),
            "redZoneEfficiency": ratio(t["red_zone_touchdowns"], t["red_zone_attempts"], 1, scale=100),
            "redZoneAttempts": t["red_zone_attempts"],
            "redZoneTouchdowns": t["red_zone_touchdowns"],
            "totalPlays": t["total_plays"],
            "thirdDownAttempts": t["third_down_attempts"],
            "thirdDownConversions": t["third_down_conversions"],
        },
        "ballSecurity": {
            "turnovers": t["turnovers"],
            "turnoversPerGame": ratio(t["turnovers"], games, 2),
            "fumbles": t["fumbles"],
            "interceptions": t["interceptions"],
        },
        "possession": {
            "timeOfPossessionSeconds": t["top_seconds"],
            "timeOfPossessionPerGame": ratio(t["top_seconds"], games, 0),
            "timeOfPossessionFormatted": format_time_of_possession(t["top_seconds"]),
            "averagePlayDuration": ratio(t["top_seconds"], t["total_plays"], 1),
        },
    }


def defense_block(d: Dict[str, int], disruptive: Dict[str, int], games: int,
                  floor_fumble_recoveries: bool = False) -> dict:
    stops = d["third_down_attempts"] - d["third_down_conversions"]
    fumble_recoveries = disruptive["takeaways"] - disruptive["interceptions"]
    if floor_fumble_recoveries:
        fumble_recoveries = max(fumble_recoveries, 0)
    havoc = disruptive["sacks"] + disruptive["tfls"] + disruptive["forced_fumbles"] + disruptive["pass_breakups"]
    return {
        "volume": {
            "totalYardsAllowedPerGame": ratio(d["yards_allowed"], games, 1),
            "rushingYardsAllowedPerGame": ratio(d["rushing_yards_allowed"], games, 1),
            "passingYardsAllowedPerGame": ratio(d["passing_yards_allowed"], games, 1),
            "pointsAllowedPerGame": ratio(d["points_allowed"], games, 1),
            "totalYardsAllowed": d["yards_allowed"],
            "rushingYardsAllowed": d["rushing_yards_allowed"],
            "passingYardsAllowed": d["passing_yards_allowed"],
            "pointsAllowed": d["points_allowed"],
        },
        "efficiency": {
            "yardsPerPlayAllowed": ratio(d["yards_allowed"], d["plays"], 2),
            "thirdDownStopPercentage": ratio(stops, d["third_down_attempts"], 1, scale=100),
            "redZoneDefense": ratio(d["red_zone_touchdowns"], d["red_zone_attempts"], 1, scale=100),
            "redZoneAttemptsFaced": d["red_zone_attempts"],
            "redZoneTouchdownsAllowed": d["red_zone_touchdowns"],
            "opponentThirdDownAttempts": d["third_down_attempts"],
            "opponentThirdDownStops": stops,
        },
        "disruptive": {
            "takeaways": disruptive["takeaways"],
            "takeawaysPerGame": ratio(disruptive["takeaways"], games, 2),
            "interceptions": disruptive["interceptions"],
            "fumbleRecoveries": fumble_recoveries,
            "sacks": disruptive["sacks"],
            "tacklesForLoss": disruptive["tfls"],
            "forcedFumbles": disruptive["forced_fumbles"],
            "passBreakups": disruptive["pass_breakups"],
            "havocRate": ratio(havoc, d["plays"], 1, scale=100),
        },
    }


def kicking_totals(df: pd.DataFrame) -> Dict[str, int]:
    """Field goal, extra point and return counts over the given plays."""
    return_yards = df["return_yards"]
    return {
        "fg_made": int(df["is_field_goal_made"].sum()),
        "fg_attempted": int(df["is_field_goal_attempt"].sum()),
        "xp_made": int(df["is_extra_point_made"].sum()),
        "xp_attempted": int(df["is_extra_point_attempt"].sum()),
        "punt_returns": int(df["is_punt_return"].sum()),
        "punt_return_yards": int(return_yards[df["is_punt_return"]].sum()),
        "kickoff_returns": int(df["is_kickoff_return"].sum()),
        "kickoff_return_yards": int(return_yards[df["is_kickoff_return"]].sum()),
    }


def special_teams_flat(k: Dict[str, int], average_start) -> dict:
    return {
        "fieldGoalPercentage": ratio(k["fg_made"], k["fg_attempted"], 1, scale=100),
        "fieldGoalsMade": k["fg_made"],
        "fieldGoalsAttempted": k["fg_attempted"],
        "extraPointPercentage": ratio(k["xp_made"], k["xp_attempted"], 1, scale=100),
        "extraPointsMade": k["xp_made"],
        "extraPointsAttempted": k["xp_attempted"],
        "puntReturnAverage": ratio(k["punt_return_yards"], k["punt_returns"], 1),
        "puntReturns": k["punt_returns"],
        "puntReturnYards": k["punt_return_yards"],
        "kickoffReturnAverage": ratio(k["kickoff_return_yards"], k["kickoff_returns"], 1),
        "kickoffReturns": k["kickoff_returns"],
        "kickoffReturnYards": k["kickoff_return_yards"],
        "averageStartingFieldPosition": average_start,
    }


# ---------------------------------------------------------------------------
# Player and position stat sections
# ---------------------------------------------------------------------------

EXPLOSIVE_RUN_YARDS = 10
EXPLOSIVE_PASS_YARDS = 15
DOWN_KEYS = ((1, "firstDown"), (2, "secondDown"), (3, "thirdDown"), (4, "fourthDown"))
TOP_PLAY_MIN_ATTEMPTS = 2
TOP_PLAY_LIMIT = 5
SITUATIONS = (
    ("has_motion", "With Motion"),
    ("is_play_action", "Play Action"),
    ("facing_blitz", "vs Blitz"),
)


def success_mask(df: pd.DataFrame) -> pd.Series:
    """
    Offensive success: 40% of the distance on first down, 60% on second,
    all of it on third and fourth. A first down always counts; plays
    without a down or distance never do.
    """
    down = df["down"]
    distance = df["distance"]
    needed = pd.Series(
        np.select([down == 1, down == 2, down.isin([3, 4])], [distance * 0.4, distance * 0.6, distance],
                  default=np.nan),
        index=df.index,
    )
    has_situation = down.notna() & distance.notna() & (distance != 0)
    return df["resulted_in_first_down"] | (has_situation & (df["yards_gained"] >= needed))


def defensive_success_mask(df: pd.DataFrame) -> pd.Series:
    """The offense fell short of the success line; a missing distance counts as 10."""
    down = df["down"]
    distance = df["distance"].fillna(10).replace(0, 10)
    needed = np.select([down == 1, down == 2], [distance * 0.4, distance * 0.6], default=distance)
    return pd.Series(df["yards_gained"].to_numpy() < needed, index=df.index)


def result_has(df: pd.DataFrame, word: str) -> pd.Series:
    return df["result"].fillna("").astype(str).str.contains(word, regex=False)


def caught_mask(df: pd.DataFrame) -> pd.Series:
    """Completed passes and touchdowns; pass_incomplete is not a catch."""
    complete = result_has(df, "complete") & ~result_has(df, "incomplete")
    return complete | result_has(df, "touchdown")


def involves(df: pd.DataFrame, column: str, player_id: str) -> pd.Series:
    return df[column].map(lambda ids: player_id in ids).astype(bool)


def explosive_mask(df: pd.DataFrame) -> pd.Series:
    yards = df["yards_gained"]
    return ((df["play_type"] == "run") & (yards >= EXPLOSIVE_RUN_YARDS)) | \
        ((df["play_type"] == "pass") & (yards >= EXPLOSIVE_PASS_YARDS))


def player_header(player: dict) -> dict:
    return {
        "playerId": player.get("id"),
        "playerName": f"{player.get('first_name', '')} {player.get('last_name', '')}".strip(),
        "jerseyNumber": player.get("jersey_number") or "",
        "position": player.get("primary_position") or player.get("position") or "",
    }


def _count(mask: pd.Series) -> int:
    return int(mask.sum())


def _yards(df: pd.DataFrame, mask: Optional[pd.Series] = None) -> int:
    yards = df["yards_gained"] if mask is None else df["yards_gained"][mask]
    return int(yards.sum())


def _tackles(plays: pd.DataFrame, player_id: str) -> Dict[str, int]:
    tackled = involves(plays, "tackler_ids", player_id)
    primary = plays["tackler_ids"].map(lambda ids: bool(ids) and ids[0] == player_id).astype(bool)
    return {
        "primary": _count(primary),
        "assist": _count(tackled & ~primary),
        "missed": _count(involves(plays, "missed_tackle_ids", player_id)),
    }


def _top_plays(plays: pd.DataFrame, success: pd.Series) -> List[dict]:
    coded = plays.assign(success=success)
    coded = coded[coded["play_code"].notna()]
    if coded.empty:
        return []
    grouped = coded.groupby("play_code").agg(
        attempts=("success", "size"),
        successes=("success", "sum"),
        total_yards=("yards_gained", "sum"),
    )
    grouped = grouped[grouped["attempts"] >= TOP_PLAY_MIN_ATTEMPTS]
    rows = [
        {
            "playCode": code,
            "attempts": int(row["attempts"]),
            "successRate": ratio(int(row["successes"]), int(row["attempts"]), 1, scale=100),
            "avgYards": ratio(int(row["total_yards"]), int(row["attempts"]), 1),
        }
        for code, row in grouped.iterrows()
    ]
    rows.sort(key=lambda r: r["successRate"], reverse=True)
    return rows[:TOP_PLAY_LIMIT]


def player_stats(df: pd.DataFrame, player: dict) -> dict:
    """Every offensive snap where the player threw, carried or was targeted."""
    player_id = player["id"]
    offense = df[~df["is_opponent_play"]]
    carried = offense["ball_carrier_id"] == player_id
    threw = (offense["qb_id"] == player_id) & (offense["play_type"] == "pass")
    targeted = offense["target_id"] == player_id
    plays = offense[carried | (offense["qb_id"] == player_id) | targeted]
    success = success_mask(plays)

    rushing = offense[carried]
    rush_tds = result_has(rushing, "touchdown") | (rushing["yard_line"] >= 100)

    passing = offense[threw]
    completed = (result_has(passing, "complete") & ~result_has(passing, "incomplete")) | \
        (result_has(passing, "touchdown") & passing["target_id"].notna())
    intercepted = result_has(passing, "interception") | passing["is_interception"]

    receiving = offense[targeted]
    caught = caught_mask(receiving)
    dropped = receiving["drop"] | (result_has(receiving, "incomplete") & ~result_has(receiving, "defended"))

    yards_by_down = {}
    for down, key in DOWN_KEYS:
        on_down = plays[plays["down"] == down]
        yards_by_down[key] = {
            "attempts": int(len(on_down)),
            "totalYards": _yards(on_down),
            "avgYards": ratio(_yards(on_down), len(on_down), 1),
        }

    rush_yards = _yards(rushing)
    receiving_yards = _yards(receiving, caught)
    return {
        "player": player_header(player),
        "totalPlays": int(len(plays)),
        "successRate": ratio(_count(success), len(plays), 1, scale=100),
        "rushing": {
            "attempts": int(len(rushing)),
            "yards": rush_yards,
            "average": ratio(rush_yards, len(rushing), 1),
            "touchdowns": _count(rush_tds),
            "fumbles": _count(rushing["is_turnover"]),
        },
        "passing": {
            "attempts": int(len(passing)),
            "completions": _count(completed),
            "completionPct": ratio(_count(completed), len(passing), 1, scale=100),
            "yards": _yards(passing, completed),
            "touchdowns": _count(result_has(passing, "touchdown") & passing["target_id"].notna()),
            "interceptions": _count(intercepted),
            "fumbles": _count(passing["is_turnover"] & ~intercepted),
        },
        "receiving": {
            "targets": int(len(receiving)),
            "receptions": _count(caught),
            "yards": receiving_yards,
            "average": ratio(receiving_yards, _count(caught), 1),
            "touchdowns": _count(result_has(receiving, "touchdown")),
            "drops": _count(dropped),
            "fumbles": _count(receiving["is_turnover"]),
        },
        "yardsByDown": yards_by_down,
        "topPlays": _top_plays(plays, success),
    }


def qb_stats(df: pd.DataFrame, player: dict) -> Optional[dict]:
    player_id = player["id"]
    offense = df[~df["is_opponent_play"]]
    plays = offense[offense["qb_id"] == player_id]
    if plays.empty:
        return None
    passes = plays[plays["play_type"] == "pass"]
    completed = caught_mask(passes)
    touchdown = result_has(passes, "touchdown")
    rushes = plays[(plays["ball_carrier_id"] == player_id) & (plays["play_type"] == "run")]

    third_down = passes["down"] == 3
    converted = third_down & (passes["resulted_in_first_down"] | touchdown)
    red_zone = passes["yard_line"] >= RED_ZONE_YARD_LINE
    pressured = passes["facing_blitz"] | passes["is_sack"]

    attempts = len(passes)
    pass_yards = _yards(passes)
    rush_yards = _yards(rushes)
    return {
        **player_header(player),
        "dropbacks": attempts,
        "attempts": attempts,
        "completions": _count(completed),
        "completionPct": ratio(_count(completed), attempts, 1, scale=100),
        "passYards": pass_yards,
        "yardsPerAttempt": ratio(pass_yards, attempts, 1),
        "passTDs": _count(touchdown),
        "interceptions": _count(result_has(passes, "interception") | passes["is_interception"]),
        "sacks": _count(passes["is_sack"]),
        "rushAttempts": int(len(rushes)),
        "rushYards": rush_yards,
        "rushAvg": ratio(rush_yards, len(rushes), 1),
        "rushTDs": _count(result_has(rushes, "touchdown")),
        "thirdDownAttempts": _count(third_down),
        "thirdDownConversions": _count(converted),
        "thirdDownPct": ratio(_count(converted), _count(third_down), 1, scale=100),
        "redZoneAttempts": _count(red_zone),
        "redZoneTDs": _count(red_zone & touchdown),
        "redZoneTDPct": ratio(_count(red_zone & touchdown), _count(red_zone), 1, scale=100),
        "pressuredDropbacks": _count(pressured),
        "completionsUnderPressure": _count(pressured & completed),
        "pressureCompletionPct": ratio(_count(pressured & completed), _count(pressured), 1, scale=100),
    }


def rb_stats(df: pd.DataFrame, player: dict) -> Optional[dict]:
    player_id = player["id"]
    offense = df[~df["is_opponent_play"]]
    plays = offense[(offense["ball_carrier_id"] == player_id) | (offense["target_id"] == player_id)]
    if plays.empty:
        return None
    rushes = plays[(plays["ball_carrier_id"] == player_id) & (plays["play_type"] == "run")]
    targets = plays[plays["target_id"] == player_id]
    caught = caught_mask(targets)

    carries = len(rushes)
    rush_yards = _yards(rushes)
    rush_tds = _count(result_has(rushes, "touchdown"))
    successes = _count(success_mask(rushes))
    explosive = _count(rushes["yards_gained"] >= EXPLOSIVE_RUN_YARDS)
    receptions = _count(caught)
    rec_yards = _yards(targets, caught)
    rec_tds = _count(result_has(targets, "touchdown"))
    third_down = rushes["down"] == 3
    converted = third_down & (rushes["resulted_in_first_down"] | result_has(rushes, "touchdown"))
    touches = carries + receptions
    return {
        **player_header(player),
        "carries": carries,
        "rushYards": rush_yards,
        "rushAvg": ratio(rush_yards, carries, 1),
        "rushTDs": rush_tds,
        "rushSuccess": successes,
        "rushSuccessRate": ratio(successes, carries, 1, scale=100),
        "explosiveRuns": explosive,
        "explosiveRate": ratio(explosive, carries, 1, scale=100),
        "targets": int(len(targets)),
        "receptions": receptions,
        "recYards": rec_yards,
        "recAvg": ratio(rec_yards, receptions, 1),
        "recTDs": rec_tds,
        "catchRate": ratio(receptions, len(targets), 1, scale=100),
        "totalTouches": touches,
        "totalYards": rush_yards + rec_yards,
        "totalTDs": rush_tds + rec_tds,
        "yardsPerTouch": ratio(rush_yards + rec_yards, touches, 1),
        "thirdDownRushes": _count(third_down),
        "thirdDownConversions": _count(converted),
        "thirdDownPct": ratio(_count(converted), _count(third_down), 1, scale=100),
    }


def wr_te_stats(df: pd.DataFrame, player: dict) -> Optional[dict]:
    player_id = player["id"]
    offense = df[~df["is_opponent_play"]]
    plays = offense[offense["target_id"] == player_id]
    if plays.empty:
        return None
    caught = caught_mask(plays)
    touchdown = result_has(plays, "touchdown")
    explosive = caught & (plays["yards_gained"] >= EXPLOSIVE_PASS_YARDS)
    # Sacks, throwaways and batted balls never reached the receiver
    catchable = ~plays["is_sack"] & ~result_has(plays, "throwaway") & ~result_has(plays, "batted")
    drops = catchable & ~caught
    third_down = plays["down"] == 3
    converted = third_down & caught & (plays["resulted_in_first_down"] | touchdown)
    red_zone = plays["yard_line"] >= RED_ZONE_YARD_LINE

    targets = len(plays)
    receptions = _count(caught)
    rec_yards = _yards(plays, caught)
    return {
        **player_header(player),
        "targets": targets,
        "receptions": receptions,
        "recYards": rec_yards,
        "recAvg": ratio(rec_yards, receptions, 1),
        "yardsPerTarget": ratio(rec_yards, targets, 1),
        "recTDs": _count(touchdown),
        "catchRate": ratio(receptions, targets, 1, scale=100),
        "explosiveCatches": _count(explosive),
        "explosiveRate": ratio(_count(explosive), receptions, 1, scale=100),
        "drops": _count(drops),
        "dropRate": ratio(_count(drops), _count(catchable), 1, scale=100),
        "thirdDownTargets": _count(third_down),
        "thirdDownConversions": _count(converted),
        "thirdDownPct": ratio(_count(converted), _count(third_down), 1, scale=100),
        "redZoneTargets": _count(red_zone),
        "redZoneTDs": _count(red_zone & touchdown),
        "redZoneTDPct": ratio(_count(red_zone & touchdown), _count(red_zone), 1, scale=100),
    }


def block_stats(df: pd.DataFrame, player: dict, penalties: Optional[int] = None) -> dict:
    """Block grades summed over every line spot the player lined up at."""
    player_id = player["id"]
    counts = {"assignments": 0, "win": 0, "loss": 0, "neutral": 0}
    for pos in OFFENSIVE_LINE_POSITIONS:
        results = df.loc[df[f"{pos}_id"] == player_id, f"{pos}_block_result"]
        counts["assignments"] += int(len(results))
        for grade in ("win", "loss", "neutral"):
            counts[grade] += _count(results == grade)
    if penalties is None:
        penalties = _count(df["ol_penalty_player_id"] == player_id)
    return {
        **player_header(player),
        "totalAssignments": counts["assignments"],
        "blockWins": counts["win"],
        "blockLosses": counts["loss"],
        "blockNeutral": counts["neutral"],
        "blockWinRate": ratio(counts["win"], counts["assignments"], 1, scale=100),
        "penalties": penalties,
    }


def _tackle_block(tackles: Dict[str, int], snaps: int) -> dict:
    total = tackles["primary"] + tackles["assist"]
    return {
        "defensiveSnaps": snaps,
        "primaryTackles": tackles["primary"],
        "assistTackles": tackles["assist"],
        "totalTackles": total,
        "missedTackles": tackles["missed"],
        "tackleParticipation": ratio(total, snaps, 1, scale=100),
    }


def dl_stats(df: pd.DataFrame, player: dict) -> Optional[dict]:
    player_id = player["id"]
    snaps = df[df["is_opponent_play"]]
    if snaps.empty:
        return None
    tackled = involves(snaps, "tackler_ids", player_id)
    pressured = involves(snaps, "pressure_player_ids", player_id)
    sacked = snaps["sack_player_id"] == player_id
    involved = tackled | involves(snaps, "missed_tackle_ids", player_id) | pressured | sacked
    if not involved.any():
        return None
    tackles = _tackles(snaps[involved], player_id)
    attempts = tackles["primary"] + tackles["assist"] + tackles["missed"]

    passes = snaps["play_type"] == "pass"
    runs = snaps["play_type"] == "run"
    pressures = _count(passes & pressured)
    sacks = _count(passes & sacked)
    run_stops = _count(runs & tackled & ~success_mask(snaps))
    tfls = _count(snaps["is_tfl"] & tackled)
    forced_fumbles = _count(snaps["is_forced_fumble"] & tackled)
    havoc = tfls + sacks + forced_fumbles
    return {
        **player_header(player),
        **_tackle_block(tackles, len(snaps)),
        "missedTackleRate": ratio(tackles["missed"], attempts, 1, scale=100),
        "passRushSnaps": _count(passes),
        "pressures": pressures,
        "sacks": sacks,
        "pressureRate": ratio(pressures, _count(passes), 1, scale=100),
        "sackRate": ratio(sacks, _count(passes), 1, scale=100),
        "runDefenseSnaps": _count(runs),
        "runStops": run_stops,
        "runStopRate": ratio(run_stops, _count(runs), 1, scale=100),
        "tfls": tfls,
        "forcedFumbles": forced_fumbles,
        "havocPlays": havoc,
        "havocRate": ratio(havoc, len(snaps), 1, scale=100),
    }


def lb_stats(df: pd.DataFrame, player: dict) -> Optional[dict]:
    player_id = player["id"]
    snaps = df[df["is_opponent_play"]]
    if snaps.empty:
        return None
    tackled = involves(snaps, "tackler_ids", player_id)
    pressured = involves(snaps, "pressure_player_ids", player_id)
    covered = snaps["coverage_player_id"] == player_id
    involved = tackled | involves(snaps, "missed_tackle_ids", player_id) | covered | pressured
    if not involved.any():
        return None
    tackles = _tackles(snaps[involved], player_id)

    coverage_wins = _count(covered & (snaps["coverage_result"] == "win"))
    passes = snaps["play_type"] == "pass"
    blitzes = passes & pressured
    sacks = _count(blitzes & (snaps["sack_player_id"] == player_id))
    tfls = _count(snaps["is_tfl"] & tackled)
    forced_fumbles = _count(snaps["is_forced_fumble"] & tackled)
    interceptions = _count(snaps["is_interception"] & covered)
    pbus = _count(snaps["is_pbu"] & covered)
    havoc = tfls + forced_fumbles + interceptions + pbus + sacks
    return {
        **player_header(player),
        **_tackle_block(tackles, len(snaps)),
        "coverageSnaps": _count(covered),
        "coverageWins": coverage_wins,
        "coverageSuccessRate": ratio(coverage_wins, _count(covered), 1, scale=100),
        "passDefenseSnaps": _count(passes),
        "pressures": _count(blitzes),
        "sacks": sacks,
        "pressureRate": ratio(_count(blitzes), _count(passes), 1, scale=100),
        "tfls": tfls,
        "forcedFumbles": forced_fumbles,
        "interceptions": interceptions,
        "pbus": pbus,
        "havocPlays": havoc,
        "havocRate": ratio(havoc, len(snaps), 1, scale=100),
    }


def db_stats(df: pd.DataFrame, player: dict) -> Optional[dict]:
    player_id = player["id"]
    snaps = df[df["is_opponent_play"]]
    if snaps.empty:
        return None
    covered = snaps["coverage_player_id"] == player_id
    involved = involves(snaps, "tackler_ids", player_id) | covered
    if not involved.any():
        return None
    tackles = _tackles(snaps[involved], player_id)

    targets = snaps[covered & (snaps["play_type"] == "pass")]
    won = targets["coverage_result"] == "win"
    caught = caught_mask(targets)
    yards_allowed = _yards(targets, caught)
    interceptions = _count(snaps["is_interception"] & covered)
    pbus = _count(snaps["is_pbu"] & covered)
    return {
        **player_header(player),
        **_tackle_block(tackles, len(snaps)),
        "coverageSnaps": _count(covered),
        "targets": int(len(targets)),
        "completionsAllowed": _count(caught & ~won),
        "yardsAllowed": yards_allowed,
        "yardsAllowedPerTarget": ratio(yards_allowed, len(targets), 1),
        "coverageWins": _count(won),
        "coverageSuccessRate": ratio(_count(won), len(targets), 1, scale=100),
        "interceptions": interceptions,
        "pbus": pbus,
        "ballProduction": interceptions + pbus,
        "ballProductionRate": ratio(interceptions + pbus, len(snaps), 1, scale=100),
    }


def situational_splits(df: pd.DataFrame) -> List[dict]:
    """Our offense with motion, with play action and against the blitz."""
    offense = df[~df["is_opponent_play"]]
    splits = []
    for flag, label in SITUATIONS:
        plays = offense[offense[flag]]
        yards = _yards(plays)
        splits.append({
            "situation": label,
            "plays": int(len(plays)),
            "yards": yards,
            "yardsPerPlay": ratio(yards, len(plays), 1),
            "successRate": ratio(_count(success_mask(plays)), len(plays), 1, scale=100),
            "explosiveRate": ratio(_count(explosive_mask(plays)), len(plays), 1, scale=100),
        })
    return splits


def defensive_down_breakdown(df: pd.DataFrame) -> List[dict]:
    """Opponent snaps by down; downs with no snaps are left out."""
    opponent = df[df["is_opponent_play"]]
    breakdown = []
    for down, _ in DOWN_KEYS:
        plays = opponent[opponent["down"] == down]
        if plays.empty:
            continue
        snaps = len(plays)
        yards = _yards(plays)
        turnovers = _count(plays["is_turnover"])
        breakdown.append({
            "down": down,
            "plays": snaps,
            "yardsAllowed": yards,
            "yardsAllowedPerPlay": ratio(yards, snaps, 1),
            "defensiveSuccessRate": ratio(_count(defensive_success_mask(plays)), snaps, 1, scale=100),
            "stopRate": ratio(_count(~plays["resulted_in_first_down"]), snaps, 1, scale=100),
            "turnovers": turnovers,
            "turnoverRate": ratio(turnovers, snaps, 1, scale=100),
        })
    return breakdown
