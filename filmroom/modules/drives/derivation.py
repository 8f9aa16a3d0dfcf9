"""
Drive bookkeeping that needs no database: stats from a drive's plays,
splitting a game's plays into drives, and drive-level rates.
"""

from typing import Dict, List, Optional

DRIVE_RESULTS = ("touchdown", "field_goal", "punt", "turnover", "downs", "end_half", "end_game", "safety")

RESULT_POINTS = {"touchdown": 6, "field_goal": 3, "safety": 2}

RED_ZONE_YARD_LINE = 80
DEFAULT_START_YARD_LINE = 75  # own 25

_DRIVE_ENDING_RESULTS = ("touchdown", "field_goal", "punt")


def points_for_result(result: str) -> int:
    """Points a drive result is worth; touchdowns exclude the try."""
    return RESULT_POINTS.get(result, 0)


def summarize_drive_plays(plays: List[dict]) -> Dict[str, object]:
    """plays_count, yards_gained, first_downs and reached_red_zone from a drive's plays."""
    return {
        "plays_count": len(plays),
        "yards_gained": sum(p.get("yards_gained") or 0 for p in plays),
        "first_downs": sum(1 for p in plays if p.get("resulted_in_first_down")),
        "reached_red_zone": any((p.get("yard_line") or 0) >= RED_ZONE_YARD_LINE for p in plays),
    }


def derived_flags(plays_count: int, first_downs: int, points: int) -> Dict[str, bool]:
    return {
        "three_and_out": plays_count == 3 and first_downs == 0,
        "scoring_drive": points > 0,
    }


def _ends_drive(play: dict, quarter: int) -> bool:
    if play.get("quarter") != quarter:
        return True
    if play.get("is_turnover"):
        return True
    result = play.get("result") or ""
    return any(r in result for r in _DRIVE_ENDING_RESULTS)


def _result_from_play(play: dict) -> str:
    result = play.get("result") or ""
    if play.get("is_turnover"):
        return "turnover"
    for name in _DRIVE_ENDING_RESULTS:
        if name in result:
            return name
    return "end_half"


def group_plays_into_drives(plays: List[dict]) -> List[dict]:
    """
    Split plays (already ordered by timestamp) into drives.

    A play starts a new drive when its quarter differs from the current
    drive's, it is a turnover, or its result mentions a touchdown, field
    goal or punt. That play closes the current drive (setting its result
    and end yard line) and opens the next one. The last drive ends as
    end_game.
    """
    drives: List[dict] = []
    current: Optional[dict] = None

    for play in plays:
        if current is None:
            current = _open_drive(1, play, play.get("quarter") or 1)
            continue
        if _ends_drive(play, current["quarter"]):
            _close_drive(current, _result_from_play(play), play)
            drives.append(current)
            current = _open_drive(current["drive_number"] + 1, play, play.get("quarter") or current["quarter"])
        else:
            current["play_ids"].append(play["id"])

    if current is not None:
        _close_drive(current, "end_game", plays[-1])
        drives.append(current)
    return drives


def _open_drive(number: int, play: dict, quarter: int) -> dict:
    return {
        "drive_number": number,
        "quarter": quarter,
        "start_yard_line": play.get("yard_line") or DEFAULT_START_YARD_LINE,
        "start_time": play.get("timestamp_start"),
        "play_ids": [play["id"]],
    }


def _close_drive(drive: dict, result: str, play: dict):
    drive["result"] = result
    drive["points"] = points_for_result(result)
    drive["end_yard_line"] = play.get("yard_line") or drive["start_yard_line"]
    drive["end_time"] = play.get("timestamp_end") or play.get("timestamp_start")


def drive_rates(drives: List[dict]) -> Dict[str, float]:
    """Points per drive, three-and-out rate and red zone TD rate (percentages). Zeros when no drives."""
    total = len(drives)
    if total == 0:
        return {"drives": 0, "points_per_drive": 0.0, "three_and_out_rate": 0.0, "red_zone_td_rate": 0.0}
    points = sum(d.get("points") or 0 for d in drives)
    three_and_outs = sum(1 for d in drives if d.get("three_and_out"))
    red_zone = [d for d in drives if d.get("reached_red_zone")]
    red_zone_tds = sum(1 for d in red_zone if d.get("result") == "touchdown")
    return {
        "drives": total,
        "points_per_drive": points / total,
        "three_and_out_rate": three_and_outs / total * 100,
        "red_zone_td_rate": red_zone_tds / len(red_zone) * 100 if red_zone else 0.0,
    }
