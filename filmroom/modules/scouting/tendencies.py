"""
What an opponent likes to call: play-type mix by down and distance, and
the formations it shows most.
"""

from typing import Iterable, List
import pandas as pd

from filmroom.modules.analytics.aggregation import ratio

DISTANCE_BUCKETS = ("short", "medium", "long")
DEFAULT_DOWN = 1
DEFAULT_DISTANCE = 10


def distance_bucket(distance) -> str:
    """short is 3 yards or less, medium 4 to 6, long 7 or more."""
    if distance is None or pd.isna(distance):
        distance = DEFAULT_DISTANCE
    if distance <= 3:
        return "short"
    if distance <= 6:
        return "medium"
    return "long"


def _situations(df: pd.DataFrame) -> List[dict]:
    situations = []
    for (down, bucket), group in df.groupby(["down", "bucket"], sort=False):
        counts = group["play_type"].value_counts()
        total = len(group)
        situations.append({
            "down": int(down),
            "distance": bucket,
            "plays": total,
            "runPercentage": ratio(int(counts.get("run", 0)), total, 1, scale=100),
            "passPercentage": ratio(int(counts.get("pass", 0)), total, 1, scale=100),
            "playTypes": {str(k): int(v) for k, v in counts.items()},
        })
    situations.sort(key=lambda s: (s["down"], DISTANCE_BUCKETS.index(s["distance"])))
    return situations


def _top_formations(df: pd.DataFrame, limit: int) -> List[dict]:
    formations = df["formation"].dropna()
    formations = formations[formations != ""]
    total = len(df)
    counts = formations.value_counts()
    return [
        {"formation": str(name), "plays": int(count), "percentage": ratio(int(count), total, 1, scale=100)}
        for name, count in counts.head(limit).items()
    ]


def opponent_tendencies(opponent_name: str, plays: Iterable[dict], top_formations: int = 5) -> dict:
    """plays are the opponent's own snaps (is_opponent_play rows) from its games."""
    df = pd.DataFrame(list(plays))
    for column in ("down", "distance", "play_type", "formation"):
        if column not in df.columns:
            df[column] = None
    total = len(df)
    if total == 0:
        return {
            "opponentName": opponent_name,
            "totalPlays": 0,
            "runPercentage": None,
            "passPercentage": None,
            "byDownAndDistance": [],
            "topFormations": [],
        }

    df["down"] = pd.to_numeric(df["down"], errors="coerce").fillna(DEFAULT_DOWN).astype(int)
    df["bucket"] = pd.to_numeric(df["distance"], errors="coerce").map(distance_bucket)
    df["play_type"] = df["play_type"].fillna("unknown")
    play_types = df["play_type"].value_counts()

    return {
        "opponentName": opponent_name,
        "totalPlays": total,
        "runPercentage": ratio(int(play_types.get("run", 0)), total, 1, scale=100),
        "passPercentage": ratio(int(play_types.get("pass", 0)), total, 1, scale=100),
        "byDownAndDistance": _situations(df),
        "topFormations": _top_formations(df, top_formations),
    }
