"""
Help text for each reported metric, plus the rule-of-thumb checks coaches
use to call an offense or defense good.
"""

METRIC_DEFINITIONS = {
    # Offensive volume
    "totalYardsPerGame": {
        "title": "Total Yards Per Game",
        "description": "Average offensive yards (rushing + passing) per game.",
        "calculation": "Total yards / games played",
    },
    "rushingYardsPerGame": {
        "title": "Rushing Yards Per Game",
        "description": "Average ground yards per game. Reflects run game effectiveness and clock control.",
        "calculation": "Rushing yards / games played",
    },
    "passingYardsPerGame": {
        "title": "Passing Yards Per Game",
        "description": "Average completed passing yards per game.",
        "calculation": "Passing yards / games played",
    },
    "touchdowns": {
        "title": "Touchdowns",
        "description": "Offensive touchdowns scored.",
        "calculation": "Count of offensive touchdowns",
    },

    # Offensive efficiency
    "yardsPerPlay": {
        "title": "Yards Per Play",
        "description": "Offensive efficiency independent of tempo or number of possessions.",
        "calculation": "Total yards / total plays",
    },
    "yardsPerCarry": {
        "title": "Yards Per Carry",
        "description": "Run game efficiency per touch.",
        "calculation": "Rushing yards / rushing attempts",
    },
    "yardsPerCompletion": {
        "title": "Yards Per Completion",
        "description": "Big-play ability through the air.",
        "calculation": "Passing yards / completions",
    },
    "thirdDownConversionRate": {
        "title": "3rd Down Conversion Rate",
        "description": "Ability to sustain drives.",
        "calculation": "(3rd down conversions / 3rd down attempts) x 100",
    },
    "redZoneEfficiency": {
        "title": "Red Zone Efficiency",
        "description": "Finishing drives inside the opponent's 20-yard line.",
        "calculation": "(Red zone TDs / red zone attempts) x 100",
    },

    # Ball security
    "turnovers": {
        "title": "Turnovers",
        "description": "Fumbles lost plus interceptions thrown.",
        "calculation": "Fumbles lost + interceptions thrown",
    },

    # Possession
    "timeOfPossession": {
        "title": "Time of Possession",
        "description": "How long the offense controls the ball.",
        "calculation": "Sum of play durations",
    },

    # Defensive volume
    "totalYardsAllowedPerGame": {
        "title": "Total Yards Allowed Per Game",
        "description": "Average yards surrendered per game.",
        "calculation": "Opponent yards / games played",
    },
    "pointsAllowedPerGame": {
        "title": "Points Allowed Per Game",
        "description": "Average points the defense gives up.",
        "calculation": "Opponent points / games played",
    },

    # Defensive efficiency
    "yardsPerPlayAllowed": {
        "title": "Yards Per Play Allowed",
        "description": "Defensive efficiency independent of opponent tempo.",
        "calculation": "Opponent yards / opponent plays",
    },
    "thirdDownStopPercentage": {
        "title": "3rd Down Stop Percentage",
        "description": "Ability to get off the field on third down.",
        "calculation": "(3rd downs stopped / opponent 3rd downs) x 100",
    },
    "redZoneDefense": {
        "title": "Red Zone Defense",
        "description": "Touchdown rate allowed once the opponent reaches the red zone.",
        "calculation": "(Opponent RZ TDs / opponent RZ attempts) x 100",
    },

    # Defensive disruptive
    "takeaways": {
        "title": "Takeaways",
        "description": "Interceptions plus fumble recoveries.",
        "calculation": "Interceptions + fumble recoveries",
    },
    "sacks": {
        "title": "Sacks",
        "description": "Quarterback tackles behind the line.",
        "calculation": "Count of QB sacks",
    },
    "tacklesForLoss": {
        "title": "Tackles For Loss (TFLs)",
        "description": "Tackles behind the line of scrimmage.",
        "calculation": "Count of tackles for loss",
    },
    "havocRate": {
        "title": "Havoc Rate",
        "description": "Share of defensive plays with a disruptive result.",
        "calculation": "((TFLs + sacks + forced fumbles + pass breakups) / defensive plays) x 100",
    },

    # Special teams
    "fieldGoalPercentage": {
        "title": "Field Goal Percentage",
        "description": "Points salvaged from stalled drives.",
        "calculation": "(FGs made / FG attempts) x 100",
    },
    "puntReturnAverage": {
        "title": "Punt Return Average",
        "description": "Field position gained on opponent punts.",
        "calculation": "Punt return yards / punt returns",
    },
    "averageStartingFieldPosition": {
        "title": "Average Starting Field Position",
        "description": "Where offensive drives begin on average.",
        "calculation": "Average start yard line of offensive drives",
    },

    # Overall
    "turnoverDifferential": {
        "title": "Turnover Differential",
        "description": "Strongest single statistical predictor of wins.",
        "calculation": "Takeaways - turnovers",
    },
}


def is_good_offense(offense: dict) -> bool:
    """More than 5.5 yards per play, better than 40% on third down, fewer than 1.5 turnovers a game."""
    yards_per_play = offense["efficiency"].get("yardsPerPlay") or 0
    third_down = offense["efficiency"].get("thirdDownConversionRate") or 0
    turnovers = offense["ballSecurity"].get("turnoversPerGame") or 0
    return yards_per_play > 5.5 and third_down > 40 and turnovers < 1.5


def is_good_defense(defense: dict) -> bool:
    """Under 5.0 yards per play allowed, over 60% third down stops, more than one takeaway a game."""
    # No plays faced counts as nothing allowed yet, not as a shutout
    yards_allowed = defense["efficiency"].get("yardsPerPlayAllowed") or 999
    stops = defense["efficiency"].get("thirdDownStopPercentage") or 0
    takeaways = defense["disruptive"].get("takeawaysPerGame") or 0
    return yards_allowed < 5.0 and stops > 60 and takeaways > 1.0
