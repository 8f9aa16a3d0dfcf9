from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime

TAG_SOURCES = ("manual", "ai", "ai_assisted")


class PlayFields(BaseModel):
    """Everything a coach can record about one play of film."""
    camera_id: Optional[str] = None
    drive_id: Optional[str] = None
    timestamp_end: Optional[float] = None
    is_opponent_play: Optional[bool] = None

    # Identification
    play_code: Optional[str] = None
    formation: Optional[str] = None
    play_type: Optional[str] = None  # run, pass, kick, punt, ...
    direction: Optional[str] = None
    drive_context: Optional[str] = None
    opponent_play_type: Optional[str] = None
    result_type: Optional[str] = None

    # Situation
    down: Optional[int] = Field(default=None, ge=1, le=4)
    distance: Optional[int] = None
    yard_line: Optional[int] = Field(default=None, ge=0, le=100)  # own goal line = 0
    hash_mark: Optional[str] = None
    quarter: Optional[int] = Field(default=None, ge=1)

    # Result
    result: Optional[str] = None
    yards_gained: Optional[int] = None
    resulted_in_first_down: Optional[bool] = None
    is_complete: Optional[bool] = None
    is_turnover: Optional[bool] = None
    turnover_type: Optional[str] = None
    is_fumble: Optional[bool] = None
    fumbled: Optional[bool] = None
    is_interception: Optional[bool] = None
    drop: Optional[bool] = None
    contested_catch: Optional[bool] = None
    play_duration_seconds: Optional[int] = None

    # Player attribution
    qb_id: Optional[str] = None
    ball_carrier_id: Optional[str] = None
    target_id: Optional[str] = None
    opponent_player_number: Optional[str] = None
    opponent_qb_evaluation: Optional[str] = None

    # Offensive line
    lt_id: Optional[str] = None
    lt_block_result: Optional[str] = None
    lg_id: Optional[str] = None
    lg_block_result: Optional[str] = None
    c_id: Optional[str] = None
    c_block_result: Optional[str] = None
    rg_id: Optional[str] = None
    rg_block_result: Optional[str] = None
    rt_id: Optional[str] = None
    rt_block_result: Optional[str] = None
    ol_penalty_player_id: Optional[str] = None

    # Situation tags
    has_motion: Optional[bool] = None
    is_play_action: Optional[bool] = None
    facing_blitz: Optional[bool] = None

    # Defensive tracking
    tackler_ids: Optional[List[str]] = None
    missed_tackle_ids: Optional[List[str]] = None
    pressure_player_ids: Optional[List[str]] = None
    sack_player_id: Optional[str] = None
    coverage_player_id: Optional[str] = None
    coverage_result: Optional[str] = None
    is_tfl: Optional[bool] = None
    is_sack: Optional[bool] = None
    is_forced_fumble: Optional[bool] = None
    is_pbu: Optional[bool] = None
    qb_decision_grade: Optional[int] = None

    # Special teams
    special_teams_unit: Optional[str] = None
    kicker_id: Optional[str] = None
    kick_result: Optional[str] = None
    kick_distance: Optional[int] = None
    returner_id: Optional[str] = None
    return_yards: Optional[int] = None
    is_fair_catch: Optional[bool] = None
    is_touchback: Optional[bool] = None
    is_muffed: Optional[bool] = None
    punter_id: Optional[str] = None
    punt_type: Optional[str] = None
    gunner_tackle_id: Optional[str] = None
    kickoff_type: Optional[str] = None
    long_snapper_id: Optional[str] = None
    snap_quality: Optional[str] = None
    holder_id: Optional[str] = None
    coverage_tackler_id: Optional[str] = None
    blocker_id: Optional[str] = None
    blocked_by: Optional[str] = None
    is_kickoff: Optional[bool] = None
    is_punt: Optional[bool] = None
    is_kickoff_return: Optional[bool] = None
    is_punt_return: Optional[bool] = None
    is_field_goal_attempt: Optional[bool] = None
    is_field_goal_made: Optional[bool] = None
    is_extra_point_attempt: Optional[bool] = None
    is_extra_point_made: Optional[bool] = None
    is_two_point_made: Optional[bool] = None
    is_safety: Optional[bool] = None

    # Scoring
    scoring_type: Optional[str] = None
    scoring_points: Optional[int] = None
    is_touchdown: Optional[bool] = None
    opponent_scored: Optional[bool] = None

    # Penalties
    penalty_on_play: Optional[bool] = None
    penalty_type: Optional[str] = None
    penalty_yards: Optional[int] = None
    penalty_on_us: Optional[bool] = None
    penalty_declined: Optional[bool] = None

    notes: Optional[str] = None
    tags: Optional[List[str]] = None

    tag_source: Optional[str] = None
    ai_confidence: Optional[float] = Field(default=None, ge=0, le=1)


class PlayCreate(PlayFields):
    video_id: str
    timestamp_start: float = Field(ge=0)
    is_opponent_play: bool = False


class PlayUpdate(PlayFields):
    timestamp_start: Optional[float] = Field(default=None, ge=0)


class PlayResponse(PlayFields):
    id: str
    team_id: str
    video_id: str
    timestamp_start: float
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class ParticipationCreate(BaseModel):
    player_id: str
    participation_type: str  # e.g. ball_carrier, tackle, pressure, interception, pass_breakup
    result: Optional[str] = None
    position_played: Optional[str] = None
    assignment: Optional[str] = None
    assignment_grade: Optional[int] = None
    notes: Optional[str] = None


class ParticipationResponse(ParticipationCreate):
    id: str
    play_instance_id: str

    class Config:
        from_attributes = True
