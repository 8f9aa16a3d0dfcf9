from pydantic import BaseModel, Field
from typing import Dict, List, Literal, Optional

MotionDirection = Literal["toward-center", "away-from-center"]


class CanvasPoint(BaseModel):
    x: float = Field(ge=0, le=700)
    y: float = Field(ge=0, le=400)


class LineReference(BaseModel):
    line_of_scrimmage: float = 200
    center_x: float = 350
    lg: Optional[CanvasPoint] = None
    rg: Optional[CanvasPoint] = None
    lt: Optional[CanvasPoint] = None
    rt: Optional[CanvasPoint] = None


class AlignmentRequest(BaseModel):
    responsibility: str = Field(min_length=1)
    reference: LineReference = LineReference()


class AlignmentResponse(BaseModel):
    responsibility: str
    alignment: Optional[str] = None
    position: Optional[CanvasPoint] = None


class MotionRequest(BaseModel):
    position: str
    start: CanvasPoint
    motion_type: str
    direction: MotionDirection = "toward-center"
    center_x: float = 350
    line_of_scrimmage: float = 200


class MotionResponse(BaseModel):
    motion_type: str
    end: CanvasPoint
    legal_at_snap: bool


class FormationPlayer(BaseModel):
    position: str
    x: float
    y: float
    label: str
    responsibility: Optional[str] = None
    coverage_role: Optional[str] = None
    coverage_depth: Optional[int] = None
    coverage_description: Optional[str] = None


class FormationSummary(BaseModel):
    name: str
    side: Literal["offense", "defense"]
    usage: Optional[str] = None
    run_percentage: Optional[int] = None
    pass_percentage: Optional[int] = None
    personnel: Optional[str] = None
    player_count: int


class FormationDetail(FormationSummary):
    coverage: Optional[str] = None
    players: List[FormationPlayer]


class CoverageSummary(BaseModel):
    name: str
    description: str
    deep_count: int
    under_count: int
    assignments: Dict[str, Dict]
