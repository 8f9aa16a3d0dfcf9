from fastapi import APIRouter, Depends, HTTPException, Query
from filmroom.modules.playbuilder import alignments, coverages, formations, motion
from filmroom.modules.playbuilder.schemas import (
    AlignmentRequest, AlignmentResponse, CanvasPoint, CoverageSummary, FormationDetail, FormationSummary,
    MotionRequest, MotionResponse
)
from filmroom.core.dependencies import get_current_user_id
from typing import Dict, List, Literal, Optional

router = APIRouter(prefix="/playbuilder", tags=["playbuilder"])


@router.get("/formations", response_model=List[FormationSummary])
async def list_formations(
    side: Optional[Literal["offense", "defense"]] = None,
    user_data: Dict = Depends(get_current_user_id)
):
    return formations.list_formations(side)


@router.get("/formations/{name}", response_model=FormationDetail)
async def get_formation(
    name: str,
    coverage: Optional[str] = None,
    user_data: Dict = Depends(get_current_user_id)
):
    if coverage and coverage not in coverages.COVERAGES:
        raise HTTPException(status_code=400, detail=f"Unknown coverage: {coverage}")
    formation = formations.get_formation(name, coverage)
    if not formation:
        raise HTTPException(status_code=404, detail="Formation not found")
    return formation


@router.get("/coverages", response_model=List[CoverageSummary])
async def list_coverages(user_data: Dict = Depends(get_current_user_id)):
    return list(coverages.COVERAGES.values())


@router.get("/alignments")
async def list_alignments(
    level: Literal["DL", "LB", "DB"],
    user_data: Dict = Depends(get_current_user_id)
):
    return alignments.get_alignments_by_level(level)


@router.post("/alignments/resolve", response_model=AlignmentResponse)
async def resolve_alignment(
    body: AlignmentRequest,
    user_data: Dict = Depends(get_current_user_id)
):
    """Map responsibility text such as "3-tech strong" to a canvas point"""
    ref = body.reference.model_dump(exclude_none=True)
    return {
        "responsibility": body.responsibility,
        "alignment": alignments.find_alignment(body.responsibility),
        "position": alignments.get_defensive_position(body.responsibility, ref),
    }


@router.get("/gaps/{gap}", response_model=CanvasPoint)
async def get_gap_position(
    gap: str,
    center_x: float = Query(alignments.CENTER_X, ge=0, le=alignments.CANVAS_WIDTH),
    user_data: Dict = Depends(get_current_user_id)
):
    if gap not in alignments.GAP_OFFSETS:
        raise HTTPException(status_code=404, detail="Gap not found")
    return alignments.get_gap_position(gap, center_x)


@router.post("/motion", response_model=MotionResponse)
async def calculate_motion(
    body: MotionRequest,
    user_data: Dict = Depends(get_current_user_id)
):
    motion_type = motion.normalize_motion_type(body.motion_type)
    if motion_type not in motion.get_motion_types_for_position(body.position):
        raise HTTPException(status_code=400, detail=f"{body.motion_type} motion not allowed for {body.position}")
    end = motion.calculate_motion_endpoint(
        body.start.model_dump(), motion_type, body.direction, body.center_x, body.line_of_scrimmage
    )
    return {
        "motion_type": motion_type,
        "end": end,
        "legal_at_snap": motion.is_motion_legal_at_snap(motion_type),
    }
