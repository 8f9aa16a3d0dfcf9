from filmroom.modules.playbuilder.alignments import CENTER_X, LINE_OF_SCRIMMAGE, Point, clamp_point
from typing import Dict, List

MOTION_TYPES: Dict[str, Dict] = {
    "None": {"offset": (0, 0), "legal_at_snap": True, "requires_set": False,
             "description": "No motion"},
    "Jet": {"offset": (0, 0), "legal_at_snap": True, "requires_set": True,
            "description": "Full speed motion across the formation at the snap"},
    "Orbit": {"offset": (0, 30), "legal_at_snap": True, "requires_set": True,
              "description": "Loop behind the quarterback"},
    "Across": {"offset": (100, 0), "legal_at_snap": True, "requires_set": True,
               "description": "Motion across the formation"},
    "Return": {"offset": (0, 0), "legal_at_snap": False, "requires_set": True,
               "description": "Motion out and back, must reset before the snap"},
    "Shift": {"offset": (80, 0), "legal_at_snap": False, "requires_set": True,
              "description": "Change alignment, all players set before the snap"},
}

MOTION_DIRECTIONS = ("toward-center", "away-from-center")
LINEMEN = {"LT", "LG", "C", "RG", "RT"}
LOS_ARC = 10


def normalize_motion_type(motion_type: str) -> str:
    for name in MOTION_TYPES:
        if name.lower() == (motion_type or "").lower():
            return name
    return motion_type


def get_motion_types_for_position(position: str) -> List[str]:
    if position in LINEMEN:
        return ["None"]
    return list(MOTION_TYPES.keys())


def is_motion_legal_at_snap(motion_type: str) -> bool:
    motion = MOTION_TYPES.get(normalize_motion_type(motion_type))
    return motion["legal_at_snap"] if motion else True


def calculate_motion_endpoint(
    start: Point,
    motion_type: str,
    direction: str = "toward-center",
    center_x: float = CENTER_X,
    line_of_scrimmage: float = LINE_OF_SCRIMMAGE,
) -> Point:
    """Where a player finishes after motion, clamped to the canvas.

    Players on the line arc back 10px so the path clears the line.
    """
    motion_type = normalize_motion_type(motion_type)
    x, y = start["x"], start["y"]
    if motion_type == "None" or motion_type not in MOTION_TYPES:
        return clamp_point(x, y)

    arc = LOS_ARC if y == line_of_scrimmage else 0
    left = x < center_x
    inward = direction == "toward-center"

    if motion_type == "Jet":
        end_x = x + (120 if left else -120) if inward else x + (-80 if left else 80)
        end_y = y
    elif motion_type == "Orbit":
        if inward:
            end_x = center_x + 80 if left else center_x - 80
            end_y = y + 30
        else:
            end_x = x + (-60 if left else 60)
            end_y = y + 40
    elif motion_type == "Across":
        end_x = center_x if inward else x + (-80 if left else 80)
        end_y = y
    elif motion_type == "Return":
        end_x = x + (30 if left else -30) if inward else x + (-20 if left else 20)
        end_y = y
    else:
        end_x = x + (80 if left else -80) if inward else x + (-80 if left else 80)
        end_y = y

    return clamp_point(end_x, end_y + arc)
