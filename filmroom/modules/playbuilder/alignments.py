"""
Defensive alignment geometry.

Positions are derived from an offensive line reference:
    {"line_of_scrimmage": 200, "center_x": 350, "lg": {"x": .., "y": ..},
     "rg": {...}, "lt": {...}, "rt": {...}, "responsibility": "3-tech strong"}

Defense lines up above the ball, so depth in yards becomes y = LOS - offset.
"""

from typing import Callable, Dict, List, Optional, Tuple

CANVAS_WIDTH = 700
CANVAS_HEIGHT = 400
LINE_OF_SCRIMMAGE = 200
CENTER_X = 350

Point = Dict[str, float]


def clamp_point(x: float, y: float) -> Point:
    return {
        "x": min(max(x, 0), CANVAS_WIDTH),
        "y": min(max(y, 0), CANVAS_HEIGHT),
    }


def _los(ref: Dict) -> float:
    return ref.get("line_of_scrimmage", LINE_OF_SCRIMMAGE)


def _cx(ref: Dict) -> float:
    return ref.get("center_x", CENTER_X)


def _text(ref: Dict) -> str:
    return (ref.get("responsibility") or "").lower()


def _is_left(ref: Dict, *keys: str) -> bool:
    text = _text(ref)
    return any(k in text for k in keys)


def _point_x(ref: Dict, key: str, default: float) -> float:
    point = ref.get(key)
    return point["x"] if point else default


def _guard_x(ref: Dict, left: bool) -> float:
    if left:
        return _point_x(ref, "lg", _cx(ref) - 40)
    return _point_x(ref, "rg", _cx(ref) + 40)


def _tackle_x(ref: Dict, left: bool) -> float:
    if left:
        return _point_x(ref, "lt", _cx(ref) - 80)
    return _point_x(ref, "rt", _cx(ref) + 80)


def _nose(ref):
    return _cx(ref), _los(ref) - 15


def _one_tech(ref):
    left = _is_left(ref, "left", "lg")
    return _guard_x(ref, left) + (-10 if left else 10), _los(ref) - 15


def _two_i(ref):
    return _guard_x(ref, _is_left(ref, "left", "lg")), _los(ref) - 15


def _three(ref):
    left = _is_left(ref, "left", "lg", "ldt")
    return _guard_x(ref, left) + (-20 if left else 20), _los(ref) - 15


def _four_i(ref):
    return _tackle_x(ref, _is_left(ref, "left", "lt")), _los(ref) - 15


def _five(ref):
    left = _is_left(ref, "left", "lt")
    return _tackle_x(ref, left) + (-20 if left else 20), _los(ref) - 15


def _six(ref):
    left = _is_left(ref, "left")
    return _tackle_x(ref, left) + (-40 if left else 40), _los(ref) - 15


def _seven(ref):
    left = _is_left(ref, "left")
    return _tackle_x(ref, left) + (-50 if left else 50), _los(ref) - 15


def _nine(ref):
    left = _is_left(ref, "left")
    return _tackle_x(ref, left) + (-70 if left else 70), _los(ref) - 10


def _edge(ref):
    left = _is_left(ref, "left")
    return _tackle_x(ref, left) + (-40 if left else 40), _los(ref) - 10


def _gap(letter: str, offset: float) -> Callable[[Dict], Tuple[float, float]]:
    def position(ref):
        left = _is_left(ref, "left", f"backside {letter}")
        return _cx(ref) + (-offset if left else offset), _los(ref) - 15
    return position


def _fixed(dx: float, depth: float) -> Callable[[Dict], Tuple[float, float]]:
    def position(ref):
        return _cx(ref) + dx, _los(ref) - depth
    return position


def _corner(ref):
    x = 100 if _is_left(ref, "left") else 600
    return x, _los(ref) - 90


def _gap_terms(letter: str) -> List[str]:
    return [
        f"{letter}-gap", f"{letter} gap", f"{letter}gap",
        f"playside {letter}", f"backside {letter}",
    ]


# Declaration order matters: the first alignment whose term appears in the
# responsibility text wins.
DEFENSIVE_ALIGNMENTS: Dict[str, Dict] = {
    "NOSE": {
        "technique": "0",
        "terms": ["nose", "nt", "0-tech", "0 tech"],
        "description": "Head up on the center",
        "depth": 1.5,
        "position": _nose,
    },
    "ONE_TECH": {
        "technique": "1",
        "terms": ["1-tech", "1 tech", "1tech", "inside guard"],
        "description": "Inside shade of the guard",
        "depth": 1.5,
        "position": _one_tech,
    },
    "TWO_I": {
        "technique": "2i",
        "terms": ["2i-tech", "2i tech", "2i", "head up guard"],
        "description": "Head up on the guard",
        "depth": 1.5,
        "position": _two_i,
    },
    "THREE": {
        "technique": "3",
        "terms": ["3-tech", "3 tech", "3tech", "outside guard", "rdt", "ldt"],
        "description": "Outside shade of the guard",
        "depth": 1.5,
        "position": _three,
    },
    "FOUR_I": {
        "technique": "4i",
        "terms": ["4i-tech", "4i tech", "4i", "head up tackle"],
        "description": "Head up on the tackle",
        "depth": 1.5,
        "position": _four_i,
    },
    "FIVE": {
        "technique": "5",
        "terms": ["5-tech", "5 tech", "5tech", "outside tackle"],
        "description": "Outside shade of the tackle",
        "depth": 1.5,
        "position": _five,
    },
    "SIX": {
        "technique": "6",
        "terms": ["6-tech", "6 tech", "6tech", "6 technique"],
        "description": "Head up on the tight end",
        "depth": 1.5,
        "position": _six,
    },
    "SEVEN": {
        "technique": "7",
        "terms": ["7-tech", "7 tech", "7tech"],
        "description": "Inside shade of the tight end",
        "depth": 1.5,
        "position": _seven,
    },
    "NINE": {
        "technique": "9",
        "terms": ["9-tech", "9 tech", "9tech", "wide 9"],
        "description": "Outside shade of the tight end",
        "depth": 1.0,
        "position": _nine,
    },
    "EDGE": {
        "technique": "EDGE",
        "terms": ["edge", "emol", "end man on line", "de"],
        "description": "End man on the line, set the edge",
        "depth": 1.0,
        "position": _edge,
    },
    "A_GAP": {
        "technique": "A",
        "terms": _gap_terms("a"),
        "description": "Between center and guard",
        "depth": 1.5,
        "position": _gap("a", 25),
    },
    "B_GAP": {
        "technique": "B",
        "terms": _gap_terms("b"),
        "description": "Between guard and tackle",
        "depth": 1.5,
        "position": _gap("b", 60),
    },
    "C_GAP": {
        "technique": "C",
        "terms": _gap_terms("c"),
        "description": "Between tackle and tight end",
        "depth": 1.5,
        "position": _gap("c", 100),
    },
    "D_GAP": {
        "technique": "D",
        "terms": _gap_terms("d"),
        "description": "Outside the tight end",
        "depth": 1.5,
        "position": _gap("d", 140),
    },
    "MIKE": {
        "technique": "MIKE",
        "terms": ["mike", "mlb", "middle linebacker"],
        "description": "Middle linebacker over the ball",
        "depth": 6,
        "position": _fixed(0, 60),
    },
    "WILL": {
        "technique": "WILL",
        "terms": ["will", "wlb", "weakside linebacker", "weak lb"],
        "description": "Weakside linebacker",
        "depth": 6,
        "position": _fixed(-80, 60),
    },
    "SAM": {
        "technique": "SAM",
        "terms": ["sam", "slb", "strongside linebacker", "strong lb"],
        "description": "Strongside linebacker",
        "depth": 6,
        "position": _fixed(80, 60),
    },
    "GENERIC_LB": {
        "technique": "LB",
        "terms": ["lb", "linebacker", "backer"],
        "description": "Linebacker depth over the ball",
        "depth": 6,
        "position": _fixed(0, 60),
    },
    "SECOND_LEVEL": {
        "technique": "2ND",
        "terms": ["second level", "2nd level", "next level"],
        "description": "Second level defender",
        "depth": 7,
        "position": _fixed(0, 70),
    },
    "FREE_SAFETY": {
        "technique": "FS",
        "terms": ["free safety", "free", "fs", "single high"],
        "description": "Deep middle safety",
        "depth": 11,
        "position": _fixed(0, 110),
    },
    "STRONG_SAFETY": {
        "technique": "SS",
        "terms": ["strong safety", "strong", "ss"],
        "description": "Strong side safety",
        "depth": 10,
        "position": _fixed(100, 100),
    },
    "CORNERBACK": {
        "technique": "CB",
        "terms": ["corner", "cornerback", "cb"],
        "description": "Outside cornerback",
        "depth": 9,
        "position": _corner,
    },
    "SAFETY": {
        "technique": "S",
        "terms": ["safety"],
        "description": "Generic deep safety",
        "depth": 11,
        "position": _fixed(50, 110),
    },
}

ALIGNMENT_LEVELS = ("DL", "LB", "DB")


def find_alignment(responsibility: str) -> Optional[str]:
    text = (responsibility or "").lower()
    if not text:
        return None
    for key, alignment in DEFENSIVE_ALIGNMENTS.items():
        if any(term in text for term in alignment["terms"]):
            return key
    return None


def get_defensive_position(responsibility: str, ref: Optional[Dict] = None) -> Optional[Point]:
    """Resolve a responsibility like "3-tech strong" to a clamped canvas point.

    Returns None when no alignment term matches.
    """
    key = find_alignment(responsibility)
    if key is None:
        return None
    ref = dict(ref or {})
    ref["responsibility"] = responsibility
    x, y = DEFENSIVE_ALIGNMENTS[key]["position"](ref)
    return clamp_point(x, y)


def describe_alignment(key: str) -> Dict:
    alignment = DEFENSIVE_ALIGNMENTS[key]
    return {
        "key": key,
        "technique": alignment["technique"],
        "description": alignment["description"],
        "depth": alignment["depth"],
        "terms": list(alignment["terms"]),
    }


def get_alignments_by_level(level: str) -> List[Dict]:
    """DL sits within 2 yards, LB up to 8, DB beyond that."""
    if level == "DL":
        keep = lambda depth: depth <= 2
    elif level == "LB":
        keep = lambda depth: 2 < depth <= 8
    elif level == "DB":
        keep = lambda depth: depth > 8
    else:
        raise ValueError(f"Unknown alignment level: {level}")
    return [
        describe_alignment(key)
        for key, alignment in DEFENSIVE_ALIGNMENTS.items()
        if keep(alignment["depth"])
    ]


def get_all_techniques() -> List[str]:
    return [a["technique"] for a in DEFENSIVE_ALIGNMENTS.values()]


# Blitz gap landmarks just behind the line, strong side to the left
GAP_OFFSETS = {
    "Strong A": -10,
    "Weak A": 10,
    "Strong B": -25,
    "Weak B": 25,
    "Strong C": -40,
    "Weak C": 40,
}
GAP_Y = 205


def get_gap_position(gap: str, center_x: float = CENTER_X) -> Point:
    return clamp_point(center_x + GAP_OFFSETS.get(gap, 0), GAP_Y)
