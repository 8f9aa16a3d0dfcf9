from filmroom.modules.playbuilder.alignments import clamp_point, get_defensive_position
from filmroom.modules.playbuilder.coverages import apply_coverage_to_formation
from typing import Dict, List, Optional
import copy


def _player(position: str, x: float, y: float, label: Optional[str] = None, **extra) -> Dict:
    player = {"position": position, **clamp_point(x, y), "label": label or position}
    player.update(extra)
    return player


def _offensive_line() -> List[Dict]:
    return [
        _player("LT", 220, 200),
        _player("LG", 260, 200),
        _player("C", 300, 200),
        _player("RG", 340, 200),
        _player("RT", 380, 200),
    ]


def _lineman(position: str, label: str, responsibility: str) -> Dict:
    point = get_defensive_position(responsibility)
    return _player(position, point["x"], point["y"], label, responsibility=responsibility)


OFFENSIVE_FORMATIONS: Dict[str, Dict] = {
    "Shotgun Spread": {
        "usage": "Base passing look with a balanced run threat",
        "run_percentage": 40,
        "pass_percentage": 60,
        "personnel": "11 personnel (1RB, 1TE, 3WR)",
        "players": [
            _player("X", 50, 200),
            *_offensive_line(),
            _player("TE", 420, 200),
            _player("SL", 180, 210),
            _player("Z", 550, 210),
            _player("QB", 300, 260),
            _player("RB", 340, 260),
        ],
    },
    "Gun Trips Right": {
        "usage": "Overload the field side with three receivers",
        "run_percentage": 30,
        "pass_percentage": 70,
        "personnel": "11 personnel",
        "players": [
            _player("X", 50, 200),
            *_offensive_line(),
            _player("Y", 460, 200),
            _player("Z", 510, 210),
            _player("SL", 420, 215),
            _player("QB", 300, 260),
            _player("RB", 260, 260),
        ],
    },
    "I-Formation": {
        "usage": "Downhill power run game",
        "run_percentage": 70,
        "pass_percentage": 30,
        "personnel": "21 personnel (2RB, 1TE, 2WR)",
        "players": [
            _player("X", 50, 200),
            *_offensive_line(),
            _player("TE", 420, 200),
            _player("QB", 300, 215),
            _player("FB", 300, 245),
            _player("TB", 300, 280),
            _player("Z", 550, 210),
        ],
    },
}

DEFENSIVE_FORMATIONS: Dict[str, Dict] = {
    "4-3 Over": {
        "usage": "Four down linemen shifted to the strength, three linebackers",
        "personnel": "4 DL, 3 LB, 4 DB",
        "players": [
            _lineman("DE", "SDE", "5-tech left"),
            _lineman("DT", "DT", "3-tech left"),
            _lineman("DT", "NT", "1-tech right"),
            _lineman("DE", "WDE", "5-tech right"),
            _player("SAM", 220, 160, responsibility="apex strong"),
            _player("MIKE", 350, 160, responsibility="over ball"),
            _player("WILL", 420, 160, responsibility="B-gap weak"),
            _player("LCB", 100, 135, responsibility="corner strong"),
            _player("RCB", 600, 135, responsibility="corner weak"),
            _player("SS", 250, 130, responsibility="strong safety box"),
            _player("FS", 350, 90, responsibility="free safety"),
        ],
    },
}


def _summary(name: str, side: str, formation: Dict) -> Dict:
    summary = {key: value for key, value in formation.items() if key != "players"}
    summary.update({"name": name, "side": side, "player_count": len(formation["players"])})
    return summary


def list_formations(side: Optional[str] = None) -> List[Dict]:
    formations = []
    if side in (None, "offense"):
        formations.extend(_summary(name, "offense", f) for name, f in OFFENSIVE_FORMATIONS.items())
    if side in (None, "defense"):
        formations.extend(_summary(name, "defense", f) for name, f in DEFENSIVE_FORMATIONS.items())
    return formations


def get_formation(name: str, coverage: Optional[str] = None) -> Optional[Dict]:
    """Formation with its players; defensive players pick up coverage roles when asked."""
    if name in OFFENSIVE_FORMATIONS:
        side, formation = "offense", OFFENSIVE_FORMATIONS[name]
    elif name in DEFENSIVE_FORMATIONS:
        side, formation = "defense", DEFENSIVE_FORMATIONS[name]
    else:
        return None

    result = _summary(name, side, formation)
    players = copy.deepcopy(formation["players"])
    if coverage:
        players = apply_coverage_to_formation(players, coverage)
        result["coverage"] = coverage
    result["players"] = players
    return result
