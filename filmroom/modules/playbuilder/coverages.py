from typing import Dict, List, Optional

DL_LABELS = ("SDE", "WDE", "DE", "DT", "NT", "SDT", "WDT")


def _assign(role: str, depth: Optional[int], description: str) -> Dict:
    return {"role": role, "depth": depth, "description": description}


def _contain() -> Dict[str, Dict]:
    return {label: _assign("Contain", None, "Rush and keep the quarterback inside") for label in DL_LABELS}


def _cover_3() -> Dict[str, Dict]:
    deep_third = _assign("Deep Third", 12, "Deep third of the field, nothing behind")
    hook_curl = _assign("Hook-Curl", 8, "Wall the curl, carry #2 vertical")
    middle_hook = _assign("Middle Hook", 10, "Middle hole, carry #3 to 10-12 yds")
    assignments = {label: deep_third for label in ("LCB", "RCB", "FS", "SS")}
    assignments.update({label: hook_curl for label in ("SAM", "WILL", "SOLB", "WOLB", "SLB", "WLB", "JACK")})
    assignments.update({label: middle_hook for label in ("MIKE", "SILB", "WILB")})
    assignments["NB"] = _assign("Flat", 6, "Flat to the passing strength")
    assignments.update(_contain())
    return assignments


def _cover_2() -> Dict[str, Dict]:
    deep_half = _assign("Deep Half", 12, "Deep half, stay over the top")
    curl_flat = _assign("Curl-to-Flat", 7, "Sink under the curl, break on the flat")
    assignments = {label: deep_half for label in ("FS", "SS")}
    assignments.update({label: _assign("Flat", 5, "Jam #1, sit in the flat") for label in ("LCB", "RCB")})
    assignments.update({label: curl_flat for label in ("SAM", "WILL", "SOLB", "WOLB", "JACK", "NB")})
    assignments.update({label: _assign("Middle Hook", 9, "Middle hook, wall crossers") for label in ("MIKE", "SILB", "WILB")})
    assignments.update({label: _assign("Hook-Curl", 7, "Hook to curl window") for label in ("SLB", "WLB")})
    assignments.update(_contain())
    return assignments


def _cover_1() -> Dict[str, Dict]:
    man = _assign("Man", None, "Man coverage on assigned receiver")
    assignments = {"FS": _assign("Deep Half", 12, "Single high, help over the top")}
    assignments.update({
        label: man
        for label in ("LCB", "RCB", "SS", "NB", "SAM", "MIKE", "WILL", "SOLB", "WOLB", "SILB", "WILB", "SLB", "WLB", "JACK")
    })
    assignments.update(_contain())
    return assignments


COVERAGES: Dict[str, Dict] = {
    "Cover 3": {
        "name": "Cover 3",
        "description": "Three deep, four under zone",
        "deep_count": 3,
        "under_count": 4,
        "assignments": _cover_3(),
    },
    "Cover 2": {
        "name": "Cover 2",
        "description": "Two deep halves, five under zone",
        "deep_count": 2,
        "under_count": 5,
        "assignments": _cover_2(),
    },
    "Cover 1": {
        "name": "Cover 1",
        "description": "Man free with a single high safety",
        "deep_count": 1,
        "under_count": 0,
        "assignments": _cover_1(),
    },
}


def get_coverage_assignment(label: str, coverage: str) -> Optional[Dict]:
    definition = COVERAGES.get(coverage)
    if not definition:
        return None
    return definition["assignments"].get(label)


def apply_coverage_to_formation(players: List[Dict], coverage: str) -> List[Dict]:
    """Copy players, adding coverage_role/depth/description where the label has one."""
    if coverage not in COVERAGES:
        raise ValueError(f"Unknown coverage: {coverage}")
    result = []
    for player in players:
        updated = dict(player)
        assignment = get_coverage_assignment(player.get("label"), coverage)
        if assignment:
            updated["coverage_role"] = assignment["role"]
            updated["coverage_depth"] = assignment["depth"]
            updated["coverage_description"] = assignment["description"]
        result.append(updated)
    return result
