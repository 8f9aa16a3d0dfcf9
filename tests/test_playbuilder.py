"""Tests for formation geometry: alignments, motion, coverages and formations."""

import pytest

from filmroom.modules.playbuilder.alignments import (
    CANVAS_HEIGHT,
    CANVAS_WIDTH,
    DEFENSIVE_ALIGNMENTS,
    find_alignment,
    get_alignments_by_level,
    get_defensive_position,
    get_gap_position,
)
from filmroom.modules.playbuilder.coverages import apply_coverage_to_formation, get_coverage_assignment
from filmroom.modules.playbuilder.formations import get_formation, list_formations
from filmroom.modules.playbuilder.motion import (
    calculate_motion_endpoint,
    get_motion_types_for_position,
    is_motion_legal_at_snap,
)


def _on_canvas(point):
    return 0 <= point["x"] <= CANVAS_WIDTH and 0 <= point["y"] <= CANVAS_HEIGHT


class TestAlignments:
    def test_first_match_wins(self):
        assert find_alignment("3-tech strong") == "THREE"
        assert find_alignment("Nose") == "NOSE"
        assert find_alignment("play the flat") is None

    def test_three_technique_uses_guard(self):
        ref = {"line_of_scrimmage": 200, "center_x": 350, "rg": {"x": 390, "y": 200}}
        assert get_defensive_position("3-tech", ref) == {"x": 410, "y": 185}

    def test_left_side_mirrors(self):
        assert get_defensive_position("5-tech left") == {"x": 250, "y": 185}
        assert get_defensive_position("5-tech") == {"x": 450, "y": 185}

    def test_linebackers_and_safeties(self):
        assert get_defensive_position("mike") == {"x": 350, "y": 140}
        assert get_defensive_position("single high") == {"x": 350, "y": 90}

    def test_unknown_responsibility(self):
        assert get_defensive_position("spy the quarterback") is None

    def test_clamped_to_canvas(self):
        ref = {"line_of_scrimmage": 50, "center_x": 690}
        point = get_defensive_position("free safety", ref)
        assert point == {"x": 690, "y": 0}
        assert _on_canvas(get_defensive_position("corner", {"center_x": 0, "line_of_scrimmage": 400}))

    def test_levels(self):
        dl = {a["key"] for a in get_alignments_by_level("DL")}
        lb = {a["key"] for a in get_alignments_by_level("LB")}
        db = {a["key"] for a in get_alignments_by_level("DB")}
        assert "NOSE" in dl and "EDGE" in dl
        assert lb == {"MIKE", "WILL", "SAM", "GENERIC_LB", "SECOND_LEVEL"}
        assert db == {"FREE_SAFETY", "STRONG_SAFETY", "CORNERBACK", "SAFETY"}

    def test_gaps(self):
        assert get_gap_position("Strong B") == {"x": 325, "y": 205}
        assert get_gap_position("Weak A") == {"x": 360, "y": 205}
        assert get_gap_position("Nowhere") == {"x": 350, "y": 205}

    def test_gap_side_follows_its_own_backside_term(self):
        c_gap = DEFENSIVE_ALIGNMENTS["C_GAP"]["position"]
        assert c_gap({"responsibility": "c gap, backside b"}) == (450, 185)
        assert c_gap({"responsibility": "backside c"}) == (250, 185)

    def test_outside_techniques_only_flip_on_left(self):
        assert get_defensive_position("edge over the lt") == {"x": 470, "y": 190}
        assert get_defensive_position("9-tech lt") == {"x": 500, "y": 190}
        assert get_defensive_position("7-tech lt") == {"x": 480, "y": 185}
        assert get_defensive_position("5-tech lt") == {"x": 250, "y": 185}


class TestMotion:
    def test_linemen_cannot_motion(self):
        assert get_motion_types_for_position("LG") == ["None"]
        assert "Jet" in get_motion_types_for_position("Z")

    def test_legal_at_snap(self):
        assert is_motion_legal_at_snap("Jet")
        assert not is_motion_legal_at_snap("shift")
        assert is_motion_legal_at_snap("Unknown")

    def test_jet_toward_center_from_left_arcs_back(self):
        end = calculate_motion_endpoint({"x": 50, "y": 200}, "Jet", "toward-center")
        assert end == {"x": 170, "y": 210}

    def test_orbit_away_from_right_backfield(self):
        end = calculate_motion_endpoint({"x": 500, "y": 260}, "Orbit", "away-from-center")
        assert end == {"x": 560, "y": 300}

    def test_across_toward_center(self):
        assert calculate_motion_endpoint({"x": 550, "y": 210}, "Across") == {"x": 350, "y": 210}

    def test_none_stays_put(self):
        assert calculate_motion_endpoint({"x": 300, "y": 260}, "None") == {"x": 300, "y": 260}

    def test_endpoint_clamped(self):
        end = calculate_motion_endpoint({"x": 680, "y": 200}, "Shift", "away-from-center")
        assert end == {"x": 700, "y": 210}


class TestCoverages:
    def test_cover_3_lookup(self):
        mike = get_coverage_assignment("MIKE", "Cover 3")
        assert mike["role"] == "Middle Hook"
        assert mike["depth"] == 10
        assert get_coverage_assignment("FS", "Cover 3")["role"] == "Deep Third"
        assert get_coverage_assignment("QB", "Cover 3") is None
        assert get_coverage_assignment("FS", "Cover 9") is None

    def test_apply_adds_roles(self):
        players = [{"label": "LCB", "x": 100, "y": 135}, {"label": "SDE", "x": 250, "y": 185}, {"label": "QB"}]
        applied = apply_coverage_to_formation(players, "Cover 2")
        assert applied[0]["coverage_role"] == "Flat"
        assert applied[1]["coverage_role"] == "Contain"
        assert "coverage_role" not in applied[2]
        assert "coverage_role" not in players[0]

    def test_unknown_coverage(self):
        with pytest.raises(ValueError):
            apply_coverage_to_formation([], "Cover 9")


class TestFormations:
    def test_list(self):
        names = {f["name"] for f in list_formations()}
        assert {"Shotgun Spread", "Gun Trips Right", "I-Formation", "4-3 Over"} <= names
        assert all(f["side"] == "defense" for f in list_formations("defense"))

    @pytest.mark.parametrize("name", ["Shotgun Spread", "Gun Trips Right", "I-Formation"])
    def test_offense_at_or_behind_line(self, name):
        formation = get_formation(name)
        assert len(formation["players"]) == 11
        assert all(p["y"] >= 200 and _on_canvas(p) for p in formation["players"])

    def test_defense_with_coverage(self):
        formation = get_formation("4-3 Over", "Cover 3")
        by_label = {p["label"]: p for p in formation["players"]}
        assert len(by_label) == 11
        assert by_label["SDE"]["y"] == 185
        assert by_label["MIKE"]["coverage_role"] == "Middle Hook"
        assert by_label["LCB"]["coverage_role"] == "Deep Third"

    def test_unknown_formation(self):
        assert get_formation("Wishbone") is None


class TestPlaybuilderEndpoints:
    def test_formation(self, client):
        response = client.get("/api/v1/playbuilder/formations/I-Formation")
        assert response.status_code == 200
        assert response.json()["personnel"] == "21 personnel (2RB, 1TE, 2WR)"

    def test_formation_unknown_coverage(self, client):
        response = client.get("/api/v1/playbuilder/formations/4-3 Over", params={"coverage": "Cover 9"})
        assert response.status_code == 400

    def test_resolve_alignment(self, client):
        response = client.post("/api/v1/playbuilder/alignments/resolve", json={"responsibility": "A-gap left"})
        assert response.status_code == 200
        assert response.json()["alignment"] == "A_GAP"
        assert response.json()["position"] == {"x": 325, "y": 185}

    def test_motion_for_lineman_rejected(self, client):
        response = client.post("/api/v1/playbuilder/motion", json={
            "position": "RT", "start": {"x": 380, "y": 200}, "motion_type": "Jet",
        })
        assert response.status_code == 400

    def test_motion(self, client):
        response = client.post("/api/v1/playbuilder/motion", json={
            "position": "Z", "start": {"x": 550, "y": 210}, "motion_type": "return",
        })
        assert response.status_code == 200
        assert response.json() == {"motion_type": "Return", "end": {"x": 520, "y": 210}, "legal_at_snap": False}
