"""Tests for film upload, camera limits, deletion cascade and timeline markers."""

import io

import pytest
from fastapi import HTTPException

from filmroom.config import settings
from filmroom.modules.videos.schemas import MarkerCreate, UploadPrecheckRequest, VideoUpdate
from filmroom.modules.videos.service import VideoService
from filmroom.modules.videos import validation

MP4 = b"\x00\x00\x00\x18ftypmp42" + b"\x00" * 64


@pytest.fixture
def game(supabase, team):
    supabase.seed("games", {"id": "g1", "team_id": "team-1", "name": "Week 1", "is_locked": False})
    return supabase.rows("games", id="g1")[0]


@pytest.fixture
def service(supabase, game):
    return VideoService(supabase)


@pytest.fixture
def video(service, coach):
    return service.upload_video("team-1", "g1", "Sideline Cam.mp4", io.BytesIO(MP4), len(MP4), "video/mp4", coach["id"])


# ---------------------------------------------------------------------------
# Upload
# ---------------------------------------------------------------------------

class TestUpload:
    def test_stores_film_and_row(self, video, supabase):
        assert video.camera_order == 1
        assert video.file_path.startswith("g1/")
        assert video.file_path.endswith("_Sideline_Cam.mp4")
        assert f"game-film/{video.file_path}" in supabase.storage_objects

    def test_basic_plan_allows_one_camera(self, service, video, coach):
        with pytest.raises(HTTPException) as exc:
            service.upload_video("team-1", "g1", "endzone.mp4", io.BytesIO(MP4), len(MP4), "video/mp4", coach["id"])
        assert exc.value.status_code == 429
        assert "Camera limit reached" in exc.value.detail

    def test_plus_plan_numbers_cameras(self, service, supabase, video, coach):
        supabase.rows("subscriptions", team_id="team-1")[0]["tier"] = "plus"
        second = service.upload_video("team-1", "g1", "endzone.mp4", io.BytesIO(MP4), len(MP4), "video/mp4", coach["id"])
        assert second.camera_order == 2

    def test_content_must_be_video(self, service, coach):
        with pytest.raises(HTTPException) as exc:
            service.upload_video("team-1", "g1", "notes.mp4", io.BytesIO(b"not really a video"), 18, "video/mp4", coach["id"])
        assert exc.value.status_code == 400

    def test_locked_game_refused(self, service, supabase, coach):
        supabase.rows("games", id="g1")[0]["is_locked"] = True
        with pytest.raises(HTTPException) as exc:
            service.upload_video("team-1", "g1", "film.mp4", io.BytesIO(MP4), len(MP4), "video/mp4", coach["id"])
        assert exc.value.status_code == 429

    def test_unknown_game(self, service, coach):
        with pytest.raises(HTTPException) as exc:
            service.upload_video("team-1", "nope", "film.mp4", io.BytesIO(MP4), len(MP4), "video/mp4", coach["id"])
        assert exc.value.status_code == 404

    def test_precheck(self, service):
        result = service.precheck_upload(
            "team-1", UploadPrecheckRequest(game_id="g1", file_name="a b.mov", file_size=10, mime_type="video/quicktime")
        )
        assert result.camera_limit == 1
        assert result.camera_count == 0
        assert result.storage_path.endswith("_a_b.mov")

    def test_upload_endpoint(self, client, game):
        response = client.post(
            "/api/v1/teams/team-1/games/g1/videos",
            files={"file": ("film.mp4", MP4, "video/mp4")},
            data={"camera_label": "Press box"},
        )
        assert response.status_code == 201
        assert response.json()["camera_label"] == "Press box"

    def test_whole_film_stored_after_header_check(self, video, supabase):
        assert supabase.storage_objects[f"game-film/{video.file_path}"] == MP4

    def test_oversize_part_refused(self, client, game, supabase, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 10)
        response = client.post("/api/v1/teams/team-1/games/g1/videos",
                               files={"file": ("film.mp4", MP4, "video/mp4")})
        assert response.status_code == 429
        assert response.json()["detail"].startswith("File is")
        assert supabase.storage_objects == {}

    def test_oversize_request_refused_from_content_length(self, client, game, supabase, monkeypatch):
        monkeypatch.setattr(settings, "max_upload_bytes", 10)
        monkeypatch.setattr(validation, "MULTIPART_OVERHEAD_BYTES", 0)
        monkeypatch.setattr(VideoService, "upload_video",
                            lambda *args, **kwargs: pytest.fail("film should not be read"))
        response = client.post("/api/v1/teams/team-1/games/g1/videos",
                               files={"file": ("film.mp4", MP4, "video/mp4")})
        assert response.status_code == 429
        assert response.json()["detail"].startswith("Request is")
        assert supabase.storage_objects == {}


# ---------------------------------------------------------------------------
# Read, rename, delete
# ---------------------------------------------------------------------------

class TestManageFilm:
    def test_rename(self, service, video):
        assert service.update_video("team-1", video.id, VideoUpdate(name="Sideline")).name == "Sideline"

    def test_blank_name(self, service, video):
        with pytest.raises(HTTPException) as exc:
            service.update_video("team-1", video.id, VideoUpdate(name="  "))
        assert exc.value.status_code == 400

    def test_other_team_cannot_see_video(self, service, supabase, video):
        supabase.seed("teams", {"id": "team-2", "name": "Rivals"})
        with pytest.raises(HTTPException) as exc:
            service.get_video("team-2", video.id)
        assert exc.value.status_code == 404

    def test_delete_cascades(self, service, supabase, video, coach):
        supabase.seed("play_instances", {"id": "p1", "video_id": video.id}, {"id": "p2", "video_id": video.id})
        supabase.seed("player_participation", {"play_instance_id": "p1", "player_id": "x"})
        service.add_marker("team-1", video.id, MarkerCreate(timestamp_seconds=12.5, marker_type="big_play"), coach["id"])

        result = service.delete_video("team-1", video.id)
        assert (result.deleted_plays, result.deleted_markers, result.storage_removed) == (2, 1, 1)
        assert supabase.rows("play_instances") == []
        assert supabase.rows("player_participation") == []
        assert supabase.rows("videos") == []
        assert supabase.storage_objects == {}


class TestMarkers:
    def test_listed_in_time_order(self, service, video, coach):
        service.add_marker("team-1", video.id, MarkerCreate(timestamp_seconds=90, marker_type="timeout"), coach["id"])
        service.add_marker("team-1", video.id, MarkerCreate(timestamp_seconds=5, label="Kickoff"), coach["id"])
        assert [m.timestamp_seconds for m in service.list_markers("team-1", video.id)] == [5, 90]

    def test_invalid_type(self, service, video, coach):
        with pytest.raises(HTTPException) as exc:
            service.add_marker("team-1", video.id, MarkerCreate(timestamp_seconds=1, marker_type="snack"), coach["id"])
        assert exc.value.status_code == 400

    def test_delete_missing_marker(self, service, video):
        with pytest.raises(HTTPException) as exc:
            service.delete_marker("team-1", video.id, "nope")
        assert exc.value.status_code == 404
