"""Tests for upload pre-flight checks and film signatures."""

import pytest

from filmroom.modules.videos.validation import (
    UploadRejected,
    MULTIPART_OVERHEAD_BYTES,
    build_storage_path,
    check_declared_length,
    check_upload,
    has_video_signature,
)

MAX_BYTES = 1000


class TestCheckUpload:
    def test_accepts_mp4(self):
        check_upload("week1.mp4", 500, "video/mp4", MAX_BYTES)

    def test_missing_fields(self):
        with pytest.raises(UploadRejected) as exc:
            check_upload("", 0, None, MAX_BYTES)
        assert exc.value.status_code == 400

    def test_bad_extension(self):
        with pytest.raises(UploadRejected) as exc:
            check_upload("notes.txt", 10, None, MAX_BYTES)
        assert exc.value.reason == "invalid_extension"

    def test_bad_mime(self):
        with pytest.raises(UploadRejected) as exc:
            check_upload("clip.mp4", 10, "image/png", MAX_BYTES)
        assert exc.value.reason == "invalid_mime_type"

    def test_oversize_is_429(self):
        with pytest.raises(UploadRejected) as exc:
            check_upload("clip.mov", MAX_BYTES + 1, "video/quicktime", MAX_BYTES)
        assert exc.value.status_code == 429


class TestDeclaredLength:
    def test_within_limit_and_overhead(self):
        check_declared_length(str(MAX_BYTES + MULTIPART_OVERHEAD_BYTES), MAX_BYTES)

    def test_missing_or_malformed_header_ignored(self):
        check_declared_length(None, MAX_BYTES)
        check_declared_length("lots", MAX_BYTES)

    def test_oversize_request_is_429(self):
        with pytest.raises(UploadRejected) as exc:
            check_declared_length(str(MAX_BYTES + MULTIPART_OVERHEAD_BYTES + 1), MAX_BYTES)
        assert exc.value.status_code == 429
        assert exc.value.reason == "file_too_large"


class TestSignatures:
    def test_mp4(self):
        assert has_video_signature(b"\x00\x00\x00\x18ftypmp42")

    def test_webm(self):
        assert has_video_signature(b"\x1a\x45\xdf\xa3\x01\x00")

    def test_text_rejected(self):
        assert not has_video_signature(b"hello world")

    def test_short_header(self):
        assert not has_video_signature(b"\x00\x00")


def test_storage_path_sanitized():
    path = build_storage_path("Week 1 (home).mp4", game_id="g1", timestamp_ms=1700000000000)
    assert path == "g1/1700000000000_Week_1__home_.mp4"
