"""Tests for film storage routing between S3 and the Supabase bucket."""

import io

from filmroom.config import settings
from filmroom.modules.videos import s3_storage
from filmroom.modules.videos.storage import FilmStorage


class RecordingS3:
    """Stands in for S3Storage; records keys instead of calling AWS."""

    bucket_name = "film-archive"

    def __init__(self, fail_deletes=False):
        self.objects = {}
        self.fail_deletes = fail_deletes

    def upload_file(self, file, key, content_type="video/mp4"):
        self.objects[key] = file.read()
        return f"s3://{self.bucket_name}/{key}"

    def delete_file(self, key):
        if self.fail_deletes:
            return False
        return self.objects.pop(key, None) is not None

    def key_from_url(self, url):
        return url.replace(f"s3://{self.bucket_name}/", "", 1)


class TestSupabaseBucket:
    def test_upload_and_remove(self, supabase):
        storage = FilmStorage(supabase)
        path = storage.upload("g1/1_film.mp4", io.BytesIO(b"data"), "video/mp4")
        assert path == "g1/1_film.mp4"
        assert supabase.storage_objects == {"game-film/g1/1_film.mp4": b"data"}
        assert storage.remove([path, None, ""]) == 1
        assert supabase.storage_objects == {}

    def test_s3_path_without_s3_is_skipped(self, supabase):
        storage = FilmStorage(supabase)
        storage.s3_storage = None
        assert storage.remove(["s3://film-archive/g1/x.mp4"]) == 0


class TestS3:
    def test_upload_goes_to_s3(self, supabase):
        s3 = RecordingS3()
        storage = FilmStorage(supabase, s3_storage=s3)
        path = storage.upload("g1/1_film.mp4", io.BytesIO(b"data"), "video/mp4")
        assert path == "s3://film-archive/g1/1_film.mp4"
        assert s3.objects == {"g1/1_film.mp4": b"data"}
        assert supabase.storage_objects == {}

    def test_mixed_removal(self, supabase):
        s3 = RecordingS3()
        storage = FilmStorage(supabase, s3_storage=s3)
        s3_path = storage.upload("g1/a.mp4", io.BytesIO(b"a"), "video/mp4")
        supabase.storage_objects["game-film/g1/b.mp4"] = b"b"
        assert storage.remove([s3_path, "g1/b.mp4"]) == 2
        assert s3.objects == {}
        assert supabase.storage_objects == {}

    def test_failed_s3_delete_not_counted(self, supabase):
        storage = FilmStorage(supabase, s3_storage=RecordingS3(fail_deletes=True))
        assert storage.remove(["s3://film-archive/g1/a.mp4"]) == 0


class FakeS3Client:
    """Records upload_fileobj calls the way boto3's S3 client receives them."""

    def __init__(self):
        self.uploads = []

    def upload_fileobj(self, fileobj, bucket, key, ExtraArgs=None):
        self.uploads.append((bucket, key, fileobj.read(), ExtraArgs))


class TestS3Storage:
    def test_streams_file_object(self, monkeypatch):
        client = FakeS3Client()
        monkeypatch.setattr(settings, "aws_access_key_id", "key")
        monkeypatch.setattr(settings, "aws_secret_access_key", "secret")
        monkeypatch.setattr(settings, "s3_bucket_name", "film-archive")
        monkeypatch.setattr(s3_storage.boto3, "client", lambda *args, **kwargs: client)

        url = s3_storage.S3Storage().upload_file(io.BytesIO(b"film"), "g1/a.mp4", "video/quicktime")

        assert url == "s3://film-archive/g1/a.mp4"
        assert client.uploads == [("film-archive", "g1/a.mp4", b"film", {"ContentType": "video/quicktime"})]
