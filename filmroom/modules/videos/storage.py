from supabase import Client
from filmroom.config import settings
from filmroom.database.supabase_client import film_bucket
from filmroom.modules.videos.s3_storage import S3Storage
from typing import BinaryIO, Iterable, Optional
import logging

logger = logging.getLogger(__name__)


class FilmStorage:
    """Film objects live in S3 when configured, otherwise in the Supabase Storage film bucket."""

    def __init__(self, supabase: Client, s3_storage: Optional[S3Storage] = None):
        self.supabase = supabase
        self.bucket = settings.film_bucket
        self.s3_storage = s3_storage
        if self.s3_storage is None and settings.s3_configured:
            try:
                self.s3_storage = S3Storage()
                logger.info("S3 storage initialized successfully")
            except Exception as e:
                logger.warning(f"S3 storage initialization failed ({str(e)}), will use Supabase Storage")
                self.s3_storage = None

    def upload(self, path: str, file: BinaryIO, content_type: str) -> str:
        """Store film and return the path to save on the videos row. Raises on failure."""
        if self.s3_storage:
            logger.info(f"Uploading film to S3: {path}")
            return self.s3_storage.upload_file(file, path, content_type)
        logger.info(f"Uploading film to Supabase Storage: {self.bucket}/{path}")
        film_bucket(self.supabase).upload(
            path,
            # storage API takes the object body in a single request
            file.read(),
            file_options={"content-type": content_type}
        )
        return path

    def remove(self, paths: Iterable[Optional[str]]) -> int:
        """Best-effort removal; failures are logged and skipped. Returns the number removed."""
        removed = 0
        supabase_paths = []
        for path in paths:
            if not path:
                continue
            if path.startswith("s3://"):
                if not self.s3_storage:
                    logger.warning(f"Cannot remove {path}: S3 is not configured")
                    continue
                if self.s3_storage.delete_file(self.s3_storage.key_from_url(path)):
                    removed += 1
            else:
                supabase_paths.append(path)
        if supabase_paths:
            try:
                film_bucket(self.supabase).remove(supabase_paths)
                removed += len(supabase_paths)
            except Exception as e:
                logger.warning(f"Failed to remove film from Supabase Storage ({len(supabase_paths)} objects): {e}")
        return removed
