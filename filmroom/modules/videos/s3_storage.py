import boto3
from boto3.exceptions import S3UploadFailedError
from botocore.exceptions import ClientError
from filmroom.config import settings
from typing import BinaryIO
import logging

logger = logging.getLogger(__name__)


class S3Storage:
    def __init__(self):
        if not settings.s3_configured:
            raise ValueError("AWS S3 credentials and bucket name must be configured")

        self.s3_client = boto3.client(
            's3',
            aws_access_key_id=settings.aws_access_key_id,
            aws_secret_access_key=settings.aws_secret_access_key,
            region_name=settings.aws_region
        )
        self.bucket_name = settings.s3_bucket_name

    def upload_file(self, file: BinaryIO, key: str, content_type: str = "video/mp4") -> str:
        """Stream film to S3 (multipart above the transfer threshold) and return the s3:// URL"""
        try:
            self.s3_client.upload_fileobj(
                file,
                self.bucket_name,
                key,
                ExtraArgs={"ContentType": content_type}
            )
            return f"s3://{self.bucket_name}/{key}"
        except (ClientError, S3UploadFailedError) as e:
            logger.error(f"Failed to upload film to S3: {str(e)}")
            raise

    def delete_file(self, key: str) -> bool:
        try:
            self.s3_client.delete_object(Bucket=self.bucket_name, Key=key)
            return True
        except ClientError as e:
            logger.error(f"Failed to delete film from S3: {str(e)}")
            return False

    def key_from_url(self, url: str) -> str:
        return url.replace(f"s3://{self.bucket_name}/", "", 1)
