"""S3 implementation of DocumentStorage."""

import logging

import boto3
from botocore.exceptions import ClientError

from ..domain.interfaces.document_repository import DocumentStorage

logger = logging.getLogger(__name__)


class S3DocumentStorage(DocumentStorage):
    """Stores document files in an S3 bucket and hands out presigned URLs."""

    def __init__(self, bucket_name: str, region_name: str = "us-east-1", prefix: str = "documents"):
        """Initialize the S3 document storage.

        Args:
            bucket_name: The name of the S3 bucket for document files.
            region_name: AWS region name (default: us-east-1).
            prefix: Key prefix under which files are stored.
        """
        self.bucket_name = bucket_name
        self.prefix = prefix.strip("/")
        self.s3_client = boto3.client("s3", region_name=region_name)

    def _key(self, path: str) -> str:
        return f"{self.prefix}/{path}" if self.prefix else path

    def upload(self, path: str, data: bytes, mime_type: str) -> str:
        self.s3_client.put_object(
            Bucket=self.bucket_name,
            Key=self._key(path),
            Body=data,
            ContentType=mime_type,
        )
        logger.info(f"Uploaded document file: {self._key(path)}")
        return path

    def signed_download_url(self, path: str, expires_in: int) -> str:
        """Return a presigned GET URL.

        Raises:
            ValueError: If the object does not exist.
        """
        key = self._key(path)
        try:
            self.s3_client.head_object(Bucket=self.bucket_name, Key=key)
        except ClientError as e:
            logger.error(f"S3 error: {e}")
            raise ValueError(f"File {path} not found") from e

        return self.s3_client.generate_presigned_url(
            "get_object",
            Params={"Bucket": self.bucket_name, "Key": key},
            ExpiresIn=expires_in,
        )

    def delete(self, path: str) -> None:
        self.s3_client.delete_object(Bucket=self.bucket_name, Key=self._key(path))
