"""Object store gateway backed by an S3 client."""

import shutil
from typing import Any, BinaryIO, Dict, Optional, Union

from .error_handling import with_error_handling
from .exceptions import FetchError, UploadError
from .logging_config import get_logger
from .protocols import S3ClientProtocol

COPY_CHUNK_SIZE = 1024 * 1024


class S3ObjectStoreGateway:
    """Fetches originals into local files and stores derivatives in S3."""

    def __init__(self, s3_client: S3ClientProtocol):
        self._s3_client = s3_client
        self._logger = get_logger("gateway")

    @with_error_handling(FetchError)
    def fetch(self, bucket: str, key: str, destination_path: str) -> int:
        """Stream ``s3://bucket/key`` into ``destination_path``, overwriting it."""
        self._logger.debug(f"Downloading s3://{bucket}/{key} to {destination_path}")
        response = self._s3_client.get_object(Bucket=bucket, Key=key)
        body = response["Body"]
        try:
            with open(destination_path, "wb") as handle:
                shutil.copyfileobj(body, handle, COPY_CHUNK_SIZE)
                size = handle.tell()
        finally:
            body.close()

        self._logger.info(f"Downloaded s3://{bucket}/{key} ({size} bytes) to {destination_path}")
        return size

    @with_error_handling(UploadError)
    def store(
        self,
        bucket: str,
        key: str,
        body: Union[bytes, BinaryIO],
        content_length: int,
        content_type: str,
        acl: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload one derivative. ``acl=None`` leaves the bucket default in place."""
        params: Dict[str, Any] = {
            "Bucket": bucket,
            "Key": key,
            "Body": body,
            "ContentLength": content_length,
            "ContentType": content_type,
        }
        if acl:
            params["ACL"] = acl

        self._logger.info(f"Uploading to s3://{bucket}/{key} ({content_type}, {content_length} bytes)")
        return self._s3_client.put_object(**params)
