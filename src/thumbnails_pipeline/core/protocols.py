"""Protocol definitions for the pipeline's external collaborators."""

from typing import Any, BinaryIO, Callable, Dict, Optional, Protocol, Union

from .models import ResizePreset

EligibilityPredicate = Callable[[str], bool]


class S3ClientProtocol(Protocol):
    """Subset of the boto3 S3 client used by the gateway."""

    def get_object(self, Bucket: str, Key: str) -> Dict[str, Any]:
        """Get object from S3."""
        ...

    def put_object(self, **kwargs: Any) -> Dict[str, Any]:
        """Put object to S3."""
        ...


class ObjectStoreGateway(Protocol):
    """Object store operations needed by the derivative pipeline."""

    def fetch(self, bucket: str, key: str, destination_path: str) -> int:
        """Download an object into a local file, returning its size.

        Raises:
            FetchError: If the object cannot be read or written locally
        """
        ...

    def store(
        self,
        bucket: str,
        key: str,
        body: Union[bytes, BinaryIO],
        content_length: int,
        content_type: str,
        acl: Optional[str] = None,
    ) -> Dict[str, Any]:
        """Upload a derivative.

        Raises:
            UploadError: If the store call fails
        """
        ...


class ResizeOperation(Protocol):
    """Black-box resampling of a local image file."""

    def resize(
        self,
        source_path: str,
        preset: ResizePreset,
        output_path: str,
        timeout: Optional[float] = None,
    ) -> None:
        """Write a resized copy of ``source_path`` to ``output_path``.

        ``timeout`` is the time left before the invocation deadline, in
        seconds; implementations that can abandon work should honour it.

        Raises:
            ResizeError: On any failure, with a human readable message
        """
        ...


class LoggerProtocol(Protocol):
    """Protocol for logging operations."""

    def debug(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...

    def info(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...

    def warning(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...

    def error(self, message: str, context: Any = None, **kwargs: Any) -> None:
        ...
