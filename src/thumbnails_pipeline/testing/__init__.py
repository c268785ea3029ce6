"""Testing utilities and fakes for the thumbnails pipeline."""

from .fakes import (
    UUID_KEY,
    FakeLogger,
    FakeResizeOperation,
    FakeS3Client,
    S3Bucket,
    S3Object,
    create_test_image,
    setup_test_s3_environment,
)

__all__ = [
    "UUID_KEY",
    "FakeLogger",
    "FakeResizeOperation",
    "FakeS3Client",
    "S3Bucket",
    "S3Object",
    "create_test_image",
    "setup_test_s3_environment",
]
