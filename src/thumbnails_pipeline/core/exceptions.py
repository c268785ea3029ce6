"""Custom exceptions for the thumbnails pipeline."""


class ThumbnailsPipelineError(Exception):
    """Base exception for all thumbnails pipeline errors."""


class ConfigurationError(ThumbnailsPipelineError):
    """Error raised for invalid configuration options."""


class ObjectStoreError(ThumbnailsPipelineError):
    """Error raised for object store failures."""


class FetchError(ObjectStoreError):
    """The source object could not be downloaded to its staging path."""


class UploadError(ObjectStoreError):
    """A derivative could not be stored."""


class ResizeError(ThumbnailsPipelineError):
    """The resize operation failed for one preset."""


class InvocationFailedError(ThumbnailsPipelineError):
    """Raised by entrypoints so the trigger infrastructure redelivers the batch."""

    def __init__(self, message: str, summary: dict = None):
        super().__init__(message)
        self.summary = summary or {}
