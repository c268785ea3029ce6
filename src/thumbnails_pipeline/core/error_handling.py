# src/thumbnails_pipeline/core/error_handling.py

import functools
import logging
from typing import Type

from botocore.exceptions import BotoCoreError, ClientError as BotocoreClientError
from PIL import UnidentifiedImageError as PILUnidentifiedImageError

from .exceptions import ResizeError, ThumbnailsPipelineError


def client_error_code(exc: BaseException) -> str:
    """Return the S3 error code carried by a botocore ClientError, if any."""
    cause = exc if isinstance(exc, BotocoreClientError) else exc.__cause__
    if isinstance(cause, BotocoreClientError):
        return cause.response.get("Error", {}).get("Code", "")
    return ""


def with_error_handling(error_class: Type[ThumbnailsPipelineError] = ThumbnailsPipelineError):
    """
    Decorator translating library exceptions into the pipeline's taxonomy.

    botocore errors and OS errors become ``error_class`` (which should be an
    ``ObjectStoreError`` for gateway calls), Pillow decode errors become
    ``ResizeError``. Pipeline errors pass through untouched.
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            logger = logging.getLogger(func.__module__ + '.' + func.__name__)
            try:
                return func(*args, **kwargs)
            except ThumbnailsPipelineError:
                raise
            except Exception as e:
                logger.debug(f"Error in '{func.__name__}': {e}", exc_info=True)
                if isinstance(e, BotocoreClientError):
                    code = client_error_code(e)
                    raise error_class(f"{func.__name__} failed ({code}): {e}") from e
                if isinstance(e, BotoCoreError):
                    raise error_class(f"{func.__name__} failed: {e}") from e
                if isinstance(e, PILUnidentifiedImageError):
                    raise ResizeError(f"Failed to identify image in {func.__name__}: {e}") from e
                if isinstance(e, OSError):
                    raise error_class(f"{func.__name__} failed: {e}") from e
                raise
        return wrapper
    return decorator


class BatchOperationContextManager:
    """
    Context manager for batch operations to collect and summarize errors.
    """
    def __init__(self, operation_name="Batch Operation"):
        self.operation_name = operation_name
        self.errors = []
        self.logger = logging.getLogger(self.__class__.__module__ + '.' + self.__class__.__name__)

    def __enter__(self):
        self.logger.info(f"Starting {self.operation_name}.")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type:
            self.logger.error(
                f"{self.operation_name} failed due to an unhandled exception: {exc_val}",
                exc_info=(exc_type, exc_val, exc_tb)
            )
        elif self.errors:
            self.logger.warning(
                f"{self.operation_name} completed with {len(self.errors)} error(s)."
            )
            for i, error_detail in enumerate(self.errors):
                self.logger.warning(
                    f"  Error {i+1}/{len(self.errors)} [{error_detail['kind']}] "
                    f"for '{error_detail['item']}': {error_detail['error']}"
                )
        else:
            self.logger.info(f"{self.operation_name} completed successfully.")
        return False

    def add_error(self, error_message: str, item_identifier: str = "Unknown item", kind: str = "error"):
        """
        Report an error for a specific item within the 'with' block.

        Args:
            error_message (str): The error message or exception string.
            item_identifier (str): Identifies the failed item, e.g. ``bucket/key:preset``.
            kind (str): Outcome category, e.g. ``fetch_failed``.
        """
        self.errors.append({"item": item_identifier, "error": str(error_message), "kind": kind})
        self.logger.debug(f"Error added for item '{item_identifier}' in {self.operation_name}: {error_message}")

    def count(self, kind: str) -> int:
        return sum(1 for error in self.errors if error["kind"] == kind)


