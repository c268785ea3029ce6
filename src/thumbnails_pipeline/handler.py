"""Upload-notification entrypoint.

Receives an S3 event notification batch, produces the derivatives for every
record and signals failure to the host (so the batch is redelivered) only
when a source object could not be fetched.
"""

import os
from typing import Any, Dict, List, Optional

from .core import (
    BatchProcessor,
    Deadline,
    InvocationFailedError,
    NotificationRecord,
    PipelineConfig,
    config_from_env,
    get_logger,
    load_registry,
    unquote_key,
)
from .core.factories import PipelineFactory
from .core.logging_config import set_debug

logger = get_logger("handler")

_processor: Optional[BatchProcessor] = None
_config: Optional[PipelineConfig] = None


def parse_notification_records(event: Dict[str, Any]) -> List[NotificationRecord]:
    """
    Extract ``(bucket, key)`` pairs from an S3 event notification.

    Keys are URL-decoded. Records missing a bucket name or object key are
    logged and dropped.
    """
    records = []
    for index, raw in enumerate(event.get("Records") or []):
        s3 = raw.get("s3") or {}
        bucket = (s3.get("bucket") or {}).get("name")
        key = (s3.get("object") or {}).get("key")
        if not bucket or not key:
            logger.warning(f"Dropping malformed notification record #{index}: {raw!r}")
            continue
        records.append(NotificationRecord(bucket=bucket, key=unquote_key(key)))
    return records


def get_processor() -> BatchProcessor:
    """Build the batch processor once per process and reuse it on warm invocations."""
    global _processor, _config
    if _processor is None:
        _config = config_from_env()
        if _config.debug:
            set_debug(True)
        _processor = PipelineFactory.create_batch_processor(
            _config, registry=load_registry(os.getenv("PRESETS"))
        )
        logger.info(
            f"Initialized processor: dest_bucket={_config.dest_bucket}, "
            f"resizer={_config.resizer}, preset_concurrency={_config.preset_concurrency}"
        )
    return _processor


def reset_processor() -> None:
    """Drop the cached processor so the next invocation re-reads configuration."""
    global _processor, _config
    _processor = None
    _config = None


def deadline_from_context(context: Any, margin_ms: int) -> Deadline:
    """Derive the deadline from a host context exposing remaining time."""
    remaining = getattr(context, "get_remaining_time_in_millis", None)
    if remaining is None:
        return Deadline.never()
    return Deadline.from_remaining_ms(remaining(), margin_ms)


def lambda_handler(event: Dict[str, Any], context: Any = None) -> Dict[str, Any]:
    """
    Process one notification batch.

    Returns:
        The batch summary, one outcome row per (source object, preset)

    Raises:
        InvocationFailedError: If any source object could not be fetched
    """
    processor = get_processor()
    records = parse_notification_records(event)
    logger.info(f"Received {len(records)} notification record(s)")

    margin_ms = _config.deadline_margin_ms if _config else 0
    result = processor.handle(records, deadline_from_context(context, margin_ms))
    summary = result.summary()

    for row in summary["outcomes"]:
        if row["status"] == "succeeded":
            logger.debug(f"Outcome: {row}")
        else:
            logger.warning(f"Outcome: {row}")

    if result.cancelled:
        logger.warning("Invocation reached its deadline, returning partial result")

    if result.failed:
        raise InvocationFailedError(
            f"{len(result.fetch_failures)} source object(s) could not be fetched",
            summary=summary,
        )
    return summary
