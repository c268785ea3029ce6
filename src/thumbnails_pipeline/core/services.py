"""Derivative generation services: per-object pipeline and per-invocation batch."""

import os
from concurrent.futures import ThreadPoolExecutor
from contextlib import contextmanager
from typing import Iterable, Iterator, List, Optional

from .error_handling import BatchOperationContextManager
from .exceptions import FetchError, ResizeError, UploadError
from .image_utils import always_eligible, detect_content_type
from .key_paths import DEFAULT_STAGING_DIR, derive_source_object, derive_target
from .logging_config import get_logger
from .models import (
    BatchResult,
    DerivativeTarget,
    FetchOutcome,
    NotificationRecord,
    OutcomeStatus,
    PipelineConfig,
    PipelineResult,
    PresetOutcome,
    PresetRegistry,
    RecordResult,
    SourceObject,
)
from .observability import Deadline, LogContext, Stopwatch, StructuredLogger
from .protocols import EligibilityPredicate, LoggerProtocol, ObjectStoreGateway, ResizeOperation


@contextmanager
def staging_file(path: str) -> Iterator[str]:
    """Scope a local scratch file: whatever is at ``path`` is removed on exit."""
    try:
        yield path
    finally:
        try:
            os.remove(path)
        except FileNotFoundError:
            pass
        except OSError as exc:
            get_logger("staging").warning(f"Could not remove staging file {path}: {exc}")


class DerivativePipeline:
    """Fetches one source object and produces every preset's derivative."""

    def __init__(
        self,
        gateway: ObjectStoreGateway,
        resizer: ResizeOperation,
        registry: PresetRegistry,
        config: Optional[PipelineConfig] = None,
        logger: Optional[LoggerProtocol] = None,
    ):
        self._gateway = gateway
        self._resizer = resizer
        self._registry = registry
        self._config = config or PipelineConfig()
        self._logger = logger or StructuredLogger("pipeline")

    @property
    def registry(self) -> PresetRegistry:
        return self._registry

    @property
    def config(self) -> PipelineConfig:
        return self._config

    def process(self, source: SourceObject, deadline: Optional[Deadline] = None) -> PipelineResult:
        """
        Run fetch, then resize and upload for each preset.

        Never raises: fetch, resize and upload failures are captured in the
        returned result. A failed fetch short-circuits all presets; a failed
        preset does not affect its siblings.
        """
        deadline = deadline or Deadline.never()
        log_context = LogContext(
            operation="process_source",
            component="derivative_pipeline",
        ).with_metadata(bucket=source.bucket, key=source.key)

        with staging_file(source.staging_path):
            fetch_outcome = self._fetch(source, log_context)
            if fetch_outcome.failed:
                return PipelineResult(source=source, fetch_outcome=fetch_outcome)

            preset_outcomes = self._run_presets(source, deadline, log_context)

        result = PipelineResult(
            source=source, fetch_outcome=fetch_outcome, preset_outcomes=preset_outcomes
        )
        if result.failed_presets:
            self._logger.warning(
                "Source processed with preset failures",
                log_context,
                failed=",".join(o.preset_name for o in result.failed_presets),
            )
        else:
            self._logger.info("Source processed", log_context, presets=len(preset_outcomes))
        return result

    def _fetch(self, source: SourceObject, log_context: LogContext) -> FetchOutcome:
        fetch_context = log_context.with_operation("fetch_source")
        self._logger.debug("Fetching source", fetch_context, staging_path=source.staging_path)
        try:
            size = self._gateway.fetch(source.bucket, source.key, source.staging_path)
        except FetchError as e:
            reason = str(e)
        except Exception as e:
            reason = f"{type(e).__name__}: {e}"
        else:
            return FetchOutcome(status=OutcomeStatus.SUCCEEDED, size=size or 0)

        self._logger.error("Fetch failed", fetch_context.with_metadata(error=reason))
        return FetchOutcome(status=OutcomeStatus.FETCH_FAILED, reason=reason)

    def _run_presets(
        self, source: SourceObject, deadline: Deadline, log_context: LogContext
    ) -> List[PresetOutcome]:
        targets = [
            derive_target(source, preset, self._config.dest_bucket)
            for preset in self._registry
        ]
        workers = min(self._config.preset_concurrency, len(targets))
        if workers <= 1:
            return [self._process_target(target, deadline, log_context) for target in targets]

        # Outcomes are collected in registry order, not completion order
        with ThreadPoolExecutor(max_workers=workers) as executor:
            futures = [
                executor.submit(self._process_target, target, deadline, log_context)
                for target in targets
            ]
            return [future.result() for future in futures]

    def _process_target(
        self, target: DerivativeTarget, deadline: Deadline, log_context: LogContext
    ) -> PresetOutcome:
        preset_context = log_context.with_operation("create_derivative").with_metadata(
            preset=target.preset.name,
            destination=f"s3://{target.destination_bucket}/{target.destination_key}",
        )

        def outcome(status: OutcomeStatus, reason: str = "", **fields) -> PresetOutcome:
            return PresetOutcome(
                preset_name=target.preset.name,
                destination_bucket=target.destination_bucket,
                destination_key=target.destination_key,
                status=status,
                reason=reason,
                **fields,
            )

        if deadline.expired():
            self._logger.warning("Deadline reached, preset not attempted", preset_context)
            return outcome(OutcomeStatus.NOT_ATTEMPTED, "deadline reached before start")

        stopwatch = Stopwatch()
        with staging_file(target.local_output_path):
            try:
                self._resizer.resize(
                    target.source.staging_path,
                    target.preset,
                    target.local_output_path,
                    timeout=deadline.remaining(),
                )
                with open(target.local_output_path, "rb") as handle:
                    data = handle.read()
            except ResizeError as e:
                return self._failed(outcome, OutcomeStatus.RESIZE_FAILED, str(e), preset_context)
            except Exception as e:
                return self._failed(
                    outcome, OutcomeStatus.RESIZE_FAILED, f"{type(e).__name__}: {e}", preset_context
                )

            content_type = detect_content_type(data)
            try:
                self._gateway.store(
                    target.destination_bucket,
                    target.destination_key,
                    data,
                    len(data),
                    content_type,
                    self._config.upload_acl,
                )
            except UploadError as e:
                return self._failed(outcome, OutcomeStatus.UPLOAD_FAILED, str(e), preset_context)
            except Exception as e:
                return self._failed(
                    outcome, OutcomeStatus.UPLOAD_FAILED, f"{type(e).__name__}: {e}", preset_context
                )

        self._logger.info(
            "Derivative stored",
            preset_context,
            content_type=content_type,
            size=len(data),
            processing_time_ms=round(stopwatch.elapsed_ms, 1),
        )
        return outcome(
            OutcomeStatus.SUCCEEDED,
            content_type=content_type,
            size=len(data),
            processing_time=stopwatch.elapsed,
        )

    def _failed(self, outcome, status: OutcomeStatus, reason: str, context: LogContext) -> PresetOutcome:
        self._logger.error(f"Derivative {status.value}", context.with_metadata(error=reason))
        return outcome(status, reason)


class BatchProcessor:
    """Drives the derivative pipeline over one invocation's notification records."""

    def __init__(
        self,
        pipeline: DerivativePipeline,
        is_eligible: EligibilityPredicate = always_eligible,
        staging_dir: str = DEFAULT_STAGING_DIR,
        logger: Optional[LoggerProtocol] = None,
    ):
        self._pipeline = pipeline
        self._is_eligible = is_eligible
        self._staging_dir = staging_dir
        self._logger = logger or StructuredLogger("batch")

    def handle(
        self, records: Iterable[NotificationRecord], deadline: Optional[Deadline] = None
    ) -> BatchResult:
        """
        Process records sequentially, in the order received.

        The result is marked failed only when some record's fetch failed.
        When the deadline expires, records not yet started are reported as
        not attempted and the partial result is returned.
        """
        records = list(records)
        deadline = deadline or Deadline.never()
        result = BatchResult()

        with BatchOperationContextManager(f"Derivative batch of {len(records)} record(s)") as batch:
            for index, record in enumerate(records):
                if deadline.expired():
                    self._logger.warning(
                        "Deadline reached, abandoning remaining records",
                        remaining=len(records) - index,
                    )
                    result.cancelled = True
                    result.records.extend(
                        RecordResult(
                            record=pending,
                            status=OutcomeStatus.NOT_ATTEMPTED,
                            reason="deadline reached before start",
                        )
                        for pending in records[index:]
                    )
                    break

                record_result = self._handle_record(record, deadline)
                result.records.append(record_result)
                self._report(batch, record_result)

            if any(r.pipeline_result and r.pipeline_result.interrupted for r in result.records):
                result.cancelled = True

        return result

    def _handle_record(self, record: NotificationRecord, deadline: Deadline) -> RecordResult:
        source = derive_source_object(record.bucket, record.key, self._staging_dir)
        if not source.file_name:
            # Folder markers such as "p/images/" have no file name to stage
            self._logger.info("Skipping folder marker", bucket=record.bucket, key=record.key)
            return RecordResult(record=record, status=OutcomeStatus.SKIPPED, reason="folder marker")

        try:
            eligible = self._is_eligible(record.key)
        except Exception as e:
            self._logger.error(
                "Eligibility check failed, skipping", bucket=record.bucket, key=record.key, error=str(e)
            )
            return RecordResult(
                record=record, status=OutcomeStatus.SKIPPED, reason=f"eligibility check failed: {e}"
            )

        if not eligible:
            self._logger.info("Skipping ineligible source", bucket=record.bucket, key=record.key)
            return RecordResult(record=record, status=OutcomeStatus.SKIPPED, reason="ineligible source")

        pipeline_result = self._pipeline.process(source, deadline)
        if pipeline_result.fetch_failed:
            return RecordResult(
                record=record,
                status=OutcomeStatus.FETCH_FAILED,
                reason=pipeline_result.fetch_outcome.reason,
                pipeline_result=pipeline_result,
            )

        failed = pipeline_result.failed_presets
        return RecordResult(
            record=record,
            status=OutcomeStatus.SUCCEEDED,
            reason=f"{len(failed)} preset(s) failed" if failed else "",
            pipeline_result=pipeline_result,
        )

    @staticmethod
    def _report(batch: BatchOperationContextManager, record_result: RecordResult) -> None:
        item = f"{record_result.record.bucket}/{record_result.record.key}"
        if record_result.status == OutcomeStatus.FETCH_FAILED:
            batch.add_error(record_result.reason, item, kind=OutcomeStatus.FETCH_FAILED.value)
        elif record_result.pipeline_result is not None:
            for outcome in record_result.pipeline_result.failed_presets:
                batch.add_error(outcome.reason, f"{item}:{outcome.preset_name}", kind=outcome.status.value)
