"""Shared data models for the thumbnails pipeline."""

from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


class ResizePreset(BaseModel):
    """A named derivative size and quality tier."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1)
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    quality: int = Field(ge=0, le=100)

    @field_validator("name")
    @classmethod
    def _name_is_path_segment(cls, value: str) -> str:
        # Used verbatim as a key segment and before the extension.
        if "/" in value or "." in value:
            raise ValueError(f"Preset name must not contain '/' or '.': {value!r}")
        return value

    @property
    def geometry(self) -> str:
        return f"{self.width}x{self.height}"


class PresetRegistry(BaseModel):
    """Immutable, ordered collection of resize presets."""

    model_config = ConfigDict(frozen=True)

    presets: Tuple[ResizePreset, ...] = ()

    @model_validator(mode="after")
    def _unique_names(self) -> "PresetRegistry":
        seen = set()
        for preset in self.presets:
            if preset.name in seen:
                raise ValueError(f"Duplicate preset name: {preset.name}")
            seen.add(preset.name)
        return self

    def __iter__(self) -> Iterator[ResizePreset]:  # type: ignore[override]
        return iter(self.presets)

    def __len__(self) -> int:
        return len(self.presets)

    @property
    def names(self) -> List[str]:
        return [preset.name for preset in self.presets]

    def get(self, name: str) -> Optional[ResizePreset]:
        """Look up a preset by name."""
        for preset in self.presets:
            if preset.name == name:
                return preset
        return None

    @classmethod
    def parse(cls, preset_list: str) -> "PresetRegistry":
        """
        Build a registry from a compact preset string.

        Args:
            preset_list: Comma separated ``name:WIDTHxHEIGHT:QUALITY`` entries,
                e.g. ``"thumbnail:200x200:95,gallery:600x600:80"``

        Returns:
            Registry holding the presets in the order given

        Raises:
            ValueError: If an entry is malformed
        """
        presets = []
        for entry in preset_list.split(","):
            entry = entry.strip()
            if not entry:
                continue
            try:
                name, geometry, quality = entry.split(":")
                width, height = geometry.lower().split("x")
                presets.append(
                    ResizePreset(
                        name=name.strip(),
                        width=int(width),
                        height=int(height),
                        quality=int(quality),
                    )
                )
            except ValueError as exc:
                raise ValueError(f"Invalid preset entry {entry!r}: {exc}") from exc
        return cls(presets=tuple(presets))


class NotificationRecord(BaseModel):
    """One uploaded object named by an upload notification."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str


class SourceObject(BaseModel):
    """An uploaded original and the paths derived from its key."""

    model_config = ConfigDict(frozen=True)

    bucket: str
    key: str
    staging_dir: str
    staging_path: str
    file_name: str
    extension: str
    base_name: str
    destination_prefix: str


class DerivativeTarget(BaseModel):
    """Pairing of a source object with one preset."""

    model_config = ConfigDict(frozen=True)

    source: SourceObject
    preset: ResizePreset
    local_output_path: str
    destination_bucket: str
    destination_key: str


class OutcomeStatus(str, Enum):
    """Outcome of a fetch, a preset, or a whole record."""

    SUCCEEDED = "succeeded"
    FETCH_FAILED = "fetch_failed"
    RESIZE_FAILED = "resize_failed"
    UPLOAD_FAILED = "upload_failed"
    SKIPPED = "skipped"
    NOT_ATTEMPTED = "not_attempted"


class FetchOutcome(BaseModel):
    """Result of downloading the source object."""

    status: OutcomeStatus = OutcomeStatus.SUCCEEDED
    reason: str = ""
    size: int = 0

    @property
    def failed(self) -> bool:
        return self.status == OutcomeStatus.FETCH_FAILED


class PresetOutcome(BaseModel):
    """Result of producing one derivative."""

    preset_name: str
    destination_bucket: str
    destination_key: str
    status: OutcomeStatus
    reason: str = ""
    content_type: str = ""
    size: int = 0
    processing_time: float = 0.0

    @property
    def succeeded(self) -> bool:
        return self.status == OutcomeStatus.SUCCEEDED


class PipelineResult(BaseModel):
    """Aggregate result of processing one source object."""

    source: SourceObject
    fetch_outcome: FetchOutcome
    preset_outcomes: List[PresetOutcome] = Field(default_factory=list)

    @property
    def fetch_failed(self) -> bool:
        return self.fetch_outcome.failed

    @property
    def failed_presets(self) -> List[PresetOutcome]:
        return [outcome for outcome in self.preset_outcomes if not outcome.succeeded]

    @property
    def interrupted(self) -> bool:
        """True when the deadline stopped some presets from starting."""
        return any(o.status == OutcomeStatus.NOT_ATTEMPTED for o in self.preset_outcomes)

    @property
    def succeeded(self) -> bool:
        return not self.fetch_failed and not self.failed_presets


class RecordResult(BaseModel):
    """Result for one notification record within a batch."""

    record: NotificationRecord
    status: OutcomeStatus
    reason: str = ""
    pipeline_result: Optional[PipelineResult] = None


class BatchResult(BaseModel):
    """Aggregate result of one invocation."""

    records: List[RecordResult] = Field(default_factory=list)
    cancelled: bool = False

    @property
    def fetch_failures(self) -> List[RecordResult]:
        return [r for r in self.records if r.status == OutcomeStatus.FETCH_FAILED]

    @property
    def preset_failures(self) -> List[PresetOutcome]:
        failures: List[PresetOutcome] = []
        for record in self.records:
            if record.pipeline_result is not None:
                failures.extend(record.pipeline_result.failed_presets)
        return failures

    @property
    def skipped(self) -> List[RecordResult]:
        return [r for r in self.records if r.status == OutcomeStatus.SKIPPED]

    @property
    def failed(self) -> bool:
        """True when the invocation should be reported as failed to the host."""
        return bool(self.fetch_failures)

    def summary(self) -> Dict[str, Any]:
        """Flatten into one row per (source object, preset) for reporting."""
        outcomes = []
        for record in self.records:
            result = record.pipeline_result
            if result is None or not result.preset_outcomes:
                outcomes.append(
                    {
                        "bucket": record.record.bucket,
                        "key": record.record.key,
                        "preset": None,
                        "status": record.status.value,
                        "reason": record.reason,
                    }
                )
                continue
            for outcome in result.preset_outcomes:
                outcomes.append(
                    {
                        "bucket": record.record.bucket,
                        "key": record.record.key,
                        "preset": outcome.preset_name,
                        "destination": f"s3://{outcome.destination_bucket}/{outcome.destination_key}",
                        "status": outcome.status.value,
                        "reason": outcome.reason,
                    }
                )
        return {
            "failed": self.failed,
            "cancelled": self.cancelled,
            "total_records": len(self.records),
            "fetch_failures": len(self.fetch_failures),
            "preset_failures": len(self.preset_failures),
            "skipped": len(self.skipped),
            "outcomes": outcomes,
        }


class PipelineConfig(BaseModel):
    """Process-wide configuration for derivative generation."""

    dest_bucket: str = "hngry-images"
    staging_dir: str = "/tmp"
    upload_acl: Optional[str] = "public-read"
    resizer: str = "pillow"
    preset_concurrency: int = Field(default=1, ge=1)
    deadline_margin_ms: int = Field(default=3000, ge=0)
    supported_extensions: Tuple[str, ...] = ()
    debug: bool = False

    @field_validator("resizer")
    @classmethod
    def _known_resizer(cls, value: str) -> str:
        value = value.lower()
        if value not in ("pillow", "convert"):
            raise ValueError(f"Unknown resizer: {value}")
        return value
