"""Core components of the thumbnails pipeline."""

from .config import config_from_env
from .exceptions import (
    ConfigurationError,
    FetchError,
    InvocationFailedError,
    ObjectStoreError,
    ResizeError,
    ThumbnailsPipelineError,
    UploadError,
)
from .image_utils import SupportedExtensions, always_eligible, detect_content_type
from .key_paths import (
    derive_destination_key,
    derive_local_output_path,
    derive_source_object,
    derive_target,
    unquote_key,
)
from .logging_config import get_logger, setup_logger
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
    ResizePreset,
    SourceObject,
)
from .observability import Deadline
from .presets import DEFAULT_PRESETS, default_registry, load_registry
from .services import BatchProcessor, DerivativePipeline

__all__ = [
    "BatchProcessor",
    "BatchResult",
    "ConfigurationError",
    "DEFAULT_PRESETS",
    "Deadline",
    "DerivativePipeline",
    "DerivativeTarget",
    "FetchError",
    "FetchOutcome",
    "InvocationFailedError",
    "NotificationRecord",
    "ObjectStoreError",
    "OutcomeStatus",
    "PipelineConfig",
    "PipelineResult",
    "PresetOutcome",
    "PresetRegistry",
    "RecordResult",
    "ResizeError",
    "ResizePreset",
    "SourceObject",
    "SupportedExtensions",
    "ThumbnailsPipelineError",
    "UploadError",
    "always_eligible",
    "config_from_env",
    "default_registry",
    "derive_destination_key",
    "derive_local_output_path",
    "derive_source_object",
    "derive_target",
    "detect_content_type",
    "get_logger",
    "load_registry",
    "setup_logger",
    "unquote_key",
]
