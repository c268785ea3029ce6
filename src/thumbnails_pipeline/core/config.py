"""Environment-driven configuration."""

import os
from typing import Mapping, Optional

from pydantic import ValidationError

from .exceptions import ConfigurationError
from .models import PipelineConfig

TRUE_VALUES = ("1", "true", "yes", "on")


def config_from_env(environ: Optional[Mapping[str, str]] = None) -> PipelineConfig:
    """
    Build the pipeline configuration from environment variables.

    Environment Variables:
        DEST_BUCKET: Bucket derivatives are written to
        STAGING_DIR: Local scratch directory (default /tmp)
        UPLOAD_ACL: Canned ACL for derivatives; "none" or empty omits it
        RESIZER: "pillow" or "convert"
        PRESET_CONCURRENCY: Worker threads per source object
        DEADLINE_MARGIN_MS: Time reserved before the host deadline
        SUPPORTED_EXTENSIONS: Comma separated extensions; empty accepts all
        DEBUG: Enable debug logging

    Raises:
        ConfigurationError: If a value fails validation
    """
    env = os.environ if environ is None else environ
    values = {}

    if env.get("DEST_BUCKET"):
        values["dest_bucket"] = env["DEST_BUCKET"]
    if env.get("STAGING_DIR"):
        values["staging_dir"] = env["STAGING_DIR"]
    if "UPLOAD_ACL" in env:
        acl = env["UPLOAD_ACL"].strip()
        values["upload_acl"] = None if acl.lower() in ("", "none") else acl
    if env.get("RESIZER"):
        values["resizer"] = env["RESIZER"]
    if env.get("PRESET_CONCURRENCY"):
        values["preset_concurrency"] = env["PRESET_CONCURRENCY"]
    if env.get("DEADLINE_MARGIN_MS"):
        values["deadline_margin_ms"] = env["DEADLINE_MARGIN_MS"]
    if env.get("SUPPORTED_EXTENSIONS"):
        values["supported_extensions"] = tuple(
            ext.strip() for ext in env["SUPPORTED_EXTENSIONS"].split(",") if ext.strip()
        )
    values["debug"] = env.get("DEBUG", "").lower() in TRUE_VALUES

    try:
        return PipelineConfig(**values)
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid configuration: {exc}") from exc
