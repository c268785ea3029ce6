"""Derivation of staging paths and destination keys from source object keys.

Example for ``p/images/f04902b4-ee4a-4f97-8c3b-bc1632f4ef6b.jpg``:

- staging path: ``/tmp/f04902b4-ee4a-4f97-8c3b-bc1632f4ef6b.jpg``
- destination prefix: ``p/images/f04902b4/ee4a/4f97/8c3b/bc1632f4ef6b/``
- destination key for ``thumbnail-2x``: ``<prefix>thumbnail-2x.jpg``
- local output for ``thumbnail-2x``:
  ``/tmp/f04902b4-ee4a-4f97-8c3b-bc1632f4ef6b_thumbnail-2x.jpg``
"""

import os
import posixpath
from urllib.parse import unquote_plus

from .models import DerivativeTarget, ResizePreset, SourceObject

KEY_SEPARATOR = "/"
SEGMENT_SEPARATOR = "-"
DEFAULT_STAGING_DIR = "/tmp"


def unquote_key(raw_key: str) -> str:
    """Decode an object key as delivered in an upload notification."""
    return unquote_plus(raw_key)


def split_key(key: str) -> tuple:
    """Split a key into its directory prefix (with trailing slash) and file name."""
    directory, _, file_name = key.rpartition(KEY_SEPARATOR)
    if directory or key.startswith(KEY_SEPARATOR):
        directory += KEY_SEPARATOR
    return directory, file_name


def nest_base_name(base_name: str) -> str:
    """Turn ``a-b-c`` into ``a/b/c/``."""
    return KEY_SEPARATOR.join(base_name.split(SEGMENT_SEPARATOR)) + KEY_SEPARATOR


def derive_source_object(
    bucket: str, key: str, staging_dir: str = DEFAULT_STAGING_DIR
) -> SourceObject:
    """
    Derive every path the pipeline needs for one uploaded object.

    Total over any key: keys without an extension get an empty one and
    names without hyphens nest one level deep.

    Args:
        bucket: Bucket the original lives in
        key: Object key of the original
        staging_dir: Local scratch directory

    Returns:
        The source object descriptor
    """
    directory, file_name = split_key(key)
    base_name, extension = posixpath.splitext(file_name)

    return SourceObject(
        bucket=bucket,
        key=key,
        staging_dir=staging_dir,
        staging_path=os.path.join(staging_dir, file_name),
        file_name=file_name,
        extension=extension,
        base_name=base_name,
        destination_prefix=directory + nest_base_name(base_name),
    )


def derive_destination_key(source: SourceObject, preset_name: str) -> str:
    """Key under which the ``preset_name`` derivative of ``source`` is stored."""
    return f"{source.destination_prefix}{preset_name}{source.extension}"


def derive_local_output_path(source: SourceObject, preset_name: str) -> str:
    """Local scratch file for the ``preset_name`` derivative of ``source``."""
    return os.path.join(
        source.staging_dir, f"{source.base_name}_{preset_name}{source.extension}"
    )


def derive_target(
    source: SourceObject, preset: ResizePreset, destination_bucket: str
) -> DerivativeTarget:
    """Build the derivative target for one preset."""
    return DerivativeTarget(
        source=source,
        preset=preset,
        local_output_path=derive_local_output_path(source, preset.name),
        destination_bucket=destination_bucket,
        destination_key=derive_destination_key(source, preset.name),
    )
