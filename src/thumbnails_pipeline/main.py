#!/usr/bin/env python3
"""
Thumbnails pipeline CLI

Generates the derivative set for one or more objects already in S3,
the same way an upload notification would.
"""

import argparse
import json
import sys
from typing import List, Optional

from .core import (
    NotificationRecord,
    PipelineConfig,
    ThumbnailsPipelineError,
    config_from_env,
    get_logger,
    load_registry,
)
from .core.factories import PipelineFactory
from .core.logging_config import set_debug


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """
    Parses command-line arguments.

    Unset options fall back to the same environment variables the
    notification handler reads.
    """
    parser = argparse.ArgumentParser(
        description="Generate resized derivatives for S3 images"
    )
    parser.add_argument("--bucket", required=True, help="Source S3 bucket")
    parser.add_argument(
        "--key",
        dest="keys",
        action="append",
        required=True,
        help="Source object key (repeatable)",
    )
    parser.add_argument("--dest-bucket", default=None, help="Destination S3 bucket")
    parser.add_argument(
        "--presets",
        default=None,
        help="Override presets, e.g. 'thumbnail:200x200:95,gallery:600x600:80'",
    )
    parser.add_argument(
        "--resizer",
        choices=["pillow", "convert"],
        default=None,
        help="Resize implementation (default: pillow)",
    )
    parser.add_argument(
        "--concurrency", type=int, default=None, help="Presets processed in parallel"
    )
    parser.add_argument("--staging-dir", default=None, help="Local scratch directory")
    parser.add_argument("--json", action="store_true", help="Print the summary as JSON")
    parser.add_argument("--debug", action="store_true", help="Enable debug logging")
    return parser.parse_args(argv)


def build_config(args: argparse.Namespace) -> PipelineConfig:
    """Overlay command-line options on the environment configuration."""
    config = config_from_env()
    overrides = {
        "dest_bucket": args.dest_bucket,
        "resizer": args.resizer,
        "preset_concurrency": args.concurrency,
        "staging_dir": args.staging_dir,
    }
    values = config.model_dump()
    values.update({name: value for name, value in overrides.items() if value is not None})
    values["debug"] = config.debug or args.debug
    return PipelineConfig(**values)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Entry point for manual derivative generation.

    Returns:
        0 on success, 1 when any source object could not be fetched or the
        configuration is invalid
    """
    logger = get_logger("cli")
    try:
        args = parse_args(argv)
        config = build_config(args)
        if config.debug:
            set_debug(True)

        processor = PipelineFactory.create_batch_processor(
            config, registry=load_registry(args.presets)
        )
        records = [NotificationRecord(bucket=args.bucket, key=key) for key in args.keys]
        result = processor.handle(records)
    except KeyboardInterrupt:
        logger.warning("Processing interrupted by user.")
        return 1
    except (ThumbnailsPipelineError, ValueError) as e:
        logger.error(f"Processing failed: {e}")
        return 1

    summary = result.summary()
    if args.json:
        print(json.dumps(summary, indent=2))
    else:
        for row in summary["outcomes"]:
            line = f"{row['status']:<14} {row['key']}"
            if row.get("preset"):
                line += f" [{row['preset']}] -> {row['destination']}"
            if row["reason"]:
                line += f" ({row['reason']})"
            print(line)

    return 1 if result.failed else 0


if __name__ == "__main__":
    sys.exit(main())
