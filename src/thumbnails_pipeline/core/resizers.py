"""Resize operation implementations."""

import shutil
import subprocess
from typing import List, Optional

from PIL import Image, UnidentifiedImageError

from .exceptions import ResizeError
from .logging_config import get_logger
from .models import ResizePreset

# Formats Pillow can only write without an alpha channel
_RGB_ONLY_FORMATS = ("JPEG",)


class PillowResizeOperation:
    """Aspect-preserving resize to fit the preset's bounding box, via Pillow."""

    def __init__(self, resample: int = Image.Resampling.LANCZOS):
        self._resample = resample
        self._logger = get_logger("resizer")

    def resize(
        self,
        source_path: str,
        preset: ResizePreset,
        output_path: str,
        timeout: Optional[float] = None,
    ) -> None:
        try:
            with Image.open(source_path) as image:
                image_format = image.format or "JPEG"
                image.load()
                derivative = image.copy()
        except FileNotFoundError as exc:
            raise ResizeError(f"Source file not found: {source_path}") from exc
        except UnidentifiedImageError as exc:
            raise ResizeError(f"Unsupported image format: {source_path}") from exc
        except (OSError, Image.DecompressionBombError, SyntaxError) as exc:
            raise ResizeError(f"Failed to read {source_path}: {exc}") from exc

        derivative.thumbnail((preset.width, preset.height), self._resample)
        if image_format in _RGB_ONLY_FORMATS and derivative.mode not in ("RGB", "L"):
            derivative = derivative.convert("RGB")

        self._logger.debug(
            f"Resized {source_path} to {derivative.size[0]}x{derivative.size[1]} "
            f"for preset {preset.name}"
        )
        try:
            derivative.save(output_path, format=image_format, quality=preset.quality)
        except (OSError, ValueError, KeyError) as exc:
            raise ResizeError(f"Failed to write {output_path}: {exc}") from exc


class ConvertResizeOperation:
    """
    Resize by shelling out to ImageMagick's ``convert``.

    Runs ``convert -thumbnail WxH -quality Q <source> <output>``.
    """

    def __init__(self, binary: str = "convert", timeout: Optional[float] = None):
        self.binary = binary
        self.timeout = timeout
        self._logger = get_logger("resizer")

    def build_command(self, source_path: str, preset: ResizePreset, output_path: str) -> List[str]:
        return [
            self.binary,
            "-thumbnail",
            preset.geometry,
            "-quality",
            str(preset.quality),
            source_path,
            output_path,
        ]

    def effective_timeout(self, timeout: Optional[float] = None) -> Optional[float]:
        """The tighter of the configured timeout and the caller's remaining time."""
        limits = [t for t in (self.timeout, timeout) if t is not None]
        return min(limits) if limits else None

    def resize(
        self,
        source_path: str,
        preset: ResizePreset,
        output_path: str,
        timeout: Optional[float] = None,
    ) -> None:
        if shutil.which(self.binary) is None:
            raise ResizeError(f"Resize tool not found: {self.binary}")

        command = self.build_command(source_path, preset, output_path)
        limit = self.effective_timeout(timeout)
        self._logger.debug(f"Running {' '.join(command)} (timeout={limit})")
        try:
            completed = subprocess.run(
                command,
                capture_output=True,
                timeout=limit,
                check=False,
            )
        except subprocess.TimeoutExpired as exc:
            raise ResizeError(f"{self.binary} timed out after {limit}s") from exc
        except OSError as exc:
            raise ResizeError(f"Failed to run {self.binary}: {exc}") from exc

        if completed.returncode != 0:
            stderr = completed.stderr.decode("utf-8", errors="replace").strip()
            raise ResizeError(
                f"{self.binary} exited with status {completed.returncode}: {stderr}"
            )


def create_resizer(name: str = "pillow"):
    """Return the resize operation registered under ``name``."""
    if name == "pillow":
        return PillowResizeOperation()
    if name == "convert":
        return ConvertResizeOperation()
    raise ValueError(f"Unknown resizer: {name}")
