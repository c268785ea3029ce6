"""Default resize preset registry."""

from typing import Optional

from .models import PresetRegistry, ResizePreset

DEFAULT_PRESETS = (
    ResizePreset(name="thumbnail", width=200, height=200, quality=95),
    ResizePreset(name="thumbnail-2x", width=400, height=400, quality=80),
    ResizePreset(name="gallery", width=600, height=600, quality=80),
    ResizePreset(name="gallery-2x", width=1024, height=1024, quality=75),
)


def default_registry() -> PresetRegistry:
    """Return the registry of the four standard derivative tiers."""
    return PresetRegistry(presets=DEFAULT_PRESETS)


def load_registry(preset_list: Optional[str] = None) -> PresetRegistry:
    """
    Resolve the registry to use for a process.

    Args:
        preset_list: Optional ``name:WxH:Q`` list overriding the defaults

    Returns:
        The parsed registry, or the default one when ``preset_list`` is empty
    """
    if preset_list and preset_list.strip():
        return PresetRegistry.parse(preset_list)
    return default_registry()
