"""Scene rendering and video assembly module."""

from .compositor import (
    RenderVariant,
    SceneSegment,
    render_plan,
    render_scene,
    concat_segments,
)
from .overlays import (
    SubtitleStyle,
    STYLES,
    clean_narration,
    format_timestamp,
    format_srt,
    get_style,
    register_style,
)
from .audio import (
    audio_extension,
    image_extension,
    load_audio,
    get_audio_duration,
    probe_audio_duration,
)
from .fonts import provision_font

__all__ = [
    # Compositor
    "RenderVariant",
    "SceneSegment",
    "render_plan",
    "render_scene",
    "concat_segments",
    # Overlays
    "SubtitleStyle",
    "STYLES",
    "clean_narration",
    "format_timestamp",
    "format_srt",
    "get_style",
    "register_style",
    # Audio
    "audio_extension",
    "image_extension",
    "load_audio",
    "get_audio_duration",
    "probe_audio_duration",
    # Fonts
    "provision_font",
]
