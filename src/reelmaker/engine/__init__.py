"""Transcoding engine session and command builders."""

from .commands import (
    EncodeSettings,
    FilterChain,
    Scale,
    Pad,
    BurnSubtitles,
    check_name,
    still_image_args,
    concat_manifest,
    concat_args,
)
from .session import (
    FONTS_DIR,
    MediaEngine,
    EngineError,
    EngineInitError,
    acquire,
    reset_shared,
)

__all__ = [
    # Commands
    "EncodeSettings",
    "FilterChain",
    "Scale",
    "Pad",
    "BurnSubtitles",
    "check_name",
    "still_image_args",
    "concat_manifest",
    "concat_args",
    # Session
    "FONTS_DIR",
    "MediaEngine",
    "EngineError",
    "EngineInitError",
    "acquire",
    "reset_shared",
]
