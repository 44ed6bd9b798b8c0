"""Typed builders for ffmpeg filter chains and argument lists.

Only values from enumerated sets, numbers and validated engine file names
are allowed to reach an argument list. Free text such as narration never
does; it is written into subtitle files instead.
"""

import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

# Relative names inside the engine's private filesystem
_SAFE_NAME = re.compile(r"^[A-Za-z0-9_][A-Za-z0-9_.\-/]*$")

PRESETS = (
    "ultrafast", "superfast", "veryfast", "faster", "fast",
    "medium", "slow", "slower", "veryslow",
)
TUNES = ("stillimage", "film", "animation", "fastdecode", "zerolatency")


def check_name(name: str) -> str:
    """Validate an engine file name.

    Args:
        name: Relative file name, e.g. ``scene_0_img.png`` or ``fonts/x.ttf``.

    Returns:
        The name unchanged.

    Raises:
        ValueError: If the name is absolute, escapes the working directory
            or contains characters with meaning to the filter parser.
    """
    if not _SAFE_NAME.match(name) or ".." in name.split("/"):
        raise ValueError(f"Unsafe engine file name: {name!r}")
    return name


@dataclass(frozen=True)
class Scale:
    """Fit the input inside a frame, preserving aspect ratio."""

    width: int
    height: int

    def render(self) -> str:
        return f"scale={self.width}:{self.height}:force_original_aspect_ratio=decrease"


@dataclass(frozen=True)
class Pad:
    """Pad the input to the full frame, centered."""

    width: int
    height: int

    def render(self) -> str:
        return f"pad={self.width}:{self.height}:(ow-iw)/2:(oh-ih)/2"


@dataclass(frozen=True)
class BurnSubtitles:
    """Burn an SRT file into the picture with libass."""

    subtitle_file: str
    fonts_dir: str
    force_style: str

    def __post_init__(self) -> None:
        check_name(self.subtitle_file)
        check_name(self.fonts_dir)
        if "'" in self.force_style:
            raise ValueError("force_style must not contain quotes")

    def render(self) -> str:
        return (
            f"subtitles={self.subtitle_file}:fontsdir={self.fonts_dir}"
            f":force_style='{self.force_style}'"
        )


VideoFilter = Union[Scale, Pad, BurnSubtitles]


@dataclass(frozen=True)
class FilterChain:
    """An ordered, comma-joined video filter chain."""

    filters: Tuple[VideoFilter, ...] = field(default_factory=tuple)

    def render(self) -> str:
        return ",".join(f.render() for f in self.filters)

    @property
    def has_subtitles(self) -> bool:
        return any(isinstance(f, BurnSubtitles) for f in self.filters)


@dataclass(frozen=True)
class EncodeSettings:
    """Encoder parameters shared by every scene segment.

    Segments must all be encoded with the same settings so they can be
    joined with a stream copy.
    """

    width: int = 720
    height: int = 1280
    fps: int = 15
    video_codec: str = "libx264"
    preset: str = "ultrafast"
    crf: int = 28
    tune: str = "stillimage"
    pixel_format: str = "yuv420p"
    audio_codec: str = "aac"

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Invalid frame size: {self.width}x{self.height}")
        if self.fps <= 0:
            raise ValueError(f"Invalid frame rate: {self.fps}")
        if not 0 <= self.crf <= 51:
            raise ValueError(f"crf must be between 0 and 51, got {self.crf}")
        if self.preset not in PRESETS:
            raise ValueError(f"Unknown preset: {self.preset}. Available: {list(PRESETS)}")
        if self.tune not in TUNES:
            raise ValueError(f"Unknown tune: {self.tune}. Available: {list(TUNES)}")

    def frame_chain(self, subtitles: Optional[BurnSubtitles] = None) -> FilterChain:
        """Scale, optionally burn subtitles, then pad.

        Subtitles go between scale and pad so they stay on the image
        rather than on the padding bars.
        """
        filters: List[VideoFilter] = [Scale(self.width, self.height)]
        if subtitles is not None:
            filters.append(subtitles)
        filters.append(Pad(self.width, self.height))
        return FilterChain(tuple(filters))


def _seconds(value: float) -> str:
    return f"{value:.3f}"


def still_image_args(
    image: str,
    audio: str,
    output: str,
    duration: float,
    gap: float,
    chain: FilterChain,
    settings: EncodeSettings,
) -> List[str]:
    """Build arguments that loop a still image over a narration track.

    Args:
        image: Engine name of the still image.
        audio: Engine name of the narration track.
        output: Engine name of the segment to write.
        duration: Total segment length (narration plus gap) in seconds.
        gap: Trailing silence appended to the audio in seconds.
        chain: Video filter chain.
        settings: Encoder settings.

    Returns:
        ffmpeg argument list (without the binary).
    """
    for name in (image, audio, output):
        check_name(name)
    if duration <= 0:
        raise ValueError(f"Segment duration must be positive, got {duration}")

    return [
        "-loop", "1",
        "-t", _seconds(duration),
        "-i", image,
        "-i", audio,
        "-vf", chain.render(),
        "-c:v", settings.video_codec,
        "-preset", settings.preset,
        "-crf", str(settings.crf),
        "-tune", settings.tune,
        "-pix_fmt", settings.pixel_format,
        "-r", str(settings.fps),
        "-af", f"apad=pad_dur={_seconds(gap)}",
        "-c:a", settings.audio_codec,
        "-shortest",
        "-y", output,
    ]


def concat_manifest(names: Sequence[str]) -> str:
    """Render a concat demuxer list for the given engine files, in order."""
    return "".join(f"file '{check_name(name)}'\n" for name in names)


def concat_args(manifest: str, output: str) -> List[str]:
    """Build arguments that join segments with a stream copy (no re-encode)."""
    check_name(manifest)
    check_name(output)
    return [
        "-f", "concat",
        "-safe", "0",
        "-i", manifest,
        "-c", "copy",
        "-y", output,
    ]
