"""Configuration management."""

import os
from pathlib import Path
from pydantic import BaseModel, Field
from dotenv import load_dotenv

# Load environment variables
load_dotenv()

DEFAULT_FONT_URL = "https://cdn.jsdelivr.net/npm/dejavu-fonts-ttf/ttf/DejaVuSans.ttf"


class Config(BaseModel):
    """Application configuration."""

    # Paths
    workspace: Path = Field(
        default_factory=lambda: Path(os.getenv("REELMAKER_WORKSPACE", ".")),
        description="Workspace directory; default output root for the CLI"
    )
    ffmpeg_binary: str = Field(
        default_factory=lambda: os.getenv("REELMAKER_FFMPEG", ""),
        description="Path to an ffmpeg binary. Empty uses the imageio-ffmpeg build"
    )

    # Subtitle font
    font_path: Path = Field(
        default_factory=lambda: Path(os.getenv("REELMAKER_FONT_PATH", "fonts/DejaVuSans.ttf")),
        description="Local subtitle font, tried before font_url"
    )
    font_url: str = Field(
        default_factory=lambda: os.getenv("REELMAKER_FONT_URL", DEFAULT_FONT_URL),
        description="Remote subtitle font fallback"
    )
    subtitle_style: str = Field(
        default_factory=lambda: os.getenv("REELMAKER_SUBTITLE_STYLE", "default"),
        description="Subtitle style preset name"
    )

    # Timing and encoding
    gap_seconds: float = Field(
        default_factory=lambda: float(os.getenv("REELMAKER_GAP_SECONDS", "0.1")),
        description="Silence held after each scene's narration",
        ge=0
    )
    fps: int = Field(
        default_factory=lambda: int(os.getenv("REELMAKER_FPS", "15")),
        description="Output frame rate",
        gt=0
    )
    frame_width: int = Field(default=720, description="Output frame width", gt=0)
    frame_height: int = Field(default=1280, description="Output frame height", gt=0)
    crf: int = Field(
        default_factory=lambda: int(os.getenv("REELMAKER_CRF", "28")),
        description="x264 constant quality"
    )
    preset: str = Field(
        default_factory=lambda: os.getenv("REELMAKER_PRESET", "ultrafast"),
        description="x264 encoding preset"
    )

    class Config:
        """Pydantic config."""
        frozen = False

    def encode_settings(self) -> "EncodeSettings":
        """Build validated encoder settings from this configuration.

        Raises:
            ValueError: If any encoder parameter is out of range.
        """
        from .engine.commands import EncodeSettings

        return EncodeSettings(
            width=self.frame_width,
            height=self.frame_height,
            fps=self.fps,
            crf=self.crf,
            preset=self.preset,
        )


# Global config instance
config = Config()
