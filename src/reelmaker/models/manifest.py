"""Manifest data model."""

import logging
from typing import List, Optional, Tuple
from pathlib import Path
from pydantic import BaseModel, Field
import yaml

from .scene import MediaBlob, Scene

logger = logging.getLogger(__name__)


class SceneEntry(BaseModel):
    """A scene as listed in a manifest, with media referenced by path."""

    scene_number: int = Field(..., description="1-based display number", gt=0)
    description: str = Field(default="", description="Visual prompt")
    narration: str = Field(default="", description="Narration text")
    image: Optional[str] = Field(None, description="Path to the still image")
    audio: Optional[str] = Field(None, description="Path to the narration track")

    class Config:
        """Pydantic config."""
        frozen = False

    def resolve(self, base_dir: Path) -> Tuple[Optional[Path], Optional[Path]]:
        """Resolve media paths relative to the manifest directory."""
        image = base_dir / self.image if self.image else None
        audio = base_dir / self.audio if self.audio else None
        return image, audio

    def is_ready(self, base_dir: Path) -> bool:
        image, audio = self.resolve(base_dir)
        return bool(image and image.is_file() and audio and audio.is_file())

    def to_scene(self, base_dir: Path) -> Scene:
        """Load media from disk. Missing files leave the blob unset."""
        image, audio = self.resolve(base_dir)
        return Scene(
            scene_number=self.scene_number,
            description=self.description,
            narration=self.narration,
            image_blob=_load_blob(image),
            audio_blob=_load_blob(audio),
        )


def _load_blob(path: Optional[Path]) -> Optional[MediaBlob]:
    if path is None:
        return None
    if not path.is_file():
        logger.warning(f"Media file not found: {path}")
        return None
    return MediaBlob.from_path(path)


class Manifest(BaseModel):
    """Reel project manifest."""

    project_name: str = Field(..., description="Project name")
    include_subtitles: bool = Field(default=True, description="Burn narration subtitles")
    subtitle_style: Optional[str] = Field(None, description="Subtitle style preset name")
    scenes: List[SceneEntry] = Field(default_factory=list, description="Scenes in playback order")

    class Config:
        """Pydantic config."""
        frozen = False

    @classmethod
    def from_yaml(cls, path: Path) -> "Manifest":
        """Load manifest from YAML file."""
        with open(path, "r") as f:
            data = yaml.safe_load(f)
        return cls(**data)

    def to_yaml(self, path: Path) -> None:
        """Save manifest to YAML file."""
        with open(path, "w") as f:
            yaml.safe_dump(self.model_dump(), f, default_flow_style=False)

    def load_scenes(self, base_dir: Path) -> List[Scene]:
        """Load every scene's media, keeping manifest order."""
        return [entry.to_scene(base_dir) for entry in self.scenes]
