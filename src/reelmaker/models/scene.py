"""Scene data model."""

import mimetypes
from pathlib import Path
from typing import Optional
from pydantic import BaseModel, Field


class MediaBlob(BaseModel):
    """Opaque binary media with a declared MIME type."""

    data: bytes = Field(..., description="Raw file content")
    mime_type: str = Field(..., description="Declared MIME type, e.g. 'audio/mpeg'")

    class Config:
        """Pydantic config."""
        frozen = True

    @classmethod
    def from_path(cls, path: Path, mime_type: Optional[str] = None) -> "MediaBlob":
        """Read a file, guessing its MIME type from the extension."""
        if mime_type is None:
            mime_type, _ = mimetypes.guess_type(str(path))
        return cls(data=path.read_bytes(), mime_type=mime_type or "application/octet-stream")


class Scene(BaseModel):
    """Represents a single narrated, illustrated scene of the reel."""

    scene_number: int = Field(..., description="1-based display number", gt=0)
    description: str = Field(default="", description="Visual prompt")
    narration: str = Field(default="", description="Narration text, may contain [hints]")
    image_blob: Optional[MediaBlob] = Field(None, description="Still image")
    audio_blob: Optional[MediaBlob] = Field(None, description="Narration track")

    class Config:
        """Pydantic config."""
        frozen = False

    @property
    def has_media(self) -> bool:
        """Whether both the image and the narration track are present."""
        return self.image_blob is not None and self.audio_blob is not None
