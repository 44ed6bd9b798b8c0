"""Data models for the reel maker."""

from .scene import MediaBlob, Scene
from .manifest import Manifest, SceneEntry

__all__ = ["MediaBlob", "Scene", "Manifest", "SceneEntry"]
