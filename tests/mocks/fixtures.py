"""Test data factories for consistent test setup"""

from typing import List

from reelmaker.models import MediaBlob, Scene


def make_scene(
    number: int = 1,
    narration: str = "Narration",
    image: bool = True,
    audio: bool = True,
    audio_mime: str = "audio/mpeg",
    image_mime: str = "image/png",
) -> Scene:
    """Factory for Scene objects with small placeholder blobs"""
    return Scene(
        scene_number=number,
        description=f"Scene {number} visual",
        narration=narration,
        image_blob=MediaBlob(data=f"image{number}".encode(), mime_type=image_mime) if image else None,
        audio_blob=MediaBlob(data=f"audio{number}".encode(), mime_type=audio_mime) if audio else None,
    )


def make_scene_list(count: int = 3) -> List[Scene]:
    """Factory for an ordered list of complete scenes"""
    return [make_scene(i, f"[calm] Narration for scene {i}") for i in range(1, count + 1)]
