"""Audio probing for scene timing."""

import asyncio
from pathlib import Path

from moviepy import AudioFileClip


def audio_extension(mime_type: str) -> str:
    """Pick the container extension for a narration track.

    The extension drives ffmpeg's demuxer choice: MPEG audio is stored as
    ``mp3``, anything else as ``wav``.
    """
    return "mp3" if "mpeg" in (mime_type or "").lower() else "wav"


def image_extension(mime_type: str) -> str:
    """Pick the file extension for a still image."""
    mime_type = (mime_type or "").lower()
    if mime_type in ("image/jpeg", "image/jpg"):
        return "jpg"
    if mime_type == "image/webp":
        return "webp"
    return "png"


def load_audio(audio_path: Path) -> AudioFileClip:
    """Load an audio file.

    Args:
        audio_path: Path to the audio file.

    Returns:
        AudioFileClip instance.

    Raises:
        FileNotFoundError: If audio file doesn't exist.
    """
    if not audio_path.exists():
        raise FileNotFoundError(f"Audio file not found: {audio_path}")

    return AudioFileClip(str(audio_path))


def get_audio_duration(audio_path: Path) -> float:
    """Get the duration of an audio file.

    Args:
        audio_path: Path to audio file.

    Returns:
        Duration in seconds.

    Raises:
        ValueError: If the file has no usable duration.
    """
    audio = load_audio(audio_path)
    try:
        duration = audio.duration
    finally:
        audio.close()

    if not duration or duration <= 0:
        raise ValueError(f"Audio has no duration: {audio_path}")
    return float(duration)


async def probe_audio_duration(audio_path: Path) -> float:
    """Run get_audio_duration off the event loop."""
    return await asyncio.to_thread(get_audio_duration, audio_path)
