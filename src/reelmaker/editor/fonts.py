"""Subtitle font provisioning.

The engine restricts fontconfig to its own fonts directory, so host fonts
are never used. The subtitle font is copied in explicitly.
"""

import asyncio
import logging
from pathlib import Path

import requests

from ..engine import FONTS_DIR, MediaEngine

logger = logging.getLogger(__name__)

FONT_FILE = f"{FONTS_DIR}/DejaVuSans.ttf"


def _load_font(font_path: Path, font_url: str, timeout: float) -> bytes:
    """Read the font from disk, falling back to the URL.

    Raises:
        OSError: If the local file exists but cannot be read.
        requests.RequestException: If the download fails.
    """
    if font_path.is_file():
        logger.debug(f"Using local font {font_path}")
        return font_path.read_bytes()

    logger.debug(f"Downloading font from {font_url}")
    response = requests.get(font_url, timeout=timeout)
    response.raise_for_status()
    return response.content


async def provision_font(
    engine: MediaEngine,
    font_path: Path,
    font_url: str,
    timeout: float = 30.0
) -> bool:
    """Copy the subtitle font into the engine's fonts directory.

    Args:
        engine: Ready engine session.
        font_path: Local font file, tried first.
        font_url: Remote font file, tried second.
        timeout: Download timeout in seconds.

    Returns:
        True if a font was written. False if neither source was usable;
        subtitle rendering will then fail and fall back to no subtitles.
    """
    await engine.create_dir(FONTS_DIR)

    try:
        data = await asyncio.to_thread(_load_font, font_path, font_url, timeout)
    except (OSError, requests.RequestException) as e:
        logger.warning(f"No subtitle font available: {e}")
        return False

    await engine.write_file(FONT_FILE, data)
    return True
