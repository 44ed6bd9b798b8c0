"""Shared pytest fixtures"""

from unittest.mock import AsyncMock, patch

import pytest

from reelmaker.config import Config
from tests.mocks.engine import FakeEngine
from tests.mocks.fixtures import make_scene_list


# ============================================================
# Engine
# ============================================================

@pytest.fixture
def engine():
    """Fresh in-memory engine"""
    return FakeEngine()


@pytest.fixture
def audio_probe():
    """Every narration track decodes to 2 seconds"""
    with patch(
        "reelmaker.editor.compositor.probe_audio_duration",
        AsyncMock(return_value=2.0),
    ) as probe:
        yield probe


# ============================================================
# Test Data Fixtures
# ============================================================

@pytest.fixture
def sample_scenes():
    """List of 3 complete scenes"""
    return make_scene_list(3)


@pytest.fixture
def settings(tmp_path):
    """Config with a local font so no download is attempted"""
    font = tmp_path / "DejaVuSans.ttf"
    font.write_bytes(b"font-data")
    return Config(
        workspace=tmp_path,
        ffmpeg_binary="",
        font_path=font,
        font_url="http://127.0.0.1:9/DejaVuSans.ttf",
        subtitle_style="default",
        gap_seconds=0.1,
        fps=15,
        crf=28,
        preset="ultrafast",
    )
