"""Integration tests against the real ffmpeg binary

These build tiny inputs with ffmpeg's lavfi sources, so no fixtures are
needed on disk. They skip when no ffmpeg can be started.
"""

import logging
from pathlib import Path

import pytest
import pytest_asyncio
import requests
from moviepy import VideoFileClip

from reelmaker.config import DEFAULT_FONT_URL, Config
from reelmaker.editor import provision_font, render_scene
from reelmaker.engine import EngineError, EngineInitError, MediaEngine
from reelmaker.models import MediaBlob, Scene
from reelmaker.pipeline import assemble

pytestmark = pytest.mark.integration

NARRATION_SECONDS = (1.0, 1.5)

FONT_CANDIDATES = (
    "/usr/share/fonts/truetype/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/dejavu/DejaVuSans.ttf",
    "/usr/share/fonts/TTF/DejaVuSans.ttf",
)


@pytest_asyncio.fixture
async def real_engine():
    engine = MediaEngine()
    try:
        await engine.ensure_ready()
    except EngineInitError as e:
        pytest.skip(f"ffmpeg unavailable: {e}")
    yield engine
    engine.close()


@pytest_asyncio.fixture
async def scenes(real_engine):
    """Scenes with a solid-colour still and a sine-tone narration each"""
    result = []
    for number, seconds in enumerate(NARRATION_SECONDS, start=1):
        await real_engine.run([
            "-f", "lavfi", "-i", "color=c=blue:s=640x480",
            "-frames:v", "1", "-y", f"src_{number}.png",
        ])
        await real_engine.run([
            "-f", "lavfi", "-i", f"sine=frequency={220 * number}:duration={seconds}",
            "-y", f"src_{number}.wav",
        ])
        result.append(Scene(
            scene_number=number,
            narration=f"[warm] Scene number {number}",
            image_blob=MediaBlob(data=await real_engine.read_file(f"src_{number}.png"), mime_type="image/png"),
            audio_blob=MediaBlob(data=await real_engine.read_file(f"src_{number}.wav"), mime_type="audio/wav"),
        ))
    return result


@pytest.fixture
def offline_settings(tmp_path):
    """Settings whose font can be neither read nor downloaded"""
    return Config(
        font_path=tmp_path / "missing.ttf",
        font_url="http://127.0.0.1:9/DejaVuSans.ttf",
    )


def _probe(data: bytes, tmp_path):
    path = tmp_path / "result.mp4"
    path.write_bytes(data)
    clip = VideoFileClip(str(path))
    try:
        return clip.duration, tuple(clip.size), clip.fps
    finally:
        clip.close()


@pytest.mark.asyncio
async def test_assembles_vertical_video(real_engine, scenes, offline_settings, tmp_path):
    events = []

    output = await assemble(
        scenes,
        on_progress=events.append,
        include_subtitles=False,
        engine=real_engine,
        settings=offline_settings,
    )

    assert output[4:8] == b"ftyp"
    duration, size, fps = _probe(output, tmp_path)
    expected = sum(s + offline_settings.gap_seconds for s in NARRATION_SECONDS)
    assert duration == pytest.approx(expected, abs=0.3)
    assert size == (720, 1280)
    assert fps == pytest.approx(15, abs=0.5)

    fractions = [e.overall_fraction for e in events]
    assert fractions == sorted(fractions)
    assert fractions[0] == 0.0 and fractions[-1] == 1.0




@pytest.mark.asyncio
async def test_unusable_font_falls_back_to_plain_video(real_engine, scenes, offline_settings, tmp_path, caplog):
    with caplog.at_level(logging.WARNING, logger="reelmaker"):
        output = await assemble(
            scenes,
            include_subtitles=True,
            engine=real_engine,
            settings=offline_settings,
        )

    retries = [r for r in caplog.records if "retrying without" in r.getMessage()]
    assert len(retries) == len(scenes)

    duration, size, _ = _probe(output, tmp_path)
    expected = sum(s + offline_settings.gap_seconds for s in NARRATION_SECONDS)
    assert duration == pytest.approx(expected, abs=0.3)
    assert size == (720, 1280)


@pytest.fixture
def host_font(tmp_path):
    """A real TrueType font from the host, or downloaded as a last resort"""
    for candidate in FONT_CANDIDATES:
        if Path(candidate).is_file():
            return Path(candidate)
    found = sorted(Path("/usr/share/fonts").glob("**/*.ttf"))
    if found:
        return found[0]
    try:
        response = requests.get(DEFAULT_FONT_URL, timeout=10)
        response.raise_for_status()
    except requests.RequestException as e:
        pytest.skip(f"No font available: {e}")
    path = tmp_path / "DejaVuSans.ttf"
    path.write_bytes(response.content)
    return path


@pytest_asyncio.fixture
async def libass(real_engine):
    """Skip when the ffmpeg build has no subtitles filter"""
    try:
        await real_engine.run([
            "-f", "lavfi", "-i", "color=s=16x16:d=0.1",
            "-vf", "subtitles=absent.srt", "-f", "null", "-",
        ])
    except EngineError as e:
        if "No such filter" in str(e):
            pytest.skip("ffmpeg built without libass")


async def _first_frame(engine, name: str) -> bytes:
    frame = f"{name}.gray"
    await engine.run([
        "-i", name, "-frames:v", "1",
        "-f", "rawvideo", "-pix_fmt", "gray", "-y", frame,
    ])
    return await engine.read_file(frame)


@pytest.mark.asyncio
async def test_subtitles_only_change_the_picture(real_engine, libass, scenes, host_font, tmp_path):
    settings = Config(font_path=host_font, font_url="http://127.0.0.1:9/unused.ttf")
    assert await provision_font(real_engine, settings.font_path, settings.font_url)
    scene = scenes[0]

    subtitled = await render_scene(real_engine, scene, 0, include_subtitles=True, settings=settings.encode_settings())
    plain = await render_scene(real_engine, scene, 1, include_subtitles=False, settings=settings.encode_settings())

    assert subtitled.subtitled and not plain.subtitled
    width, height = settings.frame_width, settings.frame_height
    with_text = await _first_frame(real_engine, subtitled.name)
    without_text = await _first_frame(real_engine, plain.name)
    assert len(with_text) == len(without_text) == width * height

    # The cue sits near the bottom of the image area
    lower = slice(width * (height // 2), width * height)
    assert with_text[lower] != without_text[lower]
