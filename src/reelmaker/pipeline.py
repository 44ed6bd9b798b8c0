"""Assembly pipeline: scenes in, one vertical video out."""

import logging
from typing import List, Optional, Sequence

from .config import Config, config as default_config
from .editor import (
    SceneSegment,
    concat_segments,
    get_style,
    provision_font,
    render_scene,
)
from .engine import MediaEngine, acquire
from .models import Scene
from .progress import ProgressCallback, ProgressReporter

logger = logging.getLogger(__name__)


class MissingMediaError(ValueError):
    """A scene lacks its image or narration track."""

    def __init__(self, position: int) -> None:
        super().__init__(f"Scene {position} missing image or audio")
        self.position = position


def check_scenes(scenes: Sequence[Scene]) -> None:
    """Reject a request before any engine work.

    Raises:
        ValueError: If there are no scenes.
        MissingMediaError: For the first scene lacking image or audio,
            identified by its 1-based position.
    """
    if not scenes:
        raise ValueError("No scenes provided")
    for position, scene in enumerate(scenes, start=1):
        if not scene.has_media:
            raise MissingMediaError(position)


async def assemble(
    scenes: Sequence[Scene],
    on_progress: Optional[ProgressCallback] = None,
    include_subtitles: bool = True,
    engine: Optional[MediaEngine] = None,
    settings: Optional[Config] = None,
) -> bytes:
    """Render every scene and join them into one MP4.

    Scenes are rendered one at a time, in order, on a single engine
    session. Callers must not run two assemblies on the same session at
    once; engine file names are reused between runs.

    Args:
        scenes: Scenes in playback order, each with image and audio.
        on_progress: Receives ProgressState updates, starting at 0 and
            ending at 1. Nothing is reported after a failure.
        include_subtitles: Burn each scene's narration in as a subtitle.
        engine: Engine session to use. Defaults to the shared session.
        settings: Configuration. Defaults to the global config.

    Returns:
        The finished MP4 file content.

    Raises:
        ValueError: If the request is empty or settings are invalid.
        MissingMediaError: If a scene lacks media.
        EngineError: If the engine cannot start, a scene cannot be
            rendered even without subtitles, or concatenation fails.
    """
    check_scenes(scenes)
    settings = settings or default_config
    encode = settings.encode_settings()
    style = get_style(settings.subtitle_style) if include_subtitles else None

    reporter = ProgressReporter(len(scenes), on_progress)
    reporter.start()

    if engine is None:
        engine = await acquire()
    else:
        await engine.ensure_ready()

    if include_subtitles:
        await provision_font(engine, settings.font_path, settings.font_url)

    logger.info(
        f"Assembling {len(scenes)} scenes "
        f"({'with' if include_subtitles else 'without'} subtitles)"
    )

    engine.on_progress(reporter.update)
    try:
        segments: List[SceneSegment] = []
        for index, scene in enumerate(scenes):
            reporter.begin_step(index)
            segment = await render_scene(
                engine,
                scene,
                index,
                include_subtitles=include_subtitles,
                settings=encode,
                style=style,
                gap_seconds=settings.gap_seconds,
            )
            segments.append(segment)

        reporter.begin_step(len(scenes))
        output = await concat_segments(engine, segments)
    finally:
        engine.on_progress(None)

    reporter.complete()
    total = sum(segment.duration for segment in segments)
    logger.info(f"Assembled {len(segments)} scenes, {total:.1f}s, {len(output)} bytes")
    return output
