"""Scene compositing and segment concatenation on the engine."""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Sequence

from ..engine import (
    BurnSubtitles,
    EncodeSettings,
    EngineError,
    MediaEngine,
    concat_args,
    concat_manifest,
    still_image_args,
)
from ..models import Scene
from .audio import audio_extension, image_extension, probe_audio_duration
from .fonts import FONTS_DIR, FONT_FILE
from .overlays import STYLES, SubtitleStyle, format_srt

logger = logging.getLogger(__name__)

DEFAULT_GAP_SECONDS = 0.1
MAX_RENDER_ATTEMPTS = 2

CONCAT_LIST = "concat.txt"
OUTPUT_FILE = "output.mp4"


class RenderVariant(str, Enum):
    """How a scene segment is composited."""
    WITH_SUBTITLES = "with_subtitles"
    WITHOUT_SUBTITLES = "without_subtitles"


def render_plan(include_subtitles: bool) -> List[RenderVariant]:
    """Variants to try for one scene, in order.

    A subtitled render that fails is retried once without subtitles;
    a plain render gets a single attempt.
    """
    if include_subtitles:
        return [RenderVariant.WITH_SUBTITLES, RenderVariant.WITHOUT_SUBTITLES]
    return [RenderVariant.WITHOUT_SUBTITLES]


@dataclass
class SceneSegment:
    """A rendered scene clip held by the engine."""

    index: int
    name: str
    duration: float
    subtitled: bool


def scene_file_names(index: int, scene: Scene) -> Dict[str, str]:
    """Engine file names for one scene's inputs and output."""
    return {
        "image": f"scene_{index}_img.{image_extension(scene.image_blob.mime_type)}",
        "audio": f"scene_{index}_audio.{audio_extension(scene.audio_blob.mime_type)}",
        "subtitles": f"scene_{index}.srt",
        "output": f"scene_{index}_vid.mp4",
    }


async def render_scene(
    engine: MediaEngine,
    scene: Scene,
    index: int,
    include_subtitles: bool = True,
    settings: Optional[EncodeSettings] = None,
    style: Optional[SubtitleStyle] = None,
    gap_seconds: float = DEFAULT_GAP_SECONDS,
) -> SceneSegment:
    """Composite one scene's still image and narration into a segment.

    The image is held for the narration length plus a short gap, and the
    audio is padded with silence to match. If the subtitled render fails,
    or no subtitle font has been provisioned, it is retried once without
    subtitles.

    Args:
        engine: Ready engine session.
        scene: Scene with image and audio blobs.
        index: 0-based position in the run, used for engine file names.
        include_subtitles: Burn the narration in as a subtitle.
        settings: Encoder settings. Defaults to EncodeSettings().
        style: Subtitle style. Defaults to the "default" preset.
        gap_seconds: Silence held after the narration.

    Returns:
        The rendered segment.

    Raises:
        ValueError: If the scene is missing media.
        EngineError: If every render attempt fails.
    """
    if not scene.has_media:
        raise ValueError(f"Scene {index + 1} missing image or audio")

    settings = settings or EncodeSettings()
    style = style or STYLES["default"]
    names = scene_file_names(index, scene)

    await engine.write_file(names["image"], scene.image_blob.data)
    await engine.write_file(names["audio"], scene.audio_blob.data)

    # The decoded audio length is authoritative for timing
    narration_duration = await probe_audio_duration(engine.path(names["audio"]))
    total_duration = narration_duration + gap_seconds
    logger.debug(
        f"Scene {index + 1}: narration {narration_duration:.3f}s, "
        f"segment {total_duration:.3f}s"
    )

    variants = render_plan(include_subtitles)[:MAX_RENDER_ATTEMPTS]
    for attempt, variant in enumerate(variants, start=1):
        subtitles = None
        if variant == RenderVariant.WITH_SUBTITLES:
            srt = format_srt(scene.narration, 0.0, narration_duration)
            await engine.write_file(names["subtitles"], srt.encode("utf-8"))
            subtitles = BurnSubtitles(
                subtitle_file=names["subtitles"],
                fonts_dir=FONTS_DIR,
                force_style=style.to_force_style(),
            )

        args = still_image_args(
            image=names["image"],
            audio=names["audio"],
            output=names["output"],
            duration=total_duration,
            gap=gap_seconds,
            chain=settings.frame_chain(subtitles),
            settings=settings,
        )

        try:
            # libass would otherwise draw nothing rather than fail
            if subtitles is not None and not engine.has_file(FONT_FILE):
                raise EngineError(f"Subtitle font {FONT_FILE} not provisioned")
            await engine.run(args, duration=total_duration)
        except EngineError as e:
            if attempt < len(variants):
                logger.warning(
                    f"Scene {index + 1} failed with subtitles, retrying without: {e}"
                )
                continue
            logger.error(f"Scene {index + 1} failed to render: {e}")
            raise

        return SceneSegment(
            index=index,
            name=names["output"],
            duration=total_duration,
            subtitled=subtitles is not None,
        )

    # Only reachable with an empty plan
    raise EngineError(f"Scene {index + 1} was not rendered")


async def concat_segments(
    engine: MediaEngine,
    segments: Sequence[SceneSegment],
    output_name: str = OUTPUT_FILE,
) -> bytes:
    """Join segments in order with a stream copy.

    Segments share encoder settings by construction, so no re-encode is
    needed. A failure here means the segments do not match and is not
    retried.

    Args:
        engine: Ready engine session holding the segments.
        segments: Segments in playback order.
        output_name: Engine name for the joined file.

    Returns:
        The joined MP4 file content.

    Raises:
        ValueError: If segments is empty.
        EngineError: If concatenation fails.
    """
    if not segments:
        raise ValueError("No segments provided")

    manifest = concat_manifest([segment.name for segment in segments])
    await engine.write_file(CONCAT_LIST, manifest.encode("utf-8"))

    total_duration = sum(segment.duration for segment in segments)
    try:
        await engine.run(concat_args(CONCAT_LIST, output_name), duration=total_duration)
    except EngineError as e:
        logger.error(f"Concatenation of {len(segments)} segments failed: {e}")
        raise

    return await engine.read_file(output_name)
