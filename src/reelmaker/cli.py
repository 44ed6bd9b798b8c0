"""CLI entry point for the reel maker."""

import asyncio
import logging
import typer
from pathlib import Path
from typing import List, Optional

from . import __version__
from .config import Config, config
from .engine import MediaEngine
from .models import Manifest, Scene

app = typer.Typer(
    name="reel-maker",
    help="Assemble narrated scenes into a vertical short video",
    no_args_is_help=True
)


async def _assemble_with_session(
    scenes: List[Scene],
    settings: Config,
    include_subtitles: bool,
    on_progress,
) -> bytes:
    """Run the pipeline on a private engine session, removed afterwards.

    Scenes are checked before the session starts, so a bad manifest never
    launches ffmpeg.
    """
    from .pipeline import assemble as run_assembly, check_scenes

    check_scenes(scenes)
    async with MediaEngine(binary=settings.ffmpeg_binary or None) as engine:
        return await run_assembly(
            scenes,
            on_progress=on_progress,
            include_subtitles=include_subtitles,
            engine=engine,
            settings=settings,
        )


def setup_logging(verbose: bool = False) -> None:
    """Configure logging."""
    level = logging.DEBUG if verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s",
    )


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        typer.echo(f"reel-maker version {__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-V",
        callback=version_callback,
        is_eager=True,
        help="Show version and exit"
    )
) -> None:
    """Reel Maker - Turn narrated scenes into a short video."""
    pass


@app.command()
def status(
    script: Path = typer.Option(
        Path("script.yaml"),
        "--script",
        "-s",
        help="Path to scenes YAML file",
        exists=False,
        file_okay=True,
        dir_okay=False
    )
) -> None:
    """Show project status."""
    if not script.exists():
        typer.echo(f"❌ No project found at {script}")
        raise typer.Exit(1)

    try:
        manifest = Manifest.from_yaml(script)
    except Exception as e:
        typer.echo(f"❌ Error loading project: {e}")
        raise typer.Exit(1)

    base_dir = script.parent
    ready = [entry for entry in manifest.scenes if entry.is_ready(base_dir)]

    typer.echo(f"📁 Project: {manifest.project_name}")
    typer.echo(f"   Scenes: {len(manifest.scenes)} ({len(ready)} ready)")
    typer.echo(f"   Subtitles: {'on' if manifest.include_subtitles else 'off'}")

    typer.echo("\n📽️  Scenes:")
    for entry in manifest.scenes:
        status_icon = "✅" if entry.is_ready(base_dir) else "⏳"
        typer.echo(f"   {status_icon} Scene {entry.scene_number}")
        if entry.narration:
            preview = entry.narration[:60] + "..." if len(entry.narration) > 60 else entry.narration
            typer.echo(f"      → {preview}")


@app.command()
def assemble(
    script: Path = typer.Option(
        Path("script.yaml"),
        "--script",
        "-s",
        help="Path to scenes YAML file",
        exists=True,
        file_okay=True,
        dir_okay=False
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Output file path (defaults to <workspace>/output/<project>.mp4)"
    ),
    subtitles: Optional[bool] = typer.Option(
        None,
        "--subtitles/--no-subtitles",
        help="Burn narration subtitles (defaults to the manifest setting)"
    ),
    style: Optional[str] = typer.Option(
        None,
        "--style",
        help="Subtitle style preset (default, large, boxed)"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
) -> None:
    """Assemble scene images and narration into the final video."""
    setup_logging(verbose)
    typer.echo(f"📼 Assembling video from {script}")

    try:
        manifest = Manifest.from_yaml(script)
    except Exception as e:
        typer.echo(f"❌ Error loading manifest: {e}")
        raise typer.Exit(1)

    scenes = manifest.load_scenes(script.parent)
    include_subtitles = manifest.include_subtitles if subtitles is None else subtitles

    settings = config.model_copy()
    if style or manifest.subtitle_style:
        settings.subtitle_style = style or manifest.subtitle_style

    if output is None:
        output = settings.workspace / "output" / f"{manifest.project_name.replace(' ', '_') or 'output'}.mp4"

    typer.echo(f"   Scenes: {len(scenes)}")
    typer.echo(f"   Subtitles: {'on' if include_subtitles else 'off'}")

    with typer.progressbar(length=1000, label="   Rendering") as bar:
        done = 0

        def on_progress(state) -> None:
            nonlocal done
            bar.label = f"   {state.label}"
            target = round(state.overall_fraction * 1000)
            if target > done:
                bar.update(target - done)
                done = target

        try:
            video = asyncio.run(_assemble_with_session(
                scenes, settings, include_subtitles, on_progress
            ))
        except Exception as e:
            typer.echo(f"\n❌ Error assembling video: {e}")
            raise typer.Exit(1)

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_bytes(video)
    typer.echo(f"✅ Video assembled: {output}")
    typer.echo(f"   Size: {len(video) / 1_000_000:.1f} MB")


if __name__ == "__main__":
    app()
