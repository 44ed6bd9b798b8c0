"""ffmpeg engine session with a private working directory."""

import asyncio
import logging
import os
import shutil
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence

import imageio_ffmpeg

from .commands import check_name

logger = logging.getLogger(__name__)

ProgressListener = Callable[[float], None]

# Lines of stderr kept in error messages
_STDERR_TAIL = 20

# fontconfig sees only fonts copied into the session
FONTS_DIR = "fonts"
FONTCONFIG_FILE = "fonts.conf"
_FONTCONFIG = """<?xml version="1.0"?>
<!DOCTYPE fontconfig SYSTEM "fonts.dtd">
<fontconfig>
  <dir>{fonts}</dir>
  <cachedir>{cache}</cachedir>
</fontconfig>
"""


class EngineError(RuntimeError):
    """An engine command failed."""

    def __init__(
        self,
        message: str,
        args: Optional[Sequence[str]] = None,
        returncode: Optional[int] = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = list(args or [])
        self.returncode = returncode
        self.stderr = stderr


class EngineInitError(EngineError):
    """The engine binary could not be located or started."""


class MediaEngine:
    """A caller-owned ffmpeg session.

    The session owns a private temporary directory that acts as its
    filesystem: files are written and read by relative name, and every
    command runs with that directory as its working directory. Commands
    must not run concurrently against the same session because they share
    file names.

    Usage:
        engine = MediaEngine()
        await engine.ensure_ready()
        await engine.write_file("in.png", data)
        await engine.run(["-i", "in.png", "out.jpg"])
        result = await engine.read_file("out.jpg")
    """

    def __init__(
        self,
        binary: Optional[str] = None,
        workdir: Optional[Path] = None,
    ) -> None:
        """Initialize the session. No work happens until ensure_ready().

        Args:
            binary: Path to ffmpeg. Defaults to the imageio-ffmpeg build.
            workdir: Working directory to use. A temporary one is created
                (and removed on close) if not provided.
        """
        self._binary = binary
        self._workdir = Path(workdir) if workdir else None
        self._owns_workdir = workdir is None
        self._listener: Optional[ProgressListener] = None
        self._ready = False

    @property
    def ready(self) -> bool:
        return self._ready

    @property
    def binary(self) -> Optional[str]:
        return self._binary

    @property
    def workdir(self) -> Path:
        if self._workdir is None:
            raise EngineError("Engine is not initialized")
        return self._workdir

    async def ensure_ready(self) -> "MediaEngine":
        """Locate and verify the ffmpeg binary, once.

        Returns:
            This session.

        Raises:
            EngineInitError: If ffmpeg cannot be found or does not run.
                The session stays uninitialized so a later call retries.
        """
        if self._ready:
            return self

        binary = self._binary
        if not binary:
            try:
                binary = await asyncio.to_thread(imageio_ffmpeg.get_ffmpeg_exe)
            except RuntimeError as e:
                raise EngineInitError(f"ffmpeg not available: {e}") from e

        try:
            process = await asyncio.create_subprocess_exec(
                binary, "-version",
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
            stdout, _ = await process.communicate()
        except OSError as e:
            raise EngineInitError(f"Cannot start ffmpeg at {binary}: {e}") from e

        if process.returncode != 0:
            raise EngineInitError(
                f"ffmpeg at {binary} exited with {process.returncode}",
                returncode=process.returncode,
            )

        if self._workdir is None:
            self._workdir = Path(tempfile.mkdtemp(prefix="reelmaker-"))
        else:
            self._workdir.mkdir(parents=True, exist_ok=True)
        self._write_fontconfig()

        self._binary = binary
        self._ready = True
        version = stdout.decode(errors="replace").splitlines()[:1]
        logger.info(f"Engine ready: {version[0] if version else binary}")
        logger.debug(f"Engine working directory: {self._workdir}")
        return self

    def _write_fontconfig(self) -> None:
        """Point fontconfig at the session's fonts directory only.

        Without this, libass resolves subtitle fonts from whatever the host
        has installed instead of the provisioned font.
        """
        (self._workdir / FONTS_DIR).mkdir(exist_ok=True)
        (self._workdir / FONTCONFIG_FILE).write_text(_FONTCONFIG.format(
            fonts=self._workdir / FONTS_DIR,
            cache=self._workdir / ".fontcache",
        ))

    def _environment(self) -> dict:
        env = dict(os.environ)
        env["FONTCONFIG_FILE"] = str(self._workdir / FONTCONFIG_FILE)
        return env

    def path(self, name: str) -> Path:
        """Resolve an engine file name to a host path."""
        return self.workdir / check_name(name)

    def has_file(self, name: str) -> bool:
        return self.path(name).is_file()

    async def write_file(self, name: str, data: bytes) -> None:
        path = self.path(name)
        path.parent.mkdir(parents=True, exist_ok=True)
        await asyncio.to_thread(path.write_bytes, data)

    async def read_file(self, name: str) -> bytes:
        """Read a file out of the session.

        Raises:
            FileNotFoundError: If the session holds no such file.
        """
        path = self.path(name)
        if not path.exists():
            raise FileNotFoundError(f"Engine file not found: {name}")
        return await asyncio.to_thread(path.read_bytes)

    async def create_dir(self, name: str) -> None:
        self.path(name).mkdir(parents=True, exist_ok=True)

    def on_progress(self, listener: Optional[ProgressListener]) -> None:
        """Subscribe the single progress listener, replacing any previous one.

        The listener receives a fraction in [0, 1] for the current command
        only. Pass None to unsubscribe.
        """
        self._listener = listener

    def _emit(self, fraction: float) -> None:
        if self._listener is not None:
            self._listener(min(1.0, max(0.0, fraction)))

    async def _read_progress(
        self,
        stream: asyncio.StreamReader,
        duration: Optional[float]
    ) -> None:
        # -progress writes key=value blocks terminated by progress=continue|end
        async for raw in stream:
            key, _, value = raw.decode(errors="replace").strip().partition("=")
            if key == "out_time_us" and duration:
                try:
                    seconds = int(value) / 1_000_000
                except ValueError:
                    continue
                self._emit(seconds / duration)
            elif key == "progress" and value == "end":
                self._emit(1.0)

    async def run(
        self,
        args: Sequence[str],
        duration: Optional[float] = None
    ) -> None:
        """Run one ffmpeg command to completion.

        Args:
            args: ffmpeg arguments, without the binary.
            duration: Expected output duration in seconds, used to turn
                encoder timestamps into a progress fraction.

        Raises:
            EngineError: If the engine is not ready, ffmpeg cannot be
                started, or the command fails. If the progress listener
                raises, the process is killed and the error propagates.
        """
        if not self._ready:
            raise EngineError("Engine is not initialized")

        cmd: List[str] = [
            self._binary, "-hide_banner", "-nostats",
            "-progress", "pipe:1",
            *args,
        ]
        logger.debug(f"Running: {' '.join(cmd)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *cmd,
                cwd=str(self._workdir),
                env=self._environment(),
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE
            )
        except OSError as e:
            raise EngineError(f"Cannot start ffmpeg at {self._binary}: {e}", args=args) from e

        stderr_task = asyncio.ensure_future(process.stderr.read())
        finished = False
        try:
            await self._read_progress(process.stdout, duration)
            stderr = (await stderr_task).decode(errors="replace")
            returncode = await process.wait()
            finished = True
        finally:
            if not finished:
                stderr_task.cancel()
                if process.returncode is None:
                    try:
                        process.kill()
                    except ProcessLookupError:
                        pass
                    await process.wait()

        if returncode != 0:
            tail = "\n".join(stderr.strip().splitlines()[-_STDERR_TAIL:])
            raise EngineError(
                f"ffmpeg exited with {returncode}: {tail}",
                args=args,
                returncode=returncode,
                stderr=stderr,
            )

    def close(self) -> None:
        """Remove the session's working directory if it created one."""
        if self._workdir is not None and self._owns_workdir:
            shutil.rmtree(self._workdir, ignore_errors=True)
            self._workdir = None
        self._ready = False

    async def __aenter__(self) -> "MediaEngine":
        return await self.ensure_ready()

    async def __aexit__(self, *exc_info) -> None:
        self.close()


# Process-wide session, created on first acquire()
_shared: Optional[MediaEngine] = None


async def acquire(binary: Optional[str] = None) -> MediaEngine:
    """Return the shared engine session, initializing it at most once.

    Args:
        binary: ffmpeg path used only when the shared session is created.
            Defaults to the configured binary.

    Raises:
        EngineInitError: If initialization fails. The next call retries.
    """
    global _shared
    if _shared is None:
        if binary is None:
            from ..config import config
            binary = config.ffmpeg_binary or None
        _shared = MediaEngine(binary=binary)
    return await _shared.ensure_ready()


def reset_shared() -> None:
    """Drop the shared session, removing its working directory."""
    global _shared
    if _shared is not None:
        _shared.close()
        _shared = None
