"""Overall progress for an assembly run."""

import logging
from dataclasses import dataclass
from typing import Callable, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProgressState:
    """A progress update delivered to the caller.

    Attributes:
        overall_fraction: Overall progress in [0, 1].
        current_scene: 1-based scene being rendered, None while merging.
        total_scenes: Number of scenes in the run.
    """

    overall_fraction: float
    current_scene: Optional[int]
    total_scenes: int

    @property
    def merging(self) -> bool:
        return self.current_scene is None

    @property
    def label(self) -> str:
        if self.merging:
            return "Merging..."
        return f"Scene {self.current_scene}/{self.total_scenes}"


ProgressCallback = Callable[[ProgressState], None]


def overall_progress(
    completed_steps: int,
    step_progress: float,
    total_steps: int
) -> float:
    """Map a step index and in-step progress to an overall fraction.

    Each step gets an equal slice of [0, 1].

    Args:
        completed_steps: Steps fully done before the current one.
        step_progress: Progress of the current step in [0, 1].
        total_steps: Total number of steps (scenes + 1 for the merge).

    Returns:
        Overall fraction in [0, 1].
    """
    if total_steps <= 0:
        raise ValueError(f"total_steps must be positive, got {total_steps}")
    step_progress = min(1.0, max(0.0, step_progress))
    return min(1.0, (completed_steps + step_progress) / total_steps)


class ProgressReporter:
    """Delivers monotonic progress for one assembly run.

    Steps are the scenes followed by one merge step. The first update is
    ``0.0`` and the only ``1.0`` comes from complete(); anything that would
    move backwards is dropped.
    """

    def __init__(
        self,
        total_scenes: int,
        callback: Optional[ProgressCallback] = None
    ) -> None:
        self._total_scenes = total_scenes
        self._total_steps = total_scenes + 1
        self._callback = callback
        self._step = 0
        self._last: Optional[ProgressState] = None

    @property
    def total_steps(self) -> int:
        return self._total_steps

    @property
    def last(self) -> Optional[ProgressState]:
        return self._last

    def _current_scene(self) -> Optional[int]:
        return self._step + 1 if self._step < self._total_scenes else None

    def _deliver(self, fraction: float, final: bool = False) -> None:
        state = ProgressState(
            overall_fraction=fraction,
            current_scene=None if final else self._current_scene(),
            total_scenes=self._total_scenes,
        )
        last = self._last
        if last is not None:
            if fraction < last.overall_fraction:
                return
            if fraction == last.overall_fraction and (
                state == last or fraction in (0.0, 1.0)
            ):
                return
        if fraction >= 1.0 and not final:
            return

        self._last = state
        if self._callback is not None:
            self._callback(state)

    def start(self) -> None:
        """Report 0 at the start of the run."""
        self._step = 0
        self._deliver(0.0)

    def begin_step(self, step: int) -> None:
        """Enter a step: a scene index, or total_scenes for the merge."""
        self._step = step
        self._deliver(overall_progress(step, 0.0, self._total_steps))

    def update(self, step_progress: float) -> None:
        """Report engine progress for the current step."""
        self._deliver(overall_progress(self._step, step_progress, self._total_steps))

    def complete(self) -> None:
        """Report 1 once the output exists."""
        self._step = self._total_steps
        self._deliver(1.0, final=True)
