"""Play/pause/rewind/scrub state machine over a precomputed step sequence."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Callable

from .scheduler import Scheduler, TimerHandle

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_MS = 75


class PlaybackState(Enum):
    IDLE = "idle"
    PLAYING = "playing"
    PAUSED = "paused"


class PlaybackController:
    """Turns a step index into an animation.

    Only the current index is held here; the states themselves belong to the
    model instance, reached through *render_step*.  Each tick schedules the
    next one as a single-shot timer, so a slow render stretches the frame
    interval instead of queueing frames.
    """

    def __init__(
        self,
        render_step: Callable[[int], Any],
        scheduler: Scheduler,
        interval_ms: float = DEFAULT_INTERVAL_MS,
    ) -> None:
        self.render_step = render_step
        self.scheduler = scheduler
        self.interval_ms = interval_ms
        self.state = PlaybackState.IDLE
        self.index = 0
        self.max_step = 0
        self._pending: TimerHandle | None = None

    @property
    def playing(self) -> bool:
        return self.state is PlaybackState.PLAYING

    @property
    def at_end(self) -> bool:
        return self.index >= self.max_step

    def _cancel(self) -> None:
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None

    def _enter(self, state: PlaybackState) -> None:
        if state is not self.state:
            logger.debug("playback %s -> %s at step %d", self.state.value, state.value, self.index)
        self.state = state

    # ── Transitions ──────────────────────────────────────────────────

    def load(self, max_step: int) -> None:
        """Adopt a freshly built step sequence; does not render."""
        self._cancel()
        self.max_step = max(int(max_step), 0)
        self.index = 0
        self._enter(PlaybackState.IDLE)

    def rewind(self) -> Any:
        self._cancel()
        self.index = 0
        self._enter(PlaybackState.IDLE)
        return self.render_step(self.index)

    def play(self) -> None:
        self._cancel()
        self._enter(PlaybackState.PLAYING)
        self.tick()

    def pause(self) -> None:
        self._cancel()
        self._enter(PlaybackState.PAUSED)

    def toggle(self) -> None:
        if self.playing:
            self.pause()
        else:
            self.play()

    def tick(self) -> None:
        self._pending = None
        if not self.playing:
            return
        self.index = min(self.index + 1, self.max_step)
        self.render_step(self.index)
        if self.index < self.max_step:
            self._pending = self.scheduler.call_later(self.interval_ms, self.tick)
        else:
            self._enter(PlaybackState.IDLE)

    def scrub(self, value: int) -> Any:
        """Jump to *value*, preempting any running animation."""
        self._cancel()
        self._enter(PlaybackState.PAUSED)
        self.index = min(max(int(value), 0), self.max_step)
        return self.render_step(self.index)
