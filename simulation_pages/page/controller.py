"""Composition root of a demo page.

One :class:`PageController` exists per page.  It owns the controls, the
drawing surface and (for stateful demos) the model instance and playback
state, and translates UI events into renders.  It is the only place that
knows which kind of demo it is driving.
"""

from __future__ import annotations

import logging
import math
import time
from typing import Any, Callable

from ..core.contracts import ModelBinding
from ..core.params import BoundParameters, ParameterBinder, ParameterError, parse_number
from ..core.simplex import rebalance
from ..core.surface import FigureSurface, ImageElement
from ..core.viewport import ViewportManager, ViewportSpec
from ..playback.controller import DEFAULT_INTERVAL_MS, PlaybackController
from ..playback.scheduler import ManualScheduler, Scheduler
from ..rendering.pipeline import RenderPipeline, RenderResult, StatusPanel
from ..rendering.stats import RenderStats
from .catalog import DemoSpec
from .controls import ControlSet

logger = logging.getLogger(__name__)

LOADED = "Model loaded!"


class _Unbuilt:
    """Stands in for a model instance whose build failed."""

    def __init__(self, error: ParameterError) -> None:
        self.error = error

    def draw(self, surface: Any, step: int) -> Any:
        raise self.error

    def max_step(self) -> int:
        return 0


class PageController:
    def __init__(
        self,
        demo: DemoSpec,
        binding: ModelBinding,
        *,
        surface: Any = None,
        image: Any = None,
        status: StatusPanel | None = None,
        scheduler: Scheduler | None = None,
        clock: Callable[[], float] = time.perf_counter,
        stats: RenderStats | None = None,
        interval_ms: float = DEFAULT_INTERVAL_MS,
        scale_backing_store: bool = False,
    ) -> None:
        if binding.stateful != demo.stateful:
            kind = "stateful" if demo.stateful else "stateless"
            raise ValueError(f"{demo.slug} needs a {kind} model")

        self.demo = demo
        self.binding = binding
        self.controls = ControlSet.from_specs(demo.controls)
        self.binder = ParameterBinder(
            demo.fields, solver=demo.solver, tag_control=demo.tag_control,
        )
        unknown = sorted(c for c in self.binder.controls() if c not in self.controls)
        if unknown:
            raise ValueError(f"{demo.slug} binds undeclared controls: {', '.join(unknown)}")

        width, height = demo.surface_size
        self.surface = surface if surface is not None else FigureSurface(width, height)
        self.image = None
        if demo.image_backed:
            self.image = image if image is not None else ImageElement(
                width, height, float(width), float(height),
            )
        self.status = status if status is not None else StatusPanel()

        self.viewport = ViewportManager(demo.floor, scale_backing_store)
        self.viewport_spec: ViewportSpec | None = None
        self.pipeline = RenderPipeline(
            binding, self.surface, self.status,
            image=self.image, groups=demo.groups, clock=clock, stats=stats,
            name=demo.slug,
        )

        self.instance: Any = None
        self._structural_key: tuple | None = None
        self.playback: PlaybackController | None = None
        if demo.stateful:
            self.playback = PlaybackController(
                self._render_step, scheduler or ManualScheduler(), interval_ms,
            )
        self.mounted = False

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    @property
    def element(self) -> Any:
        """The element whose on-screen size follows the container."""
        return self.image if self.image is not None else self.surface

    def bind(self) -> BoundParameters:
        return self.binder.bind(self.controls.values())

    def caption(self) -> str:
        return self.demo.caption(self.controls.values())

    def snapshot(self) -> str:
        """Data URL of what is currently displayed."""
        if self.image is not None:
            return self.image.src
        return self.surface.to_data_url()

    # ------------------------------------------------------------------
    # Events
    # ------------------------------------------------------------------

    def main(self, container_width: float, device_pixel_ratio: float = 1.0) -> RenderResult:
        """Mount the page: build the model if stateful, size and render."""
        self.status.status = LOADED
        if self.playback is not None:
            self._rebuild()
        self.mounted = True
        return self.on_resize(container_width, device_pixel_ratio)

    def on_resize(self, container_width: float, device_pixel_ratio: float = 1.0) -> RenderResult:
        self.viewport_spec = self.viewport.resize(
            self.element, container_width, device_pixel_ratio,
        )
        return self.render()

    def on_input(self, name: str, raw: Any) -> RenderResult:
        if name not in self.controls:
            raise KeyError(f"{self.demo.slug} has no control {name!r}")

        if self.demo.simplex is not None and name in self.demo.simplex:
            self._rebalance(name, raw)
        else:
            self.controls.set(name, raw)

        if self.playback is not None:
            if name == self.demo.step_control:
                value = parse_number(raw)
                index = self.playback.index if math.isnan(value) else int(value)
                return self.playback.scrub(index)
            if name in self.demo.structural:
                self._rebuild()
        return self.render()

    def on_rewind(self) -> RenderResult | None:
        if self.playback is None:
            return None
        return self.playback.rewind()

    def on_play_pause(self) -> RenderResult | None:
        if self.playback is None:
            return None
        self.playback.toggle()
        return self.pipeline.last

    def render(self) -> RenderResult:
        """Re-render from the current control values."""
        if self.playback is not None:
            return self._render_step(self.playback.index)
        bound = self.bind()
        return self.pipeline.render(bound.record, bound.tag, self.caption())

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _render_step(self, index: int) -> RenderResult:
        self.controls.set(self.demo.step_control, index)
        return self.pipeline.render_step(self.instance, index, self.caption())

    def _rebuild(self) -> None:
        key = tuple(self.controls.get(n) for n in self.demo.structural)
        if key == self._structural_key and self.instance is not None:
            return

        record = self.bind().record
        try:
            instance = self.pipeline.build(record)
            max_step = self.pipeline.step_count(instance)
        except ParameterError as exc:
            logger.warning("%s: model build failed: %s", self.demo.slug, exc)
            self.instance = _Unbuilt(exc)
            max_step = 0
        else:
            self.instance = instance
            logger.info("%s: model rebuilt with %d steps", self.demo.slug, max_step + 1)
        self._structural_key = key

        self.playback.load(max_step)
        step = self.controls[self.demo.step_control]
        step.max = max_step
        step.value = "0"

    def _rebalance(self, name: str, raw: Any) -> None:
        names = self.demo.simplex
        current = []
        for n in names:
            value = parse_number(self.controls.get(n))
            current.append(0.0 if math.isnan(value) else value)

        edited = names.index(name)
        requested = parse_number(raw)
        if math.isnan(requested):
            requested = current[edited]

        for n, value in zip(names, rebalance(current, edited, requested)):
            self.controls.set(n, repr(value))
