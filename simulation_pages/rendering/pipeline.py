"""Timed invocation of the external model against a drawing surface."""

from __future__ import annotations

import logging
import math
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable

from ..core.contracts import ModelBinding, ModelInstance
from ..core.params import ParameterError, ParameterRecord, SetterGroup
from .stats import RenderStats

logger = logging.getLogger(__name__)

IN_PROGRESS = "Rendering..."


class RenderOutcome(Enum):
    SUCCESS = "success"
    INVALID_PARAMETERS = "invalid_parameters"
    RENDER_FAILED = "render_failed"


@dataclass(frozen=True)
class RenderResult:
    outcome: RenderOutcome
    handle: Any = None
    latency_ms: int = 0
    caption: str = ""
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.outcome is RenderOutcome.SUCCESS


@dataclass
class StatusPanel:
    """Status line and caption shown next to the surface."""

    status: str = ""
    caption: str = ""


class RenderPipeline:
    """Runs one render and publishes its progress to a :class:`StatusPanel`.

    The status switches to ``"Rendering..."`` before the model is invoked
    and to ``"Rendered in Nms"`` afterwards.  For image-backed pages the
    surface is an off-screen canvas whose content is copied into *image*
    as a data URL once the model returns.

    Model exceptions never escape :meth:`render`; they are logged and
    reported through :class:`RenderResult` with a fallback caption.
    """

    def __init__(
        self,
        binding: ModelBinding,
        surface: Any,
        status: StatusPanel,
        *,
        image: Any = None,
        groups: tuple[SetterGroup, ...] = (),
        clock: Callable[[], float] = time.perf_counter,
        stats: RenderStats | None = None,
        name: str = "",
    ) -> None:
        self.binding = binding
        self.surface = surface
        self.status = status
        self.image = image
        self.groups = groups
        self.clock = clock
        self.stats = stats
        self.name = name
        self.last: RenderResult | None = None

    def params_for(self, record: ParameterRecord) -> Any:
        return record.apply(self.binding.params.builder(), self.groups)

    # ------------------------------------------------------------------
    # Entry points
    # ------------------------------------------------------------------

    def render(
        self,
        record: ParameterRecord,
        tag: str | None = None,
        caption: str = "",
    ) -> RenderResult:
        """Draw a stateless model for *record*, optionally with a solver tag."""
        def invoke(surface: Any) -> Any:
            params = self.params_for(record)
            if tag is None:
                return self.binding.model.draw(surface, params)
            return self.binding.model.draw(surface, tag, params)

        return self._run(invoke, caption)

    def build(self, record: ParameterRecord) -> ModelInstance:
        """Build a stateful model instance from its structural parameters."""
        try:
            return self.binding.model.build(self.params_for(record))
        except ParameterError:
            raise
        except Exception as exc:
            raise ParameterError(str(exc) or type(exc).__name__) from exc

    def step_count(self, instance: ModelInstance) -> int:
        """Last valid step index of *instance*; errors become parameter errors."""
        try:
            return int(instance.max_step())
        except ParameterError:
            raise
        except Exception as exc:
            raise ParameterError(str(exc) or type(exc).__name__) from exc

    def render_step(
        self,
        instance: ModelInstance | None,
        step: int,
        caption: str = "",
    ) -> RenderResult:
        """Draw *step* of a built model instance."""
        def invoke(surface: Any) -> Any:
            if instance is None:
                raise ParameterError("model is not built")
            return instance.draw(surface, step)

        return self._run(invoke, caption)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _elapsed_ms(self, start: float) -> int:
        return int(math.ceil((self.clock() - start) * 1000.0))

    def _run(self, invoke: Callable[[Any], Any], caption: str) -> RenderResult:
        self.status.status = IN_PROGRESS
        start = self.clock()
        try:
            handle = invoke(self.surface)
            if self.image is not None:
                self.image.src = self.surface.to_data_url("image/png")
        except (ParameterError, ValueError, TypeError) as exc:
            logger.warning("%s: invalid parameters: %s", self.name or "render", exc)
            result = self._failed(RenderOutcome.INVALID_PARAMETERS, "Invalid parameters", exc, start)
        except Exception as exc:
            logger.exception("%s: render failed", self.name or "render")
            result = self._failed(RenderOutcome.RENDER_FAILED, "Render failed", exc, start)
        else:
            self.status.caption = caption
            latency = self._elapsed_ms(start)
            self.status.status = f"Rendered in {latency}ms"
            logger.debug("%s: rendered in %dms", self.name or "render", latency)
            result = RenderResult(RenderOutcome.SUCCESS, handle, latency, caption)

        if self.stats is not None:
            self.stats.record(self.name, result.outcome.value, result.latency_ms)
        self.last = result
        return result

    def _failed(
        self,
        outcome: RenderOutcome,
        label: str,
        exc: Exception,
        start: float,
    ) -> RenderResult:
        message = str(exc) or type(exc).__name__
        caption = f"No output ({label.lower()})"
        self.status.caption = caption
        latency = self._elapsed_ms(start)
        self.status.status = f"{label}: {message}"
        return RenderResult(outcome, None, latency, caption, message)
