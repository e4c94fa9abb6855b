"""Responsive sizing of drawing surfaces."""

from __future__ import annotations

import logging
import weakref
from dataclasses import dataclass
from typing import Any

logger = logging.getLogger(__name__)

# Share of the parent container a surface occupies.
CONTAINER_FRACTION = 0.8

PLOT_FLOOR = 600.0
IMAGE_FLOOR = 400.0


@dataclass(frozen=True)
class ViewportSpec:
    width: float
    height: float
    device_pixel_ratio: float
    aspect_ratio: float

    @property
    def pixel_size(self) -> tuple[int, int]:
        return int(self.width), int(self.height)


class ViewportManager:
    """Computes and applies the on-screen size of a surface.

    The aspect ratio of an element is captured from its pixel size the
    first time it is laid out and reused on every later resize, so repeated
    integer truncation of the backing store never drifts the ratio.

    By default the backing store is set to the logical size, not the
    device-pixel-ratio scaled one; pass ``scale_backing_store=True`` to
    multiply by the ratio on high-DPI displays.
    """

    def __init__(self, floor: float | None = None, scale_backing_store: bool = False) -> None:
        self.floor = floor
        self.scale_backing_store = scale_backing_store
        self._aspect: weakref.WeakKeyDictionary[Any, float] = weakref.WeakKeyDictionary()

    def aspect_ratio(self, element: Any) -> float:
        ratio = self._aspect.get(element)
        if ratio is None:
            ratio = element.width / element.height if element.width and element.height else 1.0
            self._aspect[element] = ratio
        return ratio

    def compute(
        self,
        element: Any,
        container_width: float,
        device_pixel_ratio: float = 1.0,
    ) -> ViewportSpec:
        dpr = device_pixel_ratio or 1.0
        ratio = self.aspect_ratio(element)
        width = container_width * CONTAINER_FRACTION
        if self.floor is not None and width < self.floor:
            width = self.floor
        return ViewportSpec(
            width=width,
            height=width / ratio,
            device_pixel_ratio=dpr,
            aspect_ratio=ratio,
        )

    def resize(
        self,
        element: Any,
        container_width: float,
        device_pixel_ratio: float = 1.0,
    ) -> ViewportSpec:
        """Size *element* for a container of *container_width* CSS pixels."""
        spec = self.compute(element, container_width, device_pixel_ratio)
        scale = spec.device_pixel_ratio if self.scale_backing_store else 1.0
        element.css_width = spec.width
        element.css_height = spec.height
        element.width = int(spec.width * scale)
        element.height = int(spec.height * scale)
        logger.debug(
            "resized to %.1fx%.1f (dpr %.2f, backing %dx%d)",
            spec.width, spec.height, spec.device_pixel_ratio,
            element.width, element.height,
        )
        return spec
