"""Drawing surfaces handed to external models."""

from __future__ import annotations

import base64
import io
from dataclasses import dataclass

from matplotlib.backends.backend_agg import FigureCanvasAgg
from matplotlib.figure import Figure


class FigureSurface:
    """Canvas-like wrapper around a Matplotlib figure.

    ``width``/``height`` are the backing-store size in pixels and resize the
    figure; ``css_width``/``css_height`` are the displayed size and only
    affect how the snapshot is laid out by the front end.  Models draw into
    :attr:`figure`.
    """

    def __init__(self, width: int = 600, height: int = 400, dpi: float = 100.0) -> None:
        self.dpi = dpi
        self.figure = Figure(figsize=(width / dpi, height / dpi), dpi=dpi)
        FigureCanvasAgg(self.figure)
        self._width = int(width)
        self._height = int(height)
        self.css_width = float(width)
        self.css_height = float(height)

    @property
    def width(self) -> int:
        return self._width

    @width.setter
    def width(self, value: int) -> None:
        self._width = max(int(value), 1)
        self._resize()

    @property
    def height(self) -> int:
        return self._height

    @height.setter
    def height(self, value: int) -> None:
        self._height = max(int(value), 1)
        self._resize()

    def _resize(self) -> None:
        self.figure.set_size_inches(self._width / self.dpi, self._height / self.dpi)

    def to_png(self) -> bytes:
        buf = io.BytesIO()
        self.figure.savefig(buf, format="png", dpi=self.dpi)
        return buf.getvalue()

    def to_data_url(self, mime: str = "image/png") -> str:
        fmt = mime.split("/")[-1]
        buf = io.BytesIO()
        self.figure.savefig(buf, format=fmt, dpi=self.dpi)
        encoded = base64.b64encode(buf.getvalue()).decode("ascii")
        return f"data:{mime};base64,{encoded}"


@dataclass(eq=False)
class ImageElement:
    """Visible image target for image-backed pages."""

    width: int = 400
    height: int = 400
    css_width: float = 400.0
    css_height: float = 400.0
    src: str = ""
