"""Drive a demo page without a browser.

Mounts the example page, changes a control, resizes the container and
writes the final surface to ``example_page.png``.
"""

from __future__ import annotations

from ..config import configure_logging
from ..page.catalog import DEMOS
from ..page.controller import PageController
from .mandelbrot_model import MODELS


def main() -> None:
    configure_logging("DEBUG")
    page = PageController(DEMOS["example"], MODELS["example"])

    page.main(container_width=900)
    print(page.status.status)

    # Each input re-renders immediately from the fresh control values.
    for iterations in ("16", "128", "5000"):
        page.on_input("max_iterations", iterations)
        print(f"{iterations:>5} -> {page.bind().record['max_iterations']}: {page.status.status}")

    result = page.on_resize(container_width=400)
    print(f"viewport {result.outcome.value}: {page.viewport_spec}")

    with open("example_page.png", "wb") as fh:
        fh.write(page.surface.to_png())


if __name__ == "__main__":
    main()
