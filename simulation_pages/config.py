"""Runtime settings and logging setup."""

from __future__ import annotations

import logging
import os
from collections.abc import Mapping
from dataclasses import dataclass

from .playback.controller import DEFAULT_INTERVAL_MS

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

EXAMPLE_MODELS = "simulation_pages.examples.mandelbrot_model"


def _flag(value: str | None) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    host: str = "0.0.0.0"
    port: int = 7860
    debug: bool = False
    log_level: str = "INFO"
    model_modules: tuple[str, ...] = (EXAMPLE_MODELS,)
    frame_interval_ms: float = DEFAULT_INTERVAL_MS
    container_width: float = 1000.0
    scale_backing_store: bool = False

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Settings:
        """Read settings from environment variables.

        ``SIM_PAGES_MODELS`` is a comma separated list of model modules;
        the bundled example model is always loaded first.
        """
        env = os.environ if environ is None else environ
        extra = tuple(
            m.strip() for m in env.get("SIM_PAGES_MODELS", "").split(",") if m.strip()
        )
        return cls(
            host=env.get("HOST", cls.host),
            port=int(env.get("PORT", cls.port)),
            debug=_flag(env.get("SIM_PAGES_DEBUG")),
            log_level=env.get("SIM_PAGES_LOG_LEVEL", cls.log_level).upper(),
            model_modules=(EXAMPLE_MODELS,) + tuple(m for m in extra if m != EXAMPLE_MODELS),
            frame_interval_ms=float(env.get("SIM_PAGES_FRAME_MS", cls.frame_interval_ms)),
            container_width=float(env.get("SIM_PAGES_CONTAINER_WIDTH", cls.container_width)),
            scale_backing_store=_flag(env.get("SIM_PAGES_HIDPI")),
        )


def configure_logging(level: str = "INFO") -> None:
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=LOG_FORMAT)
    # Matplotlib's font manager is chatty at DEBUG.
    logging.getLogger("matplotlib").setLevel(logging.WARNING)
