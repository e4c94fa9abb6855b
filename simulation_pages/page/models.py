"""Loading of external model modules."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Mapping
from typing import Any

from ..core.contracts import ModelBinding

logger = logging.getLogger(__name__)


class ModelLoadError(RuntimeError):
    """A model module could not be imported or exposes no bindings."""


def _as_binding(slug: str, entry: Any) -> ModelBinding:
    if isinstance(entry, ModelBinding):
        return entry
    try:
        model, params = entry
    except (TypeError, ValueError) as exc:
        raise ModelLoadError(f"binding for {slug!r} must be a (Model, Params) pair") from exc
    return ModelBinding(model, params)


def load_bindings(*module_paths: str) -> dict[str, ModelBinding]:
    """Import each module and collect its demo bindings.

    A module either defines ``MODELS`` (slug -> ``ModelBinding`` or
    ``(Model, Params)``) or a ``setup()`` function returning such a mapping.
    Later modules override earlier ones for the same slug.
    """
    bindings: dict[str, ModelBinding] = {}
    for path in module_paths:
        if not path:
            continue
        try:
            module = importlib.import_module(path)
        except ImportError as exc:
            raise ModelLoadError(f"cannot import model module {path!r}: {exc}") from exc

        if hasattr(module, "MODELS"):
            entries: Mapping[str, Any] = module.MODELS
        elif callable(getattr(module, "setup", None)):
            entries = module.setup()
        else:
            raise ModelLoadError(f"{path!r} defines neither MODELS nor setup()")

        for slug, entry in entries.items():
            bindings[slug] = _as_binding(slug, entry)
        logger.info("loaded %d model(s) from %s", len(entries), path)
    return bindings
