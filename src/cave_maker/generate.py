"""One-shot cave generation utilities."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Dict, Mapping, Optional

import numpy as np
from PIL import Image

from .pipeline.config import CaveConfig, RenderConfig
from .pipeline.execution import StepLoop
from .pipeline.visualization import render_grid

Array = np.ndarray


def generate_cave(
    width: int,
    height: int,
    seed: int,
    config: Mapping[str, Any],
    *,
    log: bool = False,
    generate_frames: bool = False,
) -> Dict[str, Array | Dict | list]:
    """Seed, evolve and cull a cave in one call.

    ``config`` accepts the keys of ``CaveConfig``; ``width``, ``height`` and
    ``seed`` take precedence over any values it carries. With ``log`` or
    ``generate_frames`` the run writes its JSONL log and PNG frames under the
    configured output directories.
    """
    settings = CaveConfig.from_mapping({**dict(config), "width": width, "height": height, "rng_seed": seed})
    with StepLoop(settings, log=log, generate_frames=generate_frames) as loop:
        loop.run()
    automaton = loop.automaton
    cells = automaton.cells()
    caverns = automaton.find_caverns()
    largest = max((len(cavern) for cavern in caverns), default=0)
    passage_area = sum(len(cavern) for cavern in caverns)

    params = {
        "wall_probability": settings.wall_probability,
        "generations": settings.generations,
        "cull": settings.cull,
        "min_passage_area": settings.min_passage_area,
        "rules": settings.rules.to_dict(),
        "render": settings.render.to_dict(),
        "run_id": settings.run_id,
    }
    stats = {
        "passage_ratio": float(passage_area / cells.size),
        "passage_area": passage_area,
        "cavern_count": len(caverns),
        "largest_cavern": largest,
        "attempts": loop.attempt + 1,
        "accepted": loop.accepted,
    }
    return {
        "cells": cells,
        "caverns": [cavern.to_dict() for cavern in caverns],
        "stats": stats,
        "params": params,
    }


def render_png(world: Mapping[str, Any], cell_size: Optional[int] = None) -> Image.Image:
    render = RenderConfig.from_mapping(world.get("params", {}).get("render"))
    if cell_size is not None:
        render = replace(render, cell_size=cell_size)
    return render_grid(world["cells"], render)


__all__ = ["generate_cave", "render_png"]
