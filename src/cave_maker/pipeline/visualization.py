"""PNG rendering of cave grids."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional

import numpy as np
from PIL import Image

from .config import RenderConfig


@dataclass(frozen=True)
class FrameResult:
    path: Path
    index: int
    metadata: dict[str, Any]


def render_grid(cells: np.ndarray, render: Optional[RenderConfig] = None) -> Image.Image:
    """Map a ``(height, width)`` wall mask to an RGB image, ``cell_size`` pixels per cell."""
    render = render or RenderConfig()
    mask = np.asarray(cells, dtype=bool)
    if mask.ndim != 2:
        raise ValueError(f"Expected a 2D wall mask, got shape {mask.shape}")
    wall = np.array(render.wall_color, dtype=np.uint8)
    passage = np.array(render.passage_color, dtype=np.uint8)
    rgb = np.where(mask[..., None], wall, passage).astype(np.uint8)

    size = render.cell_size
    if size > 1:
        rgb = np.repeat(np.repeat(rgb, size, axis=0), size, axis=1)
    # below three pixels per cell every pixel would be an edge
    if render.border_color is not None and size >= 3:
        rows = np.arange(rgb.shape[0]) % size
        cols = np.arange(rgb.shape[1]) % size
        edge_rows = (rows == 0) | (rows == size - 1)
        edge_cols = (cols == 0) | (cols == size - 1)
        outline = edge_rows[:, None] | edge_cols[None, :]
        rgb[outline] = render.border_color
    return Image.fromarray(rgb)


class FrameWriter:
    """Writes numbered PNG frames of an evolving grid."""

    def __init__(self, output_root: Path, render: Optional[RenderConfig] = None) -> None:
        self._output_root = output_root
        self._render = render or RenderConfig()
        self._count = 0
        output_root.mkdir(parents=True, exist_ok=True)

    @property
    def count(self) -> int:
        return self._count

    def emit(self, cells: np.ndarray, **metadata: Any) -> FrameResult:
        self._count += 1
        path = self._output_root / f"frame-{self._count:04d}.png"
        render_grid(cells, self._render).save(path)
        return FrameResult(path=path, index=self._count, metadata=dict(metadata))


__all__ = ["FrameResult", "FrameWriter", "render_grid"]
