"""Random noise seeding for the cave grid."""

from __future__ import annotations

from typing import Optional, Union

import numpy as np

from .grid import CaveGrid

RandomSource = Union[np.random.Generator, int, None]


def as_generator(rng: RandomSource) -> np.random.Generator:
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def noise_mask(shape: tuple[int, int], wall_probability: float, rng: RandomSource = None) -> np.ndarray:
    """Draw a wall mask where each cell is a wall with ``wall_probability``.

    Uniform draws lie in ``[0, 1)`` so probabilities outside ``[0, 1]``
    saturate to all-wall or all-passage.
    """
    generator = as_generator(rng)
    return generator.random(shape) < float(wall_probability)


def seed_noise(grid: CaveGrid, wall_probability: float, rng: Optional[RandomSource] = None) -> None:
    grid.assign(noise_mask(grid.shape, wall_probability, rng))


__all__ = ["RandomSource", "as_generator", "noise_mask", "seed_noise"]
