"""
Implicit Blend: abstract mathematical surface.

Sums four weighted sin*cos terms over a cubic lattice and keeps the points
where the field is close to zero. The axis pair of each term cycles through
xy, yz, zx and a diagonal (x + y, z) pattern.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np

from ..geometry import sample_grid
from ..mesh import Mesh, MeshBuilder
from ..rng import SeededRandom

logger = logging.getLogger(__name__)

N_TERMS = 4
CUBE_FILL = 0.85
BAND_FACTOR = 0.3

# (p0, p1, p2, weight)
Term = Tuple[float, float, float, float]


@dataclass
class ImplicitBlendParams:
    resolution: int
    scale: float
    terms: List[Term]
    band: float

    @classmethod
    def draw(cls, complexity: float, density: float, rng: SeededRandom) -> "ImplicitBlendParams":
        terms = []
        for _ in range(N_TERMS):
            p0 = rng.uniform(-3.0, 3.0)
            p1 = rng.uniform(-3.0, 3.0)
            p2 = rng.uniform(-3.0, 3.0)
            weight = rng.uniform(-1.0, 1.0)
            terms.append((p0, p1, p2, weight))
        return cls(
            resolution=int(10 + complexity * 10),
            scale=0.7 + density * 0.3,
            terms=terms,
            band=BAND_FACTOR * density,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resolution": self.resolution,
            "scale": self.scale,
            "terms": [list(t) for t in self.terms],
            "band": self.band,
        }


def blend_field(x, y, z, terms: List[Term]):
    """Evaluate the blended trig field at the given coordinates."""
    value = np.zeros(np.broadcast(x, y, z).shape)
    for i, (p0, p1, p2, weight) in enumerate(terms):
        pattern = i % 4
        if pattern == 0:
            value = value + np.sin(p0 * x) * np.cos(p1 * y) * weight
        elif pattern == 1:
            value = value + np.sin(p1 * y) * np.cos(p2 * z) * weight
        elif pattern == 2:
            value = value + np.sin(p2 * z) * np.cos(p0 * x) * weight
        else:
            value = value + np.sin(p0 * x + p1 * y) * np.cos(p2 * z) * weight
    return value


def build_implicit_blend(
    complexity: float,
    density: float,
    seed: int,
    rng: SeededRandom
) -> Tuple[Mesh, ImplicitBlendParams]:
    """
    Build the near-zero set of a blended trig field.

    Returns:
        Tuple of (mesh, params)
    """
    params = ImplicitBlendParams.draw(complexity, density, rng)
    logger.debug(f"Implicit blend params: {params.to_dict()}")

    X, Y, Z, step = sample_grid(params.resolution, params.scale)
    value = blend_field(X, Y, Z, params.terms)

    solid = np.abs(value) < params.band
    centers = np.column_stack([X[solid], Y[solid], Z[solid]])

    builder = MeshBuilder()
    builder.add_cubes(centers, step * CUBE_FILL)

    logger.info(f"Implicit blend: {params.resolution}^3 grid, {len(centers)} solid cells")
    return builder.build(), params
