"""
Noise Field: organic, cave-like porous structure.

Algorithm:
1. Draw three octave frequencies/amplitudes and an iso threshold
2. Sample summed value noise on a cubic lattice (8^3 .. 20^3 points)
3. Keep points inside a thin band around the threshold (iso-band selection)
4. Emit one cube per kept point

The band test, rather than a sign test, is what yields thin porous shells
instead of filled blobs.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Tuple

import numpy as np

from ..geometry import sample_grid
from ..mesh import Mesh, MeshBuilder
from ..noise import fractal_noise3d
from ..rng import SeededRandom

logger = logging.getLogger(__name__)

CUBE_FILL = 0.8
BAND_FACTOR = 0.15


@dataclass
class NoiseFieldParams:
    """Shape parameters for one noise-field run."""
    resolution: int
    scale: float
    frequencies: Tuple[float, float, float]
    amplitudes: Tuple[float, float, float]
    threshold: float
    band: float

    @classmethod
    def draw(cls, complexity: float, density: float, rng: SeededRandom) -> "NoiseFieldParams":
        """Derive grid settings and draw octave parameters (7 draws)."""
        frequencies = (
            rng.uniform(2.0, 6.0),
            rng.uniform(1.0, 4.0),
            rng.uniform(0.5, 2.5),
        )
        amplitudes = (
            rng.uniform(0.3, 0.7),
            rng.uniform(0.2, 0.5),
            rng.uniform(0.1, 0.3),
        )
        threshold = rng.uniform(-0.1, 0.1)
        return cls(
            resolution=int(8 + complexity * 12),
            scale=0.8 + density * 0.4,
            frequencies=frequencies,
            amplitudes=amplitudes,
            threshold=threshold,
            band=BAND_FACTOR * density,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "resolution": self.resolution,
            "scale": self.scale,
            "frequencies": list(self.frequencies),
            "amplitudes": list(self.amplitudes),
            "threshold": self.threshold,
            "band": self.band,
        }


def build_noise_field(
    complexity: float,
    density: float,
    seed: int,
    rng: SeededRandom
) -> Tuple[Mesh, NoiseFieldParams]:
    """
    Build a porous shell from an iso-band of layered value noise.

    Args:
        complexity: Controls lattice resolution
        density: Controls lattice extent and band width
        seed: Base noise seed; octave k uses seed + k
        rng: Seeded stream for parameter draws

    Returns:
        Tuple of (mesh, params)
    """
    params = NoiseFieldParams.draw(complexity, density, rng)
    logger.debug(f"Noise field params: {params.to_dict()}")

    X, Y, Z, step = sample_grid(params.resolution, params.scale)
    field = fractal_noise3d(X, Y, Z, params.frequencies, params.amplitudes, seed=seed)

    solid = np.abs(field - params.threshold) < params.band
    centers = np.column_stack([X[solid], Y[solid], Z[solid]])

    builder = MeshBuilder()
    builder.add_cubes(centers, step * CUBE_FILL)

    logger.info(f"Noise field: {params.resolution}^3 grid, {len(centers)} solid cells")
    return builder.build(), params
