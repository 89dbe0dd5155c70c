"""
Reaction-Diffusion: coral-like organic pattern.

Gray-Scott style two-species simulation on a cubic grid:

    A' = A + (dA * lap(A) - A*B^2 + feed * (1 - A)) * dt
    B' = B + (dB * lap(B) + A*B^2 - (kill + feed) * B) * dt

Algorithm:
1. A = 1 everywhere, B = 0 except for a few random 3x3x3 seed blocks
2. Iterate the update on interior cells (6-neighbour Laplacian), clamping
   both species to [0, 1]
3. Emit a cube for every cell where B ends above the threshold

Each pass reads only the previous grids and writes fresh ones, so update
order within a pass has no effect.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np

from ..mesh import Mesh, MeshBuilder
from ..rng import SeededRandom

logger = logging.getLogger(__name__)

DIFFUSION_A = 1.0
DIFFUSION_B = 0.5
TIME_STEP = 0.1
GRID_SCALE = 0.8
CUBE_FILL = 0.9


@dataclass
class ReactionDiffusionParams:
    grid_size: int
    seeds: List[Tuple[int, int, int]]
    feed: float
    kill: float
    iterations: int
    threshold: float

    @classmethod
    def draw(cls, complexity: float, density: float, rng: SeededRandom) -> "ReactionDiffusionParams":
        grid_size = int(12 + complexity * 8)
        n_seeds = int(3 + density * 5)

        seeds = []
        for _ in range(n_seeds):
            sx = int(rng.next_uniform() * (grid_size - 4)) + 2
            sy = int(rng.next_uniform() * (grid_size - 4)) + 2
            sz = int(rng.next_uniform() * (grid_size - 4)) + 2
            seeds.append((sx, sy, sz))

        return cls(
            grid_size=grid_size,
            seeds=seeds,
            feed=rng.uniform(0.055, 0.065),
            kill=rng.uniform(0.062, 0.072),
            iterations=int(20 + complexity * 30),
            threshold=0.2 + density * 0.2,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "grid_size": self.grid_size,
            "seeds": [list(s) for s in self.seeds],
            "feed": self.feed,
            "kill": self.kill,
            "iterations": self.iterations,
            "threshold": self.threshold,
        }


def laplacian(grid: np.ndarray) -> np.ndarray:
    """
    6-neighbour discrete Laplacian of the interior cells.

    Returns:
        Array of shape ``grid.shape - 2`` on every axis
    """
    center = grid[1:-1, 1:-1, 1:-1]
    return (
        grid[:-2, 1:-1, 1:-1] + grid[2:, 1:-1, 1:-1]
        + grid[1:-1, :-2, 1:-1] + grid[1:-1, 2:, 1:-1]
        + grid[1:-1, 1:-1, :-2] + grid[1:-1, 1:-1, 2:]
        - 6.0 * center
    )


def initial_grids(params: ReactionDiffusionParams) -> Tuple[np.ndarray, np.ndarray]:
    """A filled with 1.0, B zero apart from the 3x3x3 seed blocks."""
    n = params.grid_size
    grid_a = np.ones((n, n, n), dtype=np.float64)
    grid_b = np.zeros((n, n, n), dtype=np.float64)
    for sx, sy, sz in params.seeds:
        grid_b[sx - 1:sx + 2, sy - 1:sy + 2, sz - 1:sz + 2] = 1.0
    return grid_a, grid_b


def step_reaction_diffusion(
    grid_a: np.ndarray,
    grid_b: np.ndarray,
    feed: float,
    kill: float
) -> Tuple[np.ndarray, np.ndarray]:
    """
    One full update pass.

    Inputs are left untouched; boundary cells are carried over unchanged.

    Returns:
        Tuple of (new_a, new_b)
    """
    a = grid_a[1:-1, 1:-1, 1:-1]
    b = grid_b[1:-1, 1:-1, 1:-1]
    reaction = a * b * b

    new_a = grid_a.copy()
    new_b = grid_b.copy()
    new_a[1:-1, 1:-1, 1:-1] = np.clip(
        a + (DIFFUSION_A * laplacian(grid_a) - reaction + feed * (1.0 - a)) * TIME_STEP,
        0.0, 1.0
    )
    new_b[1:-1, 1:-1, 1:-1] = np.clip(
        b + (DIFFUSION_B * laplacian(grid_b) + reaction - (kill + feed) * b) * TIME_STEP,
        0.0, 1.0
    )
    return new_a, new_b


def simulate(params: ReactionDiffusionParams) -> Tuple[np.ndarray, np.ndarray]:
    """Run all iterations from the seeded initial state."""
    grid_a, grid_b = initial_grids(params)
    for _ in range(params.iterations):
        grid_a, grid_b = step_reaction_diffusion(grid_a, grid_b, params.feed, params.kill)
    return grid_a, grid_b


def build_reaction_diffusion(
    complexity: float,
    density: float,
    seed: int,
    rng: SeededRandom
) -> Tuple[Mesh, ReactionDiffusionParams]:
    """
    Simulate reaction-diffusion and voxelize species B.

    Returns:
        Tuple of (mesh, params)
    """
    params = ReactionDiffusionParams.draw(complexity, density, rng)
    logger.debug(f"Reaction-diffusion params: {params.to_dict()}")

    _, grid_b = simulate(params)

    n = params.grid_size
    step = GRID_SCALE * 2.0 / n
    cells = np.argwhere(grid_b > params.threshold)
    centers = cells.astype(np.float64) * step - GRID_SCALE

    builder = MeshBuilder()
    builder.add_cubes(centers, step * CUBE_FILL)

    logger.info(
        f"Reaction-diffusion: {n}^3 grid, {params.iterations} iterations, "
        f"{len(cells)} cells above {params.threshold:.2f}"
    )
    return builder.build(), params
