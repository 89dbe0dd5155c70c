"""
Voronoi Mutation: mutated cellular structure.

Algorithm:
1. Scatter seed points in a cube of half-extent 0.8
2. Emit a mutated cell at each point: a vertical double fan (top and bottom
   caps joined by walls) whose side vertices are jittered in radius, angle
   and height by the cell's mutation factor
3. Brace nearby cells with thin struts (probability 0.7 per close pair)
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np
from scipy.spatial import cKDTree

from ..mesh import Mesh, MeshBuilder
from ..rng import SeededRandom

logger = logging.getLogger(__name__)

POINT_SCALE = 0.8
# A close pair gets a strut when its draw exceeds this (probability 0.7).
STRUT_GATE = 0.3


@dataclass
class CellShape:
    radius: float
    height: float
    sides: int
    mutation: float


@dataclass
class VoronoiParams:
    n_points: int
    connection_threshold: float
    size_factor: float

    @classmethod
    def from_inputs(cls, complexity: float, density: float) -> "VoronoiParams":
        return cls(
            n_points=int(8 + complexity * 15),
            connection_threshold=0.4 + density * 0.3,
            size_factor=density + 0.5,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "n_points": self.n_points,
            "connection_threshold": self.connection_threshold,
            "size_factor": self.size_factor,
        }


def scatter_points(n_points: int, rng: SeededRandom) -> np.ndarray:
    """(n, 3) points, coordinates drawn x, y, z per point."""
    points = np.empty((n_points, 3), dtype=np.float64)
    for i in range(n_points):
        for axis in range(3):
            points[i, axis] = (rng.next_uniform() * 2.0 - 1.0) * POINT_SCALE
    return points


def draw_cell_shape(size_factor: float, rng: SeededRandom) -> CellShape:
    radius = (0.08 + rng.next_uniform() * 0.08) * size_factor
    height = (0.1 + rng.next_uniform() * 0.1) * size_factor
    sides = int(4 + rng.next_uniform() * 5)
    mutation = 0.3 + rng.next_uniform() * 0.4
    return CellShape(radius=radius, height=height, sides=sides, mutation=mutation)


def mutated_cell_triangles(center: np.ndarray, shape: CellShape, rng: SeededRandom) -> np.ndarray:
    """
    Triangles of one mutated cell.

    Each side vertex draws, in order: radius factor, angle jitter, top
    height factor, bottom height factor.

    Returns:
        (4 * sides, 3, 3) triangle stack
    """
    cx, cy, cz = center
    half = shape.height / 2.0
    m = shape.mutation

    top = np.empty((shape.sides, 3))
    bottom = np.empty((shape.sides, 3))
    for i in range(shape.sides):
        angle = i * 2.0 * math.pi / shape.sides
        r = shape.radius * (1.0 + (rng.next_uniform() - 0.5) * m)
        a = angle + (rng.next_uniform() - 0.5) * m * 0.5

        x = cx + r * math.cos(a)
        z = cz + r * math.sin(a)
        top_y = cy + half * (1.0 + (rng.next_uniform() - 0.5) * m * 0.5)
        bottom_y = cy - half * (1.0 + (rng.next_uniform() - 0.5) * m * 0.5)

        top[i] = (x, top_y, z)
        bottom[i] = (x, bottom_y, z)

    top_center = np.broadcast_to([cx, cy + half, cz], top.shape)
    bottom_center = np.broadcast_to([cx, cy - half, cz], bottom.shape)
    nxt = (np.arange(shape.sides) + 1) % shape.sides

    triangles = np.stack([
        np.stack([top_center, top, top[nxt]], axis=1),
        np.stack([bottom_center, bottom[nxt], bottom], axis=1),
        np.stack([bottom, bottom[nxt], top], axis=1),
        np.stack([bottom[nxt], top[nxt], top], axis=1),
    ], axis=1)
    return triangles.reshape(-1, 3, 3)


def close_pairs(points: np.ndarray, threshold: float) -> List[Tuple[int, int]]:
    """
    Index pairs (i < j) closer than ``threshold``, in lexicographic order.

    The ordering keeps RNG consumption identical to a nested i/j scan.
    """
    if len(points) < 2:
        return []
    tree = cKDTree(points)
    pairs = sorted(tree.query_pairs(threshold))
    return [
        (i, j) for i, j in pairs
        if np.linalg.norm(points[j] - points[i]) < threshold
    ]


def build_voronoi_mutation(
    complexity: float,
    density: float,
    seed: int,
    rng: SeededRandom
) -> Tuple[Mesh, VoronoiParams]:
    """
    Build a foam of mutated cells braced by struts.

    Returns:
        Tuple of (mesh, params)
    """
    params = VoronoiParams.from_inputs(complexity, density)
    points = scatter_points(params.n_points, rng)

    builder = MeshBuilder()
    for point in points:
        shape = draw_cell_shape(params.size_factor, rng)
        builder.add_triangles(mutated_cell_triangles(point, shape, rng))

    n_struts = 0
    for i, j in close_pairs(points, params.connection_threshold):
        if rng.next_uniform() > STRUT_GATE:
            strut_radius = 0.01 + rng.next_uniform() * 0.02
            builder.add_cylinder(points[i], points[j], strut_radius)
            n_struts += 1

    logger.info(f"Voronoi mutation: {params.n_points} cells, {n_struts} struts")
    return builder.build(), params
