"""
Triangle mesh container and append-only builder.

Meshes are flat-shaded triangle soups: every triangle owns three fresh
vertices and a single normal repeated over its three vertex slots. The index
buffer is implicit (0, 1, 2, ...).
"""

import logging
from dataclasses import dataclass
from typing import List

import numpy as np

from .geometry import face_normals, normalize, UP, RIGHT

logger = logging.getLogger(__name__)

try:
    import trimesh
    TRIMESH_AVAILABLE = True
except ImportError:
    TRIMESH_AVAILABLE = False

CYLINDER_SEGMENTS = 6

# Corner order: bottom face (z-) counter-clockwise, then top face (z+).
_CUBE_CORNERS = np.array([
    [-1, -1, -1], [1, -1, -1], [1, 1, -1], [-1, 1, -1],
    [-1, -1, 1], [1, -1, 1], [1, 1, 1], [-1, 1, 1],
], dtype=np.float64)

_CUBE_FACES = np.array([
    [0, 1, 2], [0, 2, 3],
    [5, 4, 7], [5, 7, 6],
    [3, 2, 6], [3, 6, 7],
    [4, 5, 1], [4, 1, 0],
    [4, 0, 3], [4, 3, 7],
    [1, 5, 6], [1, 6, 2],
])


@dataclass(frozen=True, eq=False)
class Mesh:
    """A flat-shaded triangle mesh with read-only buffers."""
    vertices: np.ndarray  # (3T, 3) vertex positions
    normals: np.ndarray   # (3T, 3) per-vertex normals, constant per triangle

    @classmethod
    def empty(cls) -> "Mesh":
        return MeshBuilder().build()

    @property
    def n_vertices(self) -> int:
        return len(self.vertices)

    @property
    def n_triangles(self) -> int:
        return len(self.vertices) // 3

    @property
    def indices(self) -> np.ndarray:
        """Implicit sequential index buffer."""
        return np.arange(self.n_vertices, dtype=np.int32)

    @property
    def faces(self) -> np.ndarray:
        """(T, 3) index triples."""
        return self.indices.reshape(-1, 3)

    @property
    def triangles(self) -> np.ndarray:
        """(T, 3, 3) vertex positions per triangle."""
        return self.vertices.reshape(-1, 3, 3)

    @property
    def face_normals(self) -> np.ndarray:
        """(T, 3) one normal per triangle."""
        return self.normals[::3]

    @property
    def bounds(self) -> np.ndarray:
        """(2, 3) array of min and max corner; zeros for an empty mesh."""
        if self.n_vertices == 0:
            return np.zeros((2, 3))
        return np.array([self.vertices.min(axis=0), self.vertices.max(axis=0)])

    def to_trimesh(self) -> "trimesh.Trimesh":
        """
        Wrap as a trimesh mesh without merging vertices.

        Returns:
            trimesh.Trimesh sharing this mesh's triangle layout
        """
        if not TRIMESH_AVAILABLE:
            raise ImportError("trimesh required for mesh conversion (pip install trimesh)")
        return trimesh.Trimesh(
            vertices=np.array(self.vertices),
            faces=self.faces,
            face_normals=np.array(self.face_normals),
            process=False
        )


class MeshBuilder:
    """
    Append-only triangle accumulator.

    Normals are computed when triangles are added. ``build`` freezes the
    accumulated triangles into a Mesh.
    """

    def __init__(self):
        self._chunks: List[np.ndarray] = []
        self._normal_chunks: List[np.ndarray] = []
        self._n_triangles = 0

    @property
    def n_triangles(self) -> int:
        return self._n_triangles

    def add_triangles(self, triangles: np.ndarray) -> None:
        """Append an (N, 3, 3) stack of triangles."""
        triangles = np.asarray(triangles, dtype=np.float64).reshape(-1, 3, 3)
        if len(triangles) == 0:
            return
        self._chunks.append(triangles)
        self._normal_chunks.append(face_normals(triangles))
        self._n_triangles += len(triangles)

    def add_triangle(self, v0, v1, v2) -> None:
        self.add_triangles(np.array([[v0, v1, v2]], dtype=np.float64))

    def add_cube(self, center, size: float) -> None:
        """Axis-aligned cube of edge ``size`` centred at ``center`` (12 triangles)."""
        self.add_cubes(np.asarray(center, dtype=np.float64).reshape(1, 3), size)

    def add_cubes(self, centers: np.ndarray, size: float) -> None:
        """
        Axis-aligned cubes at each row of ``centers``, in row order.

        Args:
            centers: (N, 3) cube centres
            size: Edge length shared by all cubes
        """
        centers = np.asarray(centers, dtype=np.float64).reshape(-1, 3)
        if len(centers) == 0:
            return
        corners = centers[:, None, :] + _CUBE_CORNERS[None, :, :] * (size / 2.0)
        self.add_triangles(corners[:, _CUBE_FACES].reshape(-1, 3, 3))

    def add_cylinder(
        self,
        start,
        end,
        radius: float,
        segments: int = CYLINDER_SEGMENTS
    ) -> None:
        """
        Capped cylinder between two points (4 triangles per segment).

        The ring frame is built from the axis crossed with +Y, falling back
        to +X when the axis is near-vertical.
        """
        start = np.asarray(start, dtype=np.float64)
        end = np.asarray(end, dtype=np.float64)
        direction = normalize(end - start)

        perp1 = np.cross(direction, UP)
        if np.linalg.norm(perp1) < 0.001:
            perp1 = np.cross(direction, RIGHT)
        perp1 = normalize(perp1)
        perp2 = np.cross(direction, perp1)

        angles = np.arange(segments) * 2.0 * np.pi / segments
        offsets = (
            np.outer(np.cos(angles), perp1) + np.outer(np.sin(angles), perp2)
        ) * radius
        start_ring = start + offsets
        end_ring = end + offsets

        nxt = (np.arange(segments) + 1) % segments
        starts = np.broadcast_to(start, start_ring.shape)
        ends = np.broadcast_to(end, end_ring.shape)
        triangles = np.stack([
            np.stack([start_ring, start_ring[nxt], end_ring], axis=1),
            np.stack([start_ring[nxt], end_ring[nxt], end_ring], axis=1),
            np.stack([starts, start_ring[nxt], start_ring], axis=1),
            np.stack([ends, end_ring, end_ring[nxt]], axis=1),
        ], axis=1)
        self.add_triangles(triangles.reshape(-1, 3, 3))

    def build(self) -> Mesh:
        """Freeze the accumulated triangles."""
        if self._chunks:
            triangles = np.concatenate(self._chunks, axis=0)
            flat = np.concatenate(self._normal_chunks, axis=0)
        else:
            triangles = np.empty((0, 3, 3), dtype=np.float64)
            flat = np.empty((0, 3), dtype=np.float64)
        normals = np.repeat(flat, 3, axis=0)
        vertices = triangles.reshape(-1, 3)
        vertices.setflags(write=False)
        normals.setflags(write=False)
        logger.debug(f"Built mesh: {len(triangles)} triangles")
        return Mesh(vertices=vertices, normals=normals)
