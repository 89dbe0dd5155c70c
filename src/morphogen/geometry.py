"""
Vector math shared by the generators and the mesh builder.

Vectors are length-3 numpy arrays; ``face_normals`` works on (N, 3, 3)
triangle stacks.
"""

import numpy as np

UP = np.array([0.0, 1.0, 0.0])
RIGHT = np.array([1.0, 0.0, 0.0])


def vec3(x: float, y: float, z: float) -> np.ndarray:
    return np.array([x, y, z], dtype=np.float64)


def length(v: np.ndarray) -> float:
    return float(np.sqrt(np.dot(v, v)))


def normalize(v: np.ndarray) -> np.ndarray:
    """Unit vector along v; zero vectors are returned unchanged."""
    n = length(v)
    if n > 0:
        return v / n
    return np.asarray(v, dtype=np.float64).copy()


def perpendicular(v: np.ndarray) -> np.ndarray:
    """Unit vector perpendicular to v, crossing with the axis v is least aligned to."""
    if abs(v[0]) < abs(v[1]):
        return normalize(np.cross(v, RIGHT))
    return normalize(np.cross(v, UP))


def rotate_about_axis(v: np.ndarray, axis: np.ndarray, angle: float) -> np.ndarray:
    """
    Rotate v about a unit axis by angle (radians), Rodrigues form.

    Args:
        v: Vector to rotate
        axis: Rotation axis, assumed normalized
        angle: Rotation angle in radians

    Returns:
        Rotated vector
    """
    c = np.cos(angle)
    s = np.sin(angle)
    t = 1.0 - c
    ax, ay, az = axis
    rotation = np.array([
        [t * ax * ax + c, t * ax * ay - s * az, t * ax * az + s * ay],
        [t * ax * ay + s * az, t * ay * ay + c, t * ay * az - s * ax],
        [t * ax * az - s * ay, t * ay * az + s * ax, t * az * az + c],
    ])
    return rotation @ v


def face_normals(triangles: np.ndarray) -> np.ndarray:
    """
    Flat unit normals for a stack of triangles.

    Args:
        triangles: (N, 3, 3) array of vertex positions

    Returns:
        (N, 3) normals; degenerate triangles get a zero normal
    """
    edge1 = triangles[:, 1] - triangles[:, 0]
    edge2 = triangles[:, 2] - triangles[:, 0]
    normals = np.cross(edge1, edge2)
    norms = np.linalg.norm(normals, axis=1, keepdims=True)
    safe = np.where(norms > 0, norms, 1.0)
    return np.where(norms > 0, normals / safe, 0.0)


def triangle_areas(triangles: np.ndarray) -> np.ndarray:
    """Area of each triangle in an (N, 3, 3) stack."""
    edge1 = triangles[:, 1] - triangles[:, 0]
    edge2 = triangles[:, 2] - triangles[:, 0]
    return 0.5 * np.linalg.norm(np.cross(edge1, edge2), axis=1)


def sample_grid(resolution: int, scale: float):
    """
    Cubic sampling lattice over [-scale, scale).

    Args:
        resolution: Points per axis
        scale: Half-extent of the lattice

    Returns:
        (X, Y, Z, step) with X, Y, Z of shape (resolution,) * 3, indexed
        [xi, yi, zi]
    """
    step = scale * 2.0 / resolution
    coords = np.arange(resolution) * step - scale
    X, Y, Z = np.meshgrid(coords, coords, coords, indexing='ij')
    return X, Y, Z, step
