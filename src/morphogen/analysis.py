"""
Structural Property Analysis

Computes descriptive metrics for a generated mesh:
- Surface area: sum of triangle areas
- Bounding volume: axis-aligned box volume
- Porosity: 1 - (0.01 * area) / volume, clamped to [0, 1]
- Surface-to-volume ratio
- Complexity: triangle count relative to 10k triangles
- Symmetry: balance of |x|, |y|, |z| mass across vertices

Porosity uses area * 0.01 as a stand-in for solid volume, a rough heuristic
rather than a volume integral.
"""

import logging
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Any, Dict, List

import numpy as np

from .geometry import triangle_areas
from .mesh import Mesh

logger = logging.getLogger(__name__)

VOLUME_FLOOR = 0.001
SOLID_VOLUME_PER_AREA = 0.01
COMPLEXITY_TRIANGLES = 10000
SYMMETRY_TOLERANCE = 0.1
AXIS_BIAS_RATIO = 0.4


class SymmetryType(Enum):
    ROUGHLY_SYMMETRIC = "Roughly Symmetric"
    VERTICAL_BIAS = "Vertical Bias"
    HORIZONTAL_BIAS = "Horizontal Bias"
    ASYMMETRIC = "Asymmetric"
    NONE = "None"


SYMMETRY_TYPES = tuple(s.value for s in SymmetryType)


@dataclass(frozen=True)
class StructuralProperties:
    """Computed metrics for a generated structure."""

    surface_area: float
    bounding_volume: float
    surface_to_volume_ratio: float
    porosity: float  # 0-1
    complexity: float  # 0-1, from triangle count
    symmetry_type: str  # one of SYMMETRY_TYPES
    triangle_count: int
    vertex_count: int

    @property
    def porosity_percent(self) -> str:
        return f"{self.porosity * 100:.0f}%"

    @property
    def surface_to_volume_formatted(self) -> str:
        return f"{self.surface_to_volume_ratio:.2f}"

    @property
    def complexity_level(self) -> str:
        if self.complexity < 0.3:
            return "Low"
        elif self.complexity < 0.6:
            return "Medium"
        else:
            return "High"

    @property
    def mesh_stats(self) -> str:
        return f"{self.triangle_count} triangles, {self.vertex_count} vertices"

    @property
    def potential_applications(self) -> List[str]:
        """Up to four application suggestions derived from the metrics."""
        apps = []

        if self.porosity > 0.5:
            apps += ["Filtration systems", "Acoustic dampening"]

        if self.surface_to_volume_ratio > 5:
            apps += ["Heat exchangers", "Catalyst supports"]

        if self.complexity > 0.6:
            apps += ["Lightweight structural components", "Energy absorption"]

        if self.porosity < 0.3 and self.complexity < 0.4:
            apps += ["Load-bearing structures", "Protective housings"]

        if self.surface_to_volume_ratio > 3 and self.porosity > 0.4:
            apps += ["Tissue scaffolds", "Drug delivery systems"]

        if not apps:
            apps = ["General structural applications", "Decorative/artistic use"]

        return apps[:4]

    @property
    def characteristics_description(self) -> str:
        """Short prose summary, e.g. 'Highly Porous, Vertical Bias structure'."""
        desc = []

        if self.porosity > 0.6:
            desc.append("Highly porous")
        elif self.porosity > 0.3:
            desc.append("Moderately porous")
        else:
            desc.append("Dense")

        if self.surface_to_volume_ratio > 5:
            desc.append("high surface area")

        if self.complexity > 0.6:
            desc.append("complex geometry")
        elif self.complexity < 0.3:
            desc.append("simple geometry")

        desc.append(self.symmetry_type.lower())

        return ", ".join(desc).title() + " structure"

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "StructuralProperties":
        return cls(**data)


def classify_symmetry(vertices: np.ndarray) -> str:
    """
    Classify how vertex mass is spread over the three axes.

    Args:
        vertices: (N, 3) vertex positions

    Returns:
        One of SYMMETRY_TYPES
    """
    if len(vertices) == 0:
        return SymmetryType.NONE.value

    axis_sums = np.abs(vertices).sum(axis=0)
    total = float(axis_sums.sum())
    if total == 0:
        return SymmetryType.NONE.value

    x_ratio, y_ratio, z_ratio = axis_sums / total
    deviation = abs(x_ratio - 1 / 3) + abs(y_ratio - 1 / 3) + abs(z_ratio - 1 / 3)

    if deviation < SYMMETRY_TOLERANCE:
        return SymmetryType.ROUGHLY_SYMMETRIC.value
    elif y_ratio > AXIS_BIAS_RATIO:
        return SymmetryType.VERTICAL_BIAS.value
    elif x_ratio > AXIS_BIAS_RATIO or z_ratio > AXIS_BIAS_RATIO:
        return SymmetryType.HORIZONTAL_BIAS.value
    else:
        return SymmetryType.ASYMMETRIC.value


def analyze_mesh(mesh: Mesh) -> StructuralProperties:
    """
    Compute structural properties of a completed mesh.

    Zero-extent bounds (empty or coincident geometry) are handled by
    flooring the volume denominator at 0.001.

    Args:
        mesh: Generated mesh

    Returns:
        StructuralProperties
    """
    surface_area = float(triangle_areas(mesh.triangles).sum())

    if mesh.n_vertices > 0:
        extents = mesh.bounds[1] - mesh.bounds[0]
        bounding_volume = float(np.prod(extents))
    else:
        bounding_volume = 0.0

    denominator = max(bounding_volume, VOLUME_FLOOR)
    estimated_solid_volume = surface_area * SOLID_VOLUME_PER_AREA
    porosity = float(np.clip(1.0 - estimated_solid_volume / denominator, 0.0, 1.0))
    surface_to_volume = surface_area / denominator

    complexity = min(1.0, mesh.n_triangles / COMPLEXITY_TRIANGLES)

    properties = StructuralProperties(
        surface_area=surface_area,
        bounding_volume=bounding_volume,
        surface_to_volume_ratio=surface_to_volume,
        porosity=porosity,
        complexity=complexity,
        symmetry_type=classify_symmetry(mesh.vertices),
        triangle_count=mesh.n_triangles,
        vertex_count=mesh.n_vertices,
    )

    logger.debug(
        f"Properties: area={surface_area:.3f}, volume={bounding_volume:.3f}, "
        f"porosity={porosity:.2f}, symmetry={properties.symmetry_type}"
    )
    return properties
