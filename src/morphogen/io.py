"""
Mesh export and design-record persistence.

Meshes are never persisted: a design record stores only the inputs, the
resolved algorithm and the computed properties, and the mesh is rebuilt on
demand with ``DesignRecord.regenerate``.
"""

import json
import logging
import uuid
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Union

from .analysis import StructuralProperties
from .config import Algorithm
from .generator import GenerationResult, generate
from .mesh import Mesh

logger = logging.getLogger(__name__)

try:
    import trimesh
    TRIMESH_AVAILABLE = True
except ImportError:
    TRIMESH_AVAILABLE = False
    logger.warning("trimesh not available")


def _fmt(value: float) -> str:
    return f"{value:.6f}"


def format_stl(mesh: Mesh, name: str) -> str:
    """
    Render a mesh as ASCII STL.

    Uses the stored flat normal of each triangle as its facet normal.

    Args:
        mesh: Mesh to serialize
        name: Solid name

    Returns:
        STL text (lines joined by newlines, no trailing newline)
    """
    lines = [f"solid {name}"]
    for tri, normal in zip(mesh.triangles, mesh.face_normals):
        lines.append(f"  facet normal {_fmt(normal[0])} {_fmt(normal[1])} {_fmt(normal[2])}")
        lines.append("    outer loop")
        for v in tri:
            lines.append(f"      vertex {_fmt(v[0])} {_fmt(v[1])} {_fmt(v[2])}")
        lines.append("    endloop")
        lines.append("  endfacet")
    lines.append(f"endsolid {name}")
    return "\n".join(lines)


def write_stl(mesh: Mesh, path: Path, name: Optional[str] = None) -> Path:
    """Write ASCII STL; the solid name defaults to the file stem."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    name = name or path.stem
    with open(path, 'w', encoding='ascii') as f:
        f.write(format_stl(mesh, name))
    logger.info(f"Saved STL: {path} ({mesh.n_triangles} triangles)")
    return path


def export_mesh(mesh: Mesh, path: Path, name: Optional[str] = None) -> Path:
    """
    Export a mesh, choosing the writer from the file suffix.

    ``.stl`` uses the ASCII writer; ``.glb``, ``.obj`` and ``.ply`` go
    through trimesh.

    Args:
        mesh: Mesh to export
        path: Output path
        name: Solid name for STL output

    Returns:
        The written path
    """
    path = Path(path)
    if path.suffix.lower() == ".stl":
        return write_stl(mesh, path, name)

    if not TRIMESH_AVAILABLE:
        raise ImportError("trimesh required for exporting meshes (pip install trimesh)")

    path.parent.mkdir(parents=True, exist_ok=True)
    mesh.to_trimesh().export(str(path))
    logger.info(f"Saved mesh: {path} ({mesh.n_vertices} verts, {mesh.n_triangles} tris)")
    return path


def generate_short_id() -> str:
    return uuid.uuid4().hex[:6].upper()


@dataclass
class DesignRecord:
    """
    Persistable description of a generated design.

    Holds everything needed to regenerate the exact mesh.
    """
    seed: int
    algorithm: Algorithm
    complexity: float
    density: float
    organic_bias: float
    properties: StructuralProperties
    name: str = field(default_factory=lambda: f"DESIGN_{generate_short_id()}")
    created_at: datetime = field(default_factory=datetime.now)
    # Algorithm was drawn from organic_bias; regeneration must replay the draw
    algorithm_selected: bool = False

    @classmethod
    def from_result(
        cls,
        result: GenerationResult,
        name: Optional[str] = None,
        prefix: str = "DESIGN"
    ) -> "DesignRecord":
        params = result.parameters
        return cls(
            seed=params.seed,
            algorithm=result.algorithm,
            complexity=params.complexity,
            density=params.density,
            organic_bias=params.organic_bias,
            properties=result.properties,
            name=name or f"{prefix}_{generate_short_id()}",
            algorithm_selected=result.algorithm_selected,
        )

    @property
    def display_name(self) -> str:
        return self.name.upper()

    @property
    def seed_string(self) -> str:
        return f"{self.seed % 1000000:06d}"

    @property
    def date_string(self) -> str:
        return self.created_at.strftime("%Y.%m.%d %H:%M")

    def regenerate(self) -> GenerationResult:
        """
        Rebuild the exact design from its stored inputs.

        Selected designs replay the selection draws so the random stream
        lines up with the run that produced the record.
        """
        result = generate(
            seed=self.seed,
            complexity=self.complexity,
            density=self.density,
            organic_bias=self.organic_bias,
            algorithm=None if self.algorithm_selected else self.algorithm,
        )
        if result.algorithm is not self.algorithm:
            raise ValueError(
                f"Design {self.name} regenerated as {result.algorithm.value}, "
                f"expected {self.algorithm.value}"
            )
        return result

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "created_at": self.created_at.isoformat(),
            "seed": self.seed,
            "algorithm": self.algorithm.value,
            "complexity": self.complexity,
            "density": self.density,
            "organic_bias": self.organic_bias,
            "algorithm_selected": self.algorithm_selected,
            "properties": self.properties.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DesignRecord":
        return cls(
            seed=int(data["seed"]),
            algorithm=Algorithm.from_name(data["algorithm"]),
            complexity=float(data["complexity"]),
            density=float(data["density"]),
            organic_bias=float(data["organic_bias"]),
            properties=StructuralProperties.from_dict(data["properties"]),
            name=data["name"],
            created_at=datetime.fromisoformat(data["created_at"]),
            algorithm_selected=bool(data.get("algorithm_selected", False)),
        )


def save_design(record: DesignRecord, path: Union[str, Path]) -> Path:
    """Save a design record as JSON."""
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, 'w') as f:
        json.dump(record.to_dict(), f, indent=2)
    logger.info(f"Saved design record: {path}")
    return path


def load_design(path: Union[str, Path]) -> DesignRecord:
    """Load a design record saved by ``save_design``."""
    with open(path) as f:
        return DesignRecord.from_dict(json.load(f))
