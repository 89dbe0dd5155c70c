"""
Configuration and constants for structure generation.

Parameter Model:
- seed (int) + complexity, density, organic_bias in [0, 1]
- The core clamps to [0, 1]; callers may narrow further with Config ranges
- Algorithm is explicit or drawn from the seeded stream (see generator.py)
"""

from enum import Enum
from dataclasses import dataclass, field
from typing import Dict, Any, Tuple
import json
from pathlib import Path


class Algorithm(Enum):
    """
    Generation algorithms - MUST be one of these.

    Values are the display names persisted in design records, so they
    must never change once records exist.
    """
    NOISE_FIELD = "Noise Field"
    IMPLICIT_BLEND = "Implicit Blend"
    REACTION_DIFFUSION = "Reaction-Diffusion"
    BRANCHING_L_SYSTEM = "L-System"
    VORONOI_MUTATION = "Voronoi Mutation"

    @property
    def description(self) -> str:
        return _DESCRIPTIONS[self]

    @property
    def slug(self) -> str:
        """Command-line friendly name, e.g. ``noise_field``."""
        return self.name.lower()

    @property
    def is_organic(self) -> bool:
        return self in ORGANIC_ALGORITHMS

    @classmethod
    def from_name(cls, name: str) -> "Algorithm":
        """
        Resolve an algorithm from its display name or slug.

        Raises:
            ValueError: if the name matches no algorithm
        """
        key = name.strip()
        for algorithm in cls:
            if key == algorithm.value or key.lower() == algorithm.slug:
                return algorithm
        raise ValueError(
            f"Unknown algorithm: {name!r} "
            f"(expected one of {[a.slug for a in cls]})"
        )


_DESCRIPTIONS = {
    Algorithm.NOISE_FIELD: "Organic, cave-like porous structure",
    Algorithm.IMPLICIT_BLEND: "Abstract mathematical surface",
    Algorithm.REACTION_DIFFUSION: "Coral-like organic pattern",
    Algorithm.BRANCHING_L_SYSTEM: "Branching vascular network",
    Algorithm.VORONOI_MUTATION: "Mutated cellular structure",
}

# Selection order matters: the seeded pick indexes into these tuples.
ORGANIC_ALGORITHMS: Tuple[Algorithm, ...] = (
    Algorithm.NOISE_FIELD,
    Algorithm.REACTION_DIFFUSION,
    Algorithm.BRANCHING_L_SYSTEM,
)
GEOMETRIC_ALGORITHMS: Tuple[Algorithm, ...] = (
    Algorithm.IMPLICIT_BLEND,
    Algorithm.VORONOI_MUTATION,
)

EXPORT_FORMATS = ("stl", "glb", "obj", "ply")


def _clamp(value: float, bounds: Tuple[float, float]) -> float:
    low, high = bounds
    return float(min(max(value, low), high))


@dataclass
class Config:
    """
    Global configuration for structure generation runs.

    The ranges are the caller-side sub-ranges applied before invoking the
    core (the core itself accepts the full [0, 1] domain).
    """

    # Typical caller ranges
    complexity_range: Tuple[float, float] = (0.1, 1.0)
    density_range: Tuple[float, float] = (0.2, 1.0)
    organic_bias_range: Tuple[float, float] = (0.0, 1.0)

    # Export settings
    export_format: str = "stl"
    name_prefix: str = "DESIGN"

    # Paths (relative to project root)
    output_dir: Path = field(default_factory=lambda: Path("outputs"))

    def clamp_parameters(
        self,
        complexity: float,
        density: float,
        organic_bias: float
    ) -> Tuple[float, float, float]:
        """Clamp the three scalar parameters to the configured ranges."""
        return (
            _clamp(complexity, self.complexity_range),
            _clamp(density, self.density_range),
            _clamp(organic_bias, self.organic_bias_range),
        )

    def get_output_path(self, name: str) -> Path:
        """Get mesh output path for a design name."""
        return self.output_dir / "meshes" / f"{name}.{self.export_format}"

    def get_meta_path(self, name: str) -> Path:
        """Get design-record path for a design name."""
        return self.output_dir / "meta" / f"{name}.json"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "complexity_range": list(self.complexity_range),
            "density_range": list(self.density_range),
            "organic_bias_range": list(self.organic_bias_range),
            "export_format": self.export_format,
            "name_prefix": self.name_prefix,
            "output_dir": str(self.output_dir),
        }

    @classmethod
    def from_json(cls, path: Path) -> "Config":
        """Load config from JSON file."""
        with open(path) as f:
            data = json.load(f)
        for key in ("complexity_range", "density_range", "organic_bias_range"):
            if key in data:
                data[key] = tuple(data[key])
        if "output_dir" in data:
            data["output_dir"] = Path(data["output_dir"])
        fmt = data.get("export_format", "stl")
        if fmt not in EXPORT_FORMATS:
            raise ValueError(f"Unsupported export format: {fmt}")
        return cls(**data)

    def save(self, path: Path) -> None:
        """Save config to JSON file."""
        path.parent.mkdir(parents=True, exist_ok=True)
        with open(path, 'w') as f:
            json.dump(self.to_dict(), f, indent=2)


# Global default config
DEFAULT_CONFIG = Config()
