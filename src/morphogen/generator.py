"""
Generation dispatcher.

Call sequence for every run (the order fixes RNG consumption and must not
change):
1. Seed a fresh SeededRandom from the seed
2. If no algorithm was given, draw one from the stream (organic bias)
3. Run the selected builder on the same stream
4. Analyze the finished mesh
"""

import logging
import math
from dataclasses import dataclass, field, replace
from typing import Any, Dict, Optional, Union

from .algorithms import BUILDERS
from .analysis import StructuralProperties, analyze_mesh
from .config import Algorithm, ORGANIC_ALGORITHMS, GEOMETRIC_ALGORITHMS
from .mesh import Mesh
from .rng import SeededRandom

logger = logging.getLogger(__name__)

AlgorithmLike = Union[Algorithm, str, None]


def _clamp_unit(value: float) -> float:
    value = float(value)
    if not math.isfinite(value):
        return 0.0
    return min(max(value, 0.0), 1.0)


def resolve_algorithm(algorithm: AlgorithmLike) -> Optional[Algorithm]:
    """
    Normalize an algorithm argument.

    Raises:
        ValueError: for unknown names or non-Algorithm objects
    """
    if algorithm is None or isinstance(algorithm, Algorithm):
        return algorithm
    if isinstance(algorithm, str):
        return Algorithm.from_name(algorithm)
    raise ValueError(f"Invalid algorithm: {algorithm!r}")


@dataclass(frozen=True)
class GenerationParameters:
    """Inputs of one generation run."""
    seed: int
    complexity: float
    density: float
    organic_bias: float
    algorithm: Optional[Algorithm] = None

    def clamped(self) -> "GenerationParameters":
        """Copy with the scalars clamped to [0, 1] (non-finite values become 0)."""
        return replace(
            self,
            seed=int(self.seed),
            complexity=_clamp_unit(self.complexity),
            density=_clamp_unit(self.density),
            organic_bias=_clamp_unit(self.organic_bias),
            algorithm=resolve_algorithm(self.algorithm),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "seed": self.seed,
            "complexity": self.complexity,
            "density": self.density,
            "organic_bias": self.organic_bias,
            "algorithm": self.algorithm.value if self.algorithm else None,
        }


@dataclass(frozen=True)
class GenerationResult:
    """Mesh, its properties and the algorithm that actually ran."""
    mesh: Mesh
    properties: StructuralProperties
    algorithm: Algorithm
    parameters: GenerationParameters
    generation_params: Dict[str, Any] = field(default_factory=dict)
    # True when the algorithm was drawn from the stream rather than given
    algorithm_selected: bool = False


def select_algorithm(rng: SeededRandom, organic_bias: float) -> Algorithm:
    """
    Draw an algorithm family, then a member of it.

    With probability ``organic_bias`` the organic family is used, otherwise
    the geometric one. Consumes exactly two draws.
    """
    if rng.next_uniform() < organic_bias:
        return rng.choice(ORGANIC_ALGORITHMS)
    return rng.choice(GEOMETRIC_ALGORITHMS)


def generate_from(params: GenerationParameters) -> GenerationResult:
    """
    Run one generation from a parameter record.

    Args:
        params: Generation inputs; scalars outside [0, 1] are clamped

    Returns:
        GenerationResult
    """
    params = params.clamped()
    rng = SeededRandom(params.seed)

    if params.algorithm is None:
        algorithm = select_algorithm(rng, params.organic_bias)
        logger.info(f"Selected algorithm: {algorithm.value} (organic_bias={params.organic_bias:.2f})")
    else:
        algorithm = params.algorithm

    try:
        build = BUILDERS[algorithm]
    except KeyError:
        raise ValueError(f"No builder registered for {algorithm!r}") from None

    logger.info(
        f"Generating {algorithm.value}: seed={params.seed}, "
        f"complexity={params.complexity:.2f}, density={params.density:.2f}"
    )
    mesh, algorithm_params = build(params.complexity, params.density, params.seed, rng)
    properties = analyze_mesh(mesh)

    logger.info(f"Generated {properties.mesh_stats} ({rng.draws} random draws)")

    return GenerationResult(
        mesh=mesh,
        properties=properties,
        algorithm=algorithm,
        parameters=params,
        generation_params=algorithm_params.to_dict(),
        algorithm_selected=params.algorithm is None,
    )


def generate(
    seed: int,
    complexity: float,
    density: float,
    organic_bias: float,
    algorithm: AlgorithmLike = None
) -> GenerationResult:
    """
    Generate a structure.

    Args:
        seed: Any integer; equal seeds and inputs give identical meshes
        complexity: 0-1, drives grid resolution / recursion depth / cell count
        density: 0-1, drives extents, band widths and thickness
        organic_bias: 0-1, probability of an organic algorithm when
            ``algorithm`` is None
        algorithm: Algorithm, its display name or slug, or None to draw one

    Returns:
        GenerationResult with the resolved algorithm
    """
    return generate_from(GenerationParameters(
        seed=seed,
        complexity=complexity,
        density=density,
        organic_bias=organic_bias,
        algorithm=algorithm,
    ))
