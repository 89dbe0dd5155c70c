"""
Generation algorithms.

Every builder has the signature
``build(complexity, density, seed, rng) -> (Mesh, params)`` where ``params``
is a dataclass with ``to_dict()``.

- Noise Field: iso-band of layered value noise
- Implicit Blend: near-zero set of blended trig terms
- Reaction-Diffusion: Gray-Scott species B above threshold
- L-System: recursive branching tubes
- Voronoi Mutation: mutated cells braced by struts
"""

from ..config import Algorithm
from .noise_field import build_noise_field, NoiseFieldParams
from .implicit_blend import build_implicit_blend, ImplicitBlendParams
from .reaction_diffusion import build_reaction_diffusion, ReactionDiffusionParams
from .branching import build_branching, BranchingParams, BranchSegment, grow_branches
from .voronoi_mutation import build_voronoi_mutation, VoronoiParams

BUILDERS = {
    Algorithm.NOISE_FIELD: build_noise_field,
    Algorithm.IMPLICIT_BLEND: build_implicit_blend,
    Algorithm.REACTION_DIFFUSION: build_reaction_diffusion,
    Algorithm.BRANCHING_L_SYSTEM: build_branching,
    Algorithm.VORONOI_MUTATION: build_voronoi_mutation,
}

__all__ = [
    "BUILDERS",
    "build_noise_field", "NoiseFieldParams",
    "build_implicit_blend", "ImplicitBlendParams",
    "build_reaction_diffusion", "ReactionDiffusionParams",
    "build_branching", "BranchingParams", "BranchSegment", "grow_branches",
    "build_voronoi_mutation", "VoronoiParams",
]
