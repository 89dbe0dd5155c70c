"""
Branching L-System: branching vascular network.

Recursive tree growth from one to three near-vertical trunks. Each segment
becomes a capped cylinder and spawns 2-3 children that are tilted off the
parent axis, rolled around it, and shortened/thinned by the decay factors.

Growth stops at the maximum depth or once the radius falls to 0.005.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, Dict, List, Tuple

import numpy as np

from ..geometry import normalize, perpendicular, rotate_about_axis, vec3
from ..mesh import Mesh, MeshBuilder
from ..rng import SeededRandom

logger = logging.getLogger(__name__)

MIN_RADIUS = 0.005
TRUNK_SPACING = 0.3
TRUNK_BASE_Y = -0.4


@dataclass
class BranchingParams:
    angle: float  # radians
    length_decay: float
    radius_decay: float
    branch_count: int
    max_depth: int
    start_radius: float
    start_length: float
    n_trunks: int

    @classmethod
    def draw(cls, complexity: float, density: float, rng: SeededRandom) -> "BranchingParams":
        angle = math.radians(rng.uniform(20.0, 60.0))
        length_decay = rng.uniform(0.6, 0.8)
        radius_decay = rng.uniform(0.6, 0.8)
        branch_count = int(2 + rng.next_uniform() * 2)
        return cls(
            angle=angle,
            length_decay=length_decay,
            radius_decay=radius_decay,
            branch_count=branch_count,
            max_depth=int(3 + complexity * 2),
            start_radius=0.06 * density + 0.02,
            start_length=0.3 + density * 0.2,
            n_trunks=int(1 + density * 2),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "angle_deg": math.degrees(self.angle),
            "length_decay": self.length_decay,
            "radius_decay": self.radius_decay,
            "branch_count": self.branch_count,
            "max_depth": self.max_depth,
            "start_radius": self.start_radius,
            "start_length": self.start_length,
            "n_trunks": self.n_trunks,
        }


@dataclass
class BranchSegment:
    """One grown segment, emitted as a cylinder."""
    start: np.ndarray
    end: np.ndarray
    radius: float
    depth: int


def grow_branches(params: BranchingParams, rng: SeededRandom) -> List[BranchSegment]:
    """
    Grow all trunks depth-first.

    Draw order per trunk: two direction jitters, then per child a tilt and
    a roll draw before recursing into that child.

    Returns:
        Segments in emission order
    """
    segments: List[BranchSegment] = []

    def branch(pos: np.ndarray, direction: np.ndarray, length: float, radius: float, depth: int) -> None:
        if depth >= params.max_depth or radius <= MIN_RADIUS:
            return

        end = pos + direction * length
        segments.append(BranchSegment(start=pos, end=end, radius=radius, depth=depth))

        for i in range(params.branch_count):
            tilt = params.angle * (1.0 + rng.next_uniform() * 0.5 - 0.25)
            roll = i * 2.0 * math.pi / params.branch_count + rng.next_uniform() * 0.5

            tilted = rotate_about_axis(direction, perpendicular(direction), tilt)
            child_dir = rotate_about_axis(tilted, direction, roll)

            branch(
                end,
                child_dir,
                length * params.length_decay,
                radius * params.radius_decay,
                depth + 1
            )

    for t in range(params.n_trunks):
        offset_x = (t - params.n_trunks // 2) * TRUNK_SPACING
        start = vec3(offset_x, TRUNK_BASE_Y, 0.0)
        jitter_x = rng.next_uniform() * 0.2 - 0.1
        jitter_z = rng.next_uniform() * 0.2 - 0.1
        direction = normalize(vec3(jitter_x, 1.0, jitter_z))
        branch(start, direction, params.start_length, params.start_radius, 0)

    return segments


def build_branching(
    complexity: float,
    density: float,
    seed: int,
    rng: SeededRandom
) -> Tuple[Mesh, BranchingParams]:
    """
    Build a branching tube network.

    Returns:
        Tuple of (mesh, params)
    """
    params = BranchingParams.draw(complexity, density, rng)
    logger.debug(f"Branching params: {params.to_dict()}")

    segments = grow_branches(params, rng)

    builder = MeshBuilder()
    for segment in segments:
        builder.add_cylinder(segment.start, segment.end, segment.radius)

    logger.info(f"Branching: {params.n_trunks} trunks, {len(segments)} segments")
    return builder.build(), params
