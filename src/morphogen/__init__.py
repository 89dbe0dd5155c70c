"""
Morphogen - Seed-driven procedural structure generation.

Five generation algorithms:
- Noise Field: porous shells from layered value noise
- Implicit Blend: near-zero set of blended trig terms
- Reaction-Diffusion: Gray-Scott coral patterns
- L-System: branching vascular networks
- Voronoi Mutation: mutated cellular foam with struts

Usage:
    from morphogen import generate
    result = generate(seed=42, complexity=0.5, density=0.5, organic_bias=0.5)
"""

__version__ = "1.0.0"

from .config import Algorithm, Config, ORGANIC_ALGORITHMS, GEOMETRIC_ALGORITHMS
from .rng import SeededRandom
from .mesh import Mesh, MeshBuilder
from .analysis import StructuralProperties, SymmetryType, SYMMETRY_TYPES, analyze_mesh
from .generator import (
    GenerationParameters,
    GenerationResult,
    generate,
    generate_from,
    select_algorithm,
)
from .io import DesignRecord, format_stl, write_stl, export_mesh, save_design, load_design

__all__ = [
    'Algorithm', 'Config', 'ORGANIC_ALGORITHMS', 'GEOMETRIC_ALGORITHMS',
    'SeededRandom',
    'Mesh', 'MeshBuilder',
    'StructuralProperties', 'SymmetryType', 'SYMMETRY_TYPES', 'analyze_mesh',
    'GenerationParameters', 'GenerationResult', 'generate', 'generate_from', 'select_algorithm',
    'DesignRecord', 'format_stl', 'write_stl', 'export_mesh', 'save_design', 'load_design',
]
