"""
Tests for the five generation algorithms.

Tests cover:
- Parameter derivation and drawn ranges
- Per-builder determinism
- Algorithm-specific invariants (bands, simulation, growth stops, struts)
"""

import math

import pytest
import numpy as np
from pathlib import Path
import sys

# Add src to path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from morphogen.rng import SeededRandom
from morphogen.config import Algorithm
from morphogen.algorithms import BUILDERS
from morphogen.geometry import sample_grid
from morphogen.noise import fractal_noise3d
from morphogen.algorithms.noise_field import NoiseFieldParams, build_noise_field
from morphogen.algorithms.implicit_blend import ImplicitBlendParams, blend_field, build_implicit_blend
from morphogen.algorithms.reaction_diffusion import (
    ReactionDiffusionParams,
    initial_grids,
    laplacian,
    simulate,
    step_reaction_diffusion,
)
from morphogen.algorithms.branching import (
    MIN_RADIUS,
    BranchingParams,
    build_branching,
    grow_branches,
)
from morphogen.algorithms.voronoi_mutation import (
    CellShape,
    VoronoiParams,
    build_voronoi_mutation,
    close_pairs,
    mutated_cell_triangles,
    scatter_points,
)


def build(algorithm, complexity, density, seed):
    return BUILDERS[algorithm](complexity, density, seed, SeededRandom(seed))


# ============== Registry ==============

class TestRegistry:

    def test_all_algorithms_registered(self):
        assert set(BUILDERS) == set(Algorithm)

    @pytest.mark.parametrize("algorithm", list(Algorithm))
    def test_builders_deterministic(self, algorithm):
        mesh_a, params_a = build(algorithm, 0.3, 0.6, 1234)
        mesh_b, params_b = build(algorithm, 0.3, 0.6, 1234)
        np.testing.assert_array_equal(mesh_a.vertices, mesh_b.vertices)
        np.testing.assert_array_equal(mesh_a.normals, mesh_b.normals)
        assert params_a.to_dict() == params_b.to_dict()


# ============== Noise Field ==============

class TestNoiseField:

    def test_resolution_bounds(self):
        assert NoiseFieldParams.draw(0.0, 0.5, SeededRandom(1)).resolution == 8
        assert NoiseFieldParams.draw(1.0, 0.5, SeededRandom(1)).resolution == 20

    def test_resolution_monotonic(self):
        res = [NoiseFieldParams.draw(c, 0.5, SeededRandom(1)).resolution for c in np.linspace(0, 1, 11)]
        assert res == sorted(res)

    def test_drawn_ranges(self):
        for seed in range(50):
            p = NoiseFieldParams.draw(0.5, 0.5, SeededRandom(seed))
            assert 2.0 <= p.frequencies[0] < 6.0
            assert 1.0 <= p.frequencies[1] < 4.0
            assert 0.5 <= p.frequencies[2] < 2.5
            assert 0.3 <= p.amplitudes[0] < 0.7
            assert 0.2 <= p.amplitudes[1] < 0.5
            assert 0.1 <= p.amplitudes[2] < 0.3
            assert -0.1 <= p.threshold < 0.1

    def test_consumes_seven_draws(self):
        rng = SeededRandom(3)
        NoiseFieldParams.draw(0.5, 0.5, rng)
        assert rng.draws == 7

    @pytest.mark.parametrize("seed,complexity,density", [(9, 0.5, 0.7), (3, 0.2, 1.0), (40, 0.8, 0.3)])
    def test_iso_band_cells(self, seed, complexity, density):
        """One cube per lattice point within 0.15 * density of the threshold."""
        mesh, _ = build_noise_field(complexity, density, seed, SeededRandom(seed))

        params = NoiseFieldParams.draw(complexity, density, SeededRandom(seed))
        X, Y, Z, _ = sample_grid(params.resolution, params.scale)
        field = fractal_noise3d(X, Y, Z, params.frequencies, params.amplitudes, seed=seed)
        band = np.abs(field - params.threshold) < 0.15 * density

        assert mesh.n_triangles == 12 * int(band.sum())

    def test_zero_density_is_empty(self):
        mesh, params = build(Algorithm.NOISE_FIELD, 0.5, 0.0, 8)
        assert params.band == 0.0
        assert mesh.n_triangles == 0

    def test_complexity_increases_detail(self):
        low = sum(build(Algorithm.NOISE_FIELD, 0.1, 0.5, s)[0].n_triangles for s in range(5))
        high = sum(build(Algorithm.NOISE_FIELD, 1.0, 0.5, s)[0].n_triangles for s in range(5))
        assert high > low

    def test_cube_size(self):
        mesh, params = build(Algorithm.NOISE_FIELD, 0.5, 1.0, 21)
        step = params.scale * 2.0 / params.resolution
        if mesh.n_triangles:
            extent = np.ptp(mesh.triangles[:12].reshape(-1, 3), axis=0)
            np.testing.assert_allclose(extent, step * 0.8)


# ============== Implicit Blend ==============

class TestImplicitBlend:

    def test_params(self):
        rng = SeededRandom(9)
        p = ImplicitBlendParams.draw(1.0, 1.0, rng)
        assert p.resolution == 20
        assert p.scale == pytest.approx(1.0)
        assert p.band == pytest.approx(0.3)
        assert len(p.terms) == 4
        assert rng.draws == 16
        for p0, p1, p2, w in p.terms:
            assert -3.0 <= p0 < 3.0 and -3.0 <= p1 < 3.0 and -3.0 <= p2 < 3.0
            assert -1.0 <= w < 1.0

    def test_blend_field_patterns(self):
        terms = [(1.0, 2.0, 3.0, 1.0)] * 4
        x, y, z = 0.3, -0.2, 0.5
        expected = (
            math.sin(1.0 * x) * math.cos(2.0 * y)
            + math.sin(2.0 * y) * math.cos(3.0 * z)
            + math.sin(3.0 * z) * math.cos(1.0 * x)
            + math.sin(1.0 * x + 2.0 * y) * math.cos(3.0 * z)
        )
        assert float(blend_field(x, y, z, terms)) == pytest.approx(expected)

    @pytest.mark.parametrize("seed,complexity,density", [(9, 0.5, 0.7), (12, 1.0, 0.4)])
    def test_iso_band_cells(self, seed, complexity, density):
        """One cube per lattice point where the blended field is within 0.3 * density of zero."""
        mesh, _ = build_implicit_blend(complexity, density, seed, SeededRandom(seed))

        params = ImplicitBlendParams.draw(complexity, density, SeededRandom(seed))
        X, Y, Z, _ = sample_grid(params.resolution, params.scale)
        band = np.abs(blend_field(X, Y, Z, params.terms)) < 0.3 * density

        assert mesh.n_triangles == 12 * int(band.sum())
        if band.any():
            first = np.argwhere(band)[0]
            center = np.array([X[tuple(first)], Y[tuple(first)], Z[tuple(first)]])
            corners = mesh.triangles[:12].reshape(-1, 3)
            midpoint = (corners.min(axis=0) + corners.max(axis=0)) / 2.0
            np.testing.assert_allclose(midpoint, center, atol=1e-9)

    def test_zero_density_is_empty(self):
        mesh, _ = build(Algorithm.IMPLICIT_BLEND, 0.7, 0.0, 4)
        assert mesh.n_triangles == 0

    def test_cells_inside_extent(self):
        mesh, params = build_implicit_blend(0.5, 0.8, 17, SeededRandom(17))
        if mesh.n_triangles:
            step = params.scale * 2.0 / params.resolution
            assert np.abs(mesh.vertices).max() <= params.scale + step


# ============== Reaction-Diffusion ==============

class TestReactionDiffusion:

    @pytest.fixture
    def params(self):
        return ReactionDiffusionParams.draw(0.0, 0.5, SeededRandom(12))

    def test_param_ranges(self):
        for seed in range(30):
            p = ReactionDiffusionParams.draw(0.5, 0.5, SeededRandom(seed))
            assert p.grid_size == 16
            assert len(p.seeds) == 5
            for s in p.seeds:
                assert all(2 <= v <= p.grid_size - 3 for v in s)
            assert 0.055 <= p.feed < 0.065
            assert 0.062 <= p.kill < 0.072
            assert p.iterations == 35
            assert p.threshold == pytest.approx(0.3)

    def test_laplacian_constant_grid(self):
        grid = np.full((6, 6, 6), 0.7)
        lap = laplacian(grid)
        assert lap.shape == (4, 4, 4)
        np.testing.assert_allclose(lap, 0.0, atol=1e-12)

    def test_laplacian_point(self):
        grid = np.zeros((5, 5, 5))
        grid[2, 2, 2] = 1.0
        lap = laplacian(grid)
        assert lap[1, 1, 1] == -6.0
        assert lap[0, 1, 1] == 1.0

    def test_initial_grids(self, params):
        grid_a, grid_b = initial_grids(params)
        assert np.all(grid_a == 1.0)
        sx, sy, sz = params.seeds[0]
        assert np.all(grid_b[sx - 1:sx + 2, sy - 1:sy + 2, sz - 1:sz + 2] == 1.0)
        assert grid_b.sum() <= 27 * len(params.seeds)

    def test_step_leaves_inputs(self, params):
        grid_a, grid_b = initial_grids(params)
        a0, b0 = grid_a.copy(), grid_b.copy()
        new_a, new_b = step_reaction_diffusion(grid_a, grid_b, params.feed, params.kill)
        np.testing.assert_array_equal(grid_a, a0)
        np.testing.assert_array_equal(grid_b, b0)
        assert not np.array_equal(new_b, grid_b)

    def test_step_keeps_boundary(self, params):
        grid_a, grid_b = initial_grids(params)
        new_a, new_b = step_reaction_diffusion(grid_a, grid_b, params.feed, params.kill)
        np.testing.assert_array_equal(new_a[0], grid_a[0])
        np.testing.assert_array_equal(new_b[:, -1], grid_b[:, -1])

    def test_simulation_bounded(self, params):
        grid_a, grid_b = simulate(params)
        for grid in (grid_a, grid_b):
            assert grid.min() >= 0.0
            assert grid.max() <= 1.0

    def test_cells_on_grid(self):
        mesh, params = build(Algorithm.REACTION_DIFFUSION, 0.2, 0.4, 77)
        assert mesh.n_triangles % 12 == 0
        if mesh.n_triangles:
            assert mesh.vertices.min() >= -0.8 - 1e-9
            assert mesh.vertices.max() <= 0.8 + 1e-9


# ============== Branching L-System ==============

class TestBranching:

    def test_params(self):
        p = BranchingParams.draw(1.0, 1.0, SeededRandom(2))
        assert math.radians(20) <= p.angle < math.radians(60)
        assert 0.6 <= p.length_decay < 0.8
        assert 0.6 <= p.radius_decay < 0.8
        assert p.branch_count in (2, 3)
        assert p.max_depth == 5
        assert p.start_radius == pytest.approx(0.08)
        assert p.start_length == pytest.approx(0.5)
        assert p.n_trunks == 3

    @pytest.mark.parametrize("complexity", [0.0, 0.5, 1.0])
    @pytest.mark.parametrize("density", [0.0, 0.5, 1.0])
    def test_growth_stops(self, complexity, density):
        rng = SeededRandom(31)
        params = BranchingParams.draw(complexity, density, rng)
        segments = grow_branches(params, rng)
        assert segments
        for s in segments:
            assert s.depth < params.max_depth
            assert s.radius > MIN_RADIUS

    def test_radius_stop(self):
        """Children below the minimum radius are not emitted even with depth to spare."""
        params = BranchingParams(
            angle=0.5, length_decay=0.7, radius_decay=0.6, branch_count=2,
            max_depth=10, start_radius=0.006, start_length=0.3, n_trunks=1,
        )
        assert len(grow_branches(params, SeededRandom(0))) == 1

    def test_full_tree(self):
        params = BranchingParams(
            angle=0.5, length_decay=0.7, radius_decay=0.8, branch_count=2,
            max_depth=3, start_radius=0.1, start_length=0.3, n_trunks=2,
        )
        segments = grow_branches(params, SeededRandom(0))
        assert len(segments) == 2 * (1 + 2 + 4)
        assert sum(1 for s in segments if s.depth == 0) == 2

    def test_children_start_at_parent_end(self):
        params = BranchingParams(
            angle=0.5, length_decay=0.7, radius_decay=0.8, branch_count=2,
            max_depth=2, start_radius=0.1, start_length=0.3, n_trunks=1,
        )
        trunk, child_a, child_b = grow_branches(params, SeededRandom(4))
        np.testing.assert_allclose(child_a.start, trunk.end)
        np.testing.assert_allclose(child_b.start, trunk.end)
        assert np.linalg.norm(child_a.end - child_a.start) == pytest.approx(0.3 * 0.7)

    def test_trunk_base(self):
        rng = SeededRandom(6)
        params = BranchingParams.draw(0.0, 1.0, rng)
        trunks = [s for s in grow_branches(params, rng) if s.depth == 0]
        assert len(trunks) == 3
        np.testing.assert_allclose([t.start[1] for t in trunks], -0.4)
        np.testing.assert_allclose([t.start[0] for t in trunks], [-0.3, 0.0, 0.3])

    def test_mesh_has_cylinder_per_segment(self):
        rng = SeededRandom(5)
        params = BranchingParams.draw(0.4, 0.6, rng)
        segments = grow_branches(params, rng)
        mesh, _ = build_branching(0.4, 0.6, 5, SeededRandom(5))
        assert mesh.n_triangles == 24 * len(segments)


# ============== Voronoi Mutation ==============

class TestVoronoiMutation:

    def test_params(self):
        p = VoronoiParams.from_inputs(1.0, 0.0)
        assert p.n_points == 23
        assert p.connection_threshold == pytest.approx(0.4)
        assert p.size_factor == pytest.approx(0.5)

    def test_close_pairs_matches_brute_force(self):
        points = np.random.default_rng(0).uniform(-0.8, 0.8, size=(25, 3))
        threshold = 0.6
        expected = [
            (i, j)
            for i in range(len(points))
            for j in range(i + 1, len(points))
            if np.linalg.norm(points[j] - points[i]) < threshold
        ]
        assert close_pairs(points, threshold) == expected

    def test_close_pairs_small_input(self):
        assert close_pairs(np.zeros((1, 3)), 1.0) == []

    def test_cell_triangle_count(self):
        shape = CellShape(radius=0.1, height=0.2, sides=5, mutation=0.5)
        rng = SeededRandom(1)
        tris = mutated_cell_triangles(np.zeros(3), shape, rng)
        assert tris.shape == (20, 3, 3)
        assert rng.draws == 20

    def test_cell_caps(self):
        shape = CellShape(radius=0.1, height=0.2, sides=6, mutation=0.3)
        tris = mutated_cell_triangles(np.array([0.5, 0.0, -0.5]), shape, SeededRandom(2))
        caps = tris.reshape(6, 4, 3, 3)
        np.testing.assert_allclose(caps[:, 0, 0], [[0.5, 0.1, -0.5]] * 6)
        np.testing.assert_allclose(caps[:, 1, 0], [[0.5, -0.1, -0.5]] * 6)

    def test_first_cell_centered_on_first_point(self):
        mesh, params = build_voronoi_mutation(0.5, 0.5, 42, SeededRandom(42))
        first = scatter_points(params.n_points, SeededRandom(42))[0]
        top_center = mesh.vertices[0]
        assert top_center[0] == pytest.approx(first[0])
        assert top_center[2] == pytest.approx(first[2])
        assert top_center[1] > first[1]

    def test_points_in_extent(self):
        points = scatter_points(100, SeededRandom(8))
        assert np.abs(points).max() < 0.8

    def test_triangle_count(self):
        mesh, params = build(Algorithm.VORONOI_MUTATION, 0.5, 0.5, 42)
        assert params.n_points == 15
        # at least 4 sides (16 triangles) per cell; struts add 24 each
        assert mesh.n_triangles >= 16 * params.n_points
