from pytest import approx, mark
import numpy as np

from forestbda.sim.agent_data import NeighborShape, DispersalTemplate
from forestbda.sim.landscape import Landscape
from forestbda.sim.neighborhood import (resource_neighborhood, dispersal_neighborhood, ring_neighbors,
                                        clip_to_landscape, RelativeLocation, RING_4)


def as_dict(neighborhood):
    return {(loc.row, loc.col): w for loc, w in neighborhood}


def test_gaussian_weights():
    weights = as_dict(resource_neighborhood(NeighborShape.GAUSSIAN, radius=2))
    # half radius = 1
    assert weights[(0, 1)] == approx(np.exp(-1.0), rel=1e-9)
    assert weights[(0, 1)] == approx(0.3679, abs=1e-4)
    assert weights[(1, 1)] == approx(np.exp(-2.0), rel=1e-9)
    assert weights[(-2, 0)] == approx(np.exp(-4.0), rel=1e-9)


def test_linear_weights():
    weights = as_dict(resource_neighborhood(NeighborShape.LINEAR, radius=2))
    assert weights[(1, 0)] == approx(0.5)
    assert weights[(0, -2)] == approx(0.0)
    assert weights[(1, 1)] == approx(1 - np.sqrt(2)/2)


def test_uniform_weights_and_extent():
    weights = as_dict(resource_neighborhood("uniform", radius=2))
    # 4 at distance 1, 4 at sqrt(2), 4 at distance 2; (1, 2) is beyond the radius
    assert len(weights) == 12
    assert set(weights.values()) == {1.0}
    assert (0, 0) not in weights
    assert (1, 2) not in weights


def test_resource_neighborhood_scaled_by_cell_length():
    in_cells = as_dict(resource_neighborhood(NeighborShape.GAUSSIAN, radius=2))
    in_meters = as_dict(resource_neighborhood(NeighborShape.GAUSSIAN, radius=60, cell_length=30))
    assert in_cells.keys() == in_meters.keys()
    for offset, w in in_cells.items():
        assert in_meters[offset] == approx(w)


def test_zero_radius_resource_neighborhood():
    assert resource_neighborhood(NeighborShape.LINEAR, radius=0) == []


def test_ring_tiers_are_nested():
    n4, n8, n12, n24 = (set(ring_neighbors(n)) for n in (4, 8, 12, 24))
    assert [len(s) for s in (n4, n8, n12, n24)] == [4, 8, 12, 24]
    assert n4 < n8 < n12 < n24
    assert RelativeLocation(0, 0) not in n24


@mark.parametrize("requested, expected", [(3, 0), (4, 4), (7, 4), (11, 8), (12, 12), (23, 12), (30, 24)])
def test_ring_neighbors_round_down(requested, expected):
    assert len(ring_neighbors(requested)) == expected


def test_dispersal_templates():
    assert len(dispersal_neighborhood(DispersalTemplate.N8)) == 8
    assert set(dispersal_neighborhood("N12")) == set(ring_neighbors(12))


def test_dispersal_max_radius():
    # radius = 1 * 2 = 2 cells, boundary included
    neighbors = set(dispersal_neighborhood(DispersalTemplate.MAX_RADIUS, dispersal_rate=1, timestep=2))
    assert len(neighbors) == 13
    assert RelativeLocation(0, 0) in neighbors
    assert RelativeLocation(0, 2) in neighbors
    assert RelativeLocation(1, 2) not in neighbors

    # in map units: 15 m/yr over 4 years with 30 m cells is the same 2-cell radius
    in_meters = set(dispersal_neighborhood("MaxRadius", dispersal_rate=15, timestep=4, cell_length=30))
    assert in_meters == neighbors


def test_clip_to_landscape():
    active = np.ones((3, 3), dtype=bool)
    active[1, 0] = False
    ls = Landscape(active)

    assert sorted(clip_to_landscape((0, 0), RING_4, ls)) == [(0, 1)]
    assert len(clip_to_landscape((1, 1), RING_4, ls)) == 3

    weighted = clip_to_landscape((0, 0), resource_neighborhood("linear", radius=1), ls)
    assert weighted == [((0, 1), approx(0.0))]


def test_gaussian_weights_odd_radius():
    # half radius kept in floating point: 1.5, not 1
    weights = as_dict(resource_neighborhood(NeighborShape.GAUSSIAN, radius=3))
    assert weights[(0, 1)] == approx(np.exp(-1/2.25), rel=1e-9)
    assert weights[(0, 1)] == approx(0.641, abs=1e-3)
    assert weights[(0, 3)] == approx(np.exp(-4.0), rel=1e-9)
