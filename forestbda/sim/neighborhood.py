"""
Neighborhood templates of a disturbance agent.

Two kinds of neighborhood are built once per agent, at setup:

- the resource neighborhood, a list of :class:`WeightedLocation` whose
  weights decay with distance according to the agent's neighbor shape;
- the dispersal neighborhood, a list of :class:`RelativeLocation` giving
  the sites an outbreak can reach from an epicenter in one timestep.

Both are potential neighbors only: callers clip them to the landscape
bounds and to active sites with :func:`clip_to_landscape`.
"""

from typing import NamedTuple
import numpy as np

from forestbda.sim.agent_data import NeighborShape, DispersalTemplate
from forestbda.utils.log import Reporter

r = Reporter()


class RelativeLocation(NamedTuple):
    row: int
    col: int


class WeightedLocation(NamedTuple):
    location: RelativeLocation
    weight: float


# neighbor rings, each tier extends the previous one
RING_4 = (
    RelativeLocation( 0,  1),   # east
    RelativeLocation( 1,  0),   # south
    RelativeLocation( 0, -1),   # west
    RelativeLocation(-1,  0),   # north
)
RING_8 = (
    RelativeLocation(-1,  1),   # northeast
    RelativeLocation( 1,  1),   # southeast
    RelativeLocation( 1, -1),   # southwest
    RelativeLocation(-1, -1),   # northwest
)
RING_12 = (
    RelativeLocation(-2,  0),   # north north
    RelativeLocation( 0,  2),   # east east
    RelativeLocation( 2,  0),   # south south
    RelativeLocation( 0, -2),   # west west
)
RING_24 = (
    RelativeLocation(-2, -2),
    RelativeLocation(-2, -1),
    RelativeLocation(-1, -2),
    RelativeLocation(-2,  2),
    RelativeLocation(-2,  1),
    RelativeLocation(-1,  2),
    RelativeLocation( 2,  2),
    RelativeLocation( 1,  2),
    RelativeLocation( 2,  1),
    RelativeLocation( 2, -2),
    RelativeLocation( 2, -1),
    RelativeLocation( 1, -2),
)
RING_TIERS = ((4, RING_4), (8, RING_8), (12, RING_12), (24, RING_24))


def distance_from_center(row, col, cell_length=1.0):
    """ Euclidean distance between the centers of a cell at offset (row, col) and the origin cell. """
    return np.hypot(np.abs(row)*cell_length, np.abs(col)*cell_length)


def _uniform_weight(distance, radius):
    return np.ones_like(distance)

def _linear_weight(distance, radius):
    return 1.0 - distance/radius

def _gaussian_weight(distance, radius):
    half_radius = radius/2
    return np.exp(-distance**2/half_radius**2)

NEIGHBOR_WEIGHT_FUNCS = {
    NeighborShape.UNIFORM : _uniform_weight,
    NeighborShape.LINEAR  : _linear_weight,
    NeighborShape.GAUSSIAN: _gaussian_weight,
}


def _offset_grid(radius, cell_length):
    # all offsets in the square block around the center, and their distances
    n_cells = int(radius/cell_length)
    span = np.arange(-n_cells, n_cells + 1)
    rows, cols = np.meshgrid(span, span, indexing="ij")
    rows, cols = rows.ravel(), cols.ravel()
    return rows, cols, distance_from_center(rows, cols, cell_length)


def resource_neighborhood(shape, radius, cell_length=1.0) -> list[WeightedLocation]:
    """
    Build the weighted resource neighborhood.

    Parameters
    ----------
    shape : NeighborShape
        Weight function: uniform (1.0), linear (``1 - d/radius``) or gaussian
        (``exp(-d²/(radius/2)²)``).
    radius : float
        Neighborhood radius, in the units of ``cell_length``.
    cell_length : float
        Side length of a cell.

    Returns
    -------
    list[WeightedLocation]
        Every offset whose distance from the center is in ``(0, radius]``.
    """
    shape = NeighborShape(shape)
    if radius <= 0:
        return []
    rows, cols, dist = _offset_grid(radius, cell_length)
    keep = (dist > 0) & (dist <= radius)
    weights = NEIGHBOR_WEIGHT_FUNCS[shape](dist[keep], radius)
    return [WeightedLocation(RelativeLocation(int(i), int(j)), float(w))
            for i, j, w in zip(rows[keep], cols[keep], weights)]


def ring_neighbors(n_neighbors) -> list[RelativeLocation]:
    """
    Nearest neighbors in whole tiers of 4, 8, 12 or 24.

    A count that is not one of the tiers is rounded down to the largest tier
    not exceeding it; fewer than 4 gives no neighbors.
    """
    neighbors = []
    for tier, ring in RING_TIERS:
        if n_neighbors < tier:
            break
        neighbors.extend(ring)
    return neighbors


def dispersal_neighborhood(template, dispersal_rate=0., timestep=1, cell_length=1.0) -> list[RelativeLocation]:
    """
    Build the dispersal neighborhood.

    For the ``MaxRadius`` template the radius is ``dispersal_rate*timestep``
    and every offset at a distance up to and including the radius is kept,
    the center included.
    """
    template = DispersalTemplate(template)
    if template is not DispersalTemplate.MAX_RADIUS:
        return ring_neighbors(template.n_neighbors)

    radius = dispersal_rate*timestep
    rows, cols, dist = _offset_grid(radius, cell_length)
    keep = dist <= radius
    return [RelativeLocation(int(i), int(j)) for i, j in zip(rows[keep], cols[keep])]


def agent_neighborhoods(attrs, timestep, cell_length=1.0):
    """ Build both neighborhoods for an agent's attributes, reporting their sizes. """
    r.report(f"Creating neighborhoods for agent \"{attrs.agent_name}\" "
             f"(neighbor radius = {attrs.neighbor_radius}, cell length = {cell_length})")
    dispersal = dispersal_neighborhood(attrs.dispersal_template, attrs.dispersal_rate, timestep, cell_length)
    r.report(f"Dispersal neighborhood = {len(dispersal)} neighbors.")
    resource = resource_neighborhood(attrs.neighbor_shape, attrs.neighbor_radius, cell_length)
    r.report(f"Resource neighborhood = {len(resource)} neighbors.")
    return resource, dispersal


def clip_to_landscape(site, offsets, landscape):
    """
    Apply relative offsets to a site, keeping only active sites inside the grid.

    ``offsets`` may hold :class:`RelativeLocation` or :class:`WeightedLocation`
    items; weighted items are returned as ``(site, weight)`` pairs.
    """
    row0, col0 = site
    clipped = []
    for offset in offsets:
        loc = offset.location if isinstance(offset, WeightedLocation) else offset
        row, col = row0 + loc.row, col0 + loc.col
        if not landscape.in_bounds(row, col) or not landscape.active[row, col]:
            continue
        if isinstance(offset, WeightedLocation):
            clipped.append(((row, col), offset.weight))
        else:
            clipped.append((row, col))
    return clipped
