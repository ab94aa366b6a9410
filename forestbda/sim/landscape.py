###############################################################
#  landscape.py
###############################################################

from typing import Optional
import numpy as np

from forestbda.constants import (NO_ZONE, TIME_OF_LAST_EVENT_DEFAULT, TIME_OF_NEXT_DEFAULT,
                                 NO_MANAGEMENT_AREA)
from forestbda.sim.cohorts import CohortStore
from forestbda.utils.log import Reporter

r = Reporter()


class Landscape:
    """
    Grid store of all per-site variables used by the disturbance agents.

    Every site variable is a 2-D numpy array of the grid shape; a site is a
    ``(row, col)`` index. Variables shared by all agents (vulnerability,
    disturbed flag, time of last event, ...) are plain attributes, while the
    outbreak zone and the severity are kept per agent and created with
    :meth:`register_agent`.

    Parameters
    ----------
    active : numpy.ndarray
        Boolean mask of active sites.
    cell_length : float
        Side length of a cell, in the same units as neighborhood radii and
        dispersal rates.
    cohorts : CohortStore, optional
        Cohorts at each site; an empty store is created if not given.
    management_areas : numpy.ndarray, optional
        Integer map code of the management area of every site
        (:data:`~forestbda.constants.NO_MANAGEMENT_AREA` for none). ``None``
        when no management-area information is available.
    """

    def __init__(self, active, cell_length=1.0, cohorts: Optional[CohortStore] = None,
                 management_areas: Optional[np.ndarray] = None):
        self.active = np.asarray(active, dtype=bool)
        self.shape = self.active.shape
        self.cell_length = float(cell_length)
        self.cohorts = cohorts if cohorts is not None else CohortStore()

        if management_areas is not None:
            management_areas = np.asarray(management_areas, dtype=int)
            if management_areas.shape != self.shape:
                msg = (f"Management area map shape {management_areas.shape} does not match "
                       f"landscape shape {self.shape}.")
                r.report(msg, level="ERROR")
                raise ValueError(msg)
        self.management_areas = management_areas

        # site variables shared among agents
        self.vulnerability      = np.zeros(self.shape)
        self.disturbed          = np.zeros(self.shape, dtype=bool)
        self.time_of_last_event = np.full(self.shape, TIME_OF_LAST_EVENT_DEFAULT, dtype=int)
        self.time_of_next       = np.full(self.shape, TIME_OF_NEXT_DEFAULT, dtype=int)
        self.agent_name         = np.full(self.shape, "", dtype=object)
        # conifer cohorts killed, one {year: count} dict per site
        self.conifers_killed    = np.empty(self.shape, dtype=object)
        for site in self.active_sites():
            self.conifers_killed[site] = {}

        # per-agent site variables
        self.outbreak_zone: dict[str, np.ndarray] = {}
        self.severity: dict[str, np.ndarray] = {}

    @property
    def n_active(self) -> int:
        return int(self.active.sum())

    def active_sites(self):
        """ Yield active sites in row-major order. This is the order of every landscape sweep. """
        for row, col in np.argwhere(self.active):
            yield int(row), int(col)

    def in_bounds(self, row, col) -> bool:
        return 0 <= row < self.shape[0] and 0 <= col < self.shape[1]

    def register_agent(self, agent_name):
        """ Create the outbreak-zone and severity grids of an agent (no-op if already present). """
        if agent_name not in self.outbreak_zone:
            self.outbreak_zone[agent_name] = np.full(self.shape, NO_ZONE, dtype=np.uint8)
            self.severity[agent_name] = np.zeros(self.shape, dtype=np.uint8)

    def management_area_of(self, site) -> int:
        if self.management_areas is None:
            return NO_MANAGEMENT_AREA
        return int(self.management_areas[site])

    def add_conifers_killed(self, site, year, n_killed):
        # accumulate within the year, a site can be hit by several agents
        kills = self.conifers_killed[site]
        kills[year] = kills.get(year, 0) + n_killed

    def reset_disturbed(self):
        """ Clear the disturbed flags; called by the driver at the start of each timestep. """
        self.disturbed[:] = False
