###############################################################
#  epidemic_data.py
###############################################################

from typing import Optional
from dataclasses import dataclass, field
import numpy as np


@dataclass
class KillResult:
    """
    Cohort kills at a single site, accumulated while its cohorts are checked.

    Attributes:
        cohorts_killed (int): Number of cohorts killed.
        conifers_killed (int): Killed cohorts whose species is flagged as a conifer of interest.
        biomass_killed (int): Summed biomass of killed cohorts that carry a biomass value.
        biomass_cohort_count (int): Number of killed cohorts that carry a biomass value.
    """

    cohorts_killed: int = 0
    conifers_killed: int = 0
    biomass_killed: int = 0
    biomass_cohort_count: int = 0

    def add(self, cohort, cfs_conifer):
        self.cohorts_killed += 1
        if cfs_conifer:
            self.conifers_killed += 1
        if cohort.biomass is not None:
            self.biomass_killed += cohort.biomass
            self.biomass_cohort_count += 1


@dataclass
class EpidemicOutcome:
    """
    Landscape-wide result of one agent's epidemic in one timestep.

    Sites are added one at a time with :meth:`record_site` during the
    disturbance sweep; :meth:`finalize` computes the mean severity once the
    sweep is complete.

    Attributes:
        agent_name (str): Agent causing the epidemic.
        time (int): Simulation year of the epidemic.
        ros (int): Regional outbreak status of the epidemic.
        selected_management_areas (list[int]): Map codes of the management areas
            tracked separately (empty if none are selected).
        total_sites_damaged (int): Sites where at least one cohort was killed.
        total_cohorts_killed (int): Cohorts killed on all sites.
        total_biomass_killed (int): Biomass of all killed cohorts.
        mean_severity (float): Mean severity over damaged sites, 0 when no site was damaged.

    Computed Attributes (set in __post_init__):
        cohorts_killed_in_ma (np.ndarray): Cohorts killed per selected management area.
        sites_damaged_in_ma (np.ndarray): Damaged sites per selected management area.
        biomass_killed_in_ma (np.ndarray): Biomass killed per selected management area.
    """

    agent_name: str
    time: int
    ros: int
    selected_management_areas: Optional[list[int]] = None
    total_sites_damaged: int = 0
    total_cohorts_killed: int = 0
    total_biomass_killed: int = 0
    mean_severity: float = 0.

    cohorts_killed_in_ma: np.ndarray = field(init=False)
    sites_damaged_in_ma: np.ndarray = field(init=False)
    biomass_killed_in_ma: np.ndarray = field(init=False)
    _total_severity: int = field(init=False, default=0, repr=False)

    def __post_init__(self):
        self.selected_management_areas = list(self.selected_management_areas or [])
        n_areas = len(self.selected_management_areas)
        self.cohorts_killed_in_ma = np.zeros(n_areas, dtype=int)
        self.sites_damaged_in_ma  = np.zeros(n_areas, dtype=int)
        self.biomass_killed_in_ma = np.zeros(n_areas, dtype=np.int64)

    def management_area_index(self, map_code) -> Optional[int]:
        """ Position of a map code among the selected management areas, or None. """
        try:
            return self.selected_management_areas.index(map_code)
        except ValueError:
            return None

    def record_site(self, kill_result: KillResult, severity, map_code=None):
        """ Add one damaged site to the totals, and to its management area if that area is tracked. """
        self.total_cohorts_killed += kill_result.cohorts_killed
        self.total_biomass_killed += kill_result.biomass_killed
        self.total_sites_damaged  += 1
        self._total_severity      += severity

        i = self.management_area_index(map_code) if map_code is not None else None
        if i is not None:
            self.cohorts_killed_in_ma[i] += kill_result.cohorts_killed
            self.biomass_killed_in_ma[i] += kill_result.biomass_killed
            self.sites_damaged_in_ma[i]  += 1

    def finalize(self):
        if self.total_sites_damaged > 0:
            self.mean_severity = self._total_severity/self.total_sites_damaged
        else:
            self.mean_severity = 0.

    def as_log_row(self) -> dict:
        """ Event-log record: scalar columns followed by one column per selected area for each breakdown. """
        row = {
            "Time": self.time,
            "ROS": self.ros,
            "AgentName": self.agent_name,
            "CohortsKilled": self.total_cohorts_killed,
            "DamagedSites": self.total_sites_damaged,
            "MeanSeverity": round(self.mean_severity, 2),
            "TotalBiomassKilled": self.total_biomass_killed,
        }
        for prefix, values in (("CohortsKilledInMA", self.cohorts_killed_in_ma),
                               ("DamagedSitesInMA", self.sites_damaged_in_ma),
                               ("TotalBiomassKilledInMA", self.biomass_killed_in_ma)):
            for code, value in zip(self.selected_management_areas, values):
                row[f"{prefix}{code}"] = int(value)
        return row
