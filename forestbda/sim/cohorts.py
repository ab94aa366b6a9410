###############################################################
#  cohorts.py
###############################################################

from typing import Optional
from dataclasses import dataclass
from collections import defaultdict


@dataclass(eq=False)
class Cohort:
    """
    A group of same-species, same-age trees at one site.

    Attributes
    ----------
    species : str
        Species name; looked up in the agent's species parameters.
    age : int
        Cohort age (years).
    biomass : int, optional
        Aboveground biomass (g/m²). ``None`` for age-only cohorts, which are
        counted as killed but contribute no biomass.
    """

    species: str
    age: int
    biomass: Optional[int] = None


class CohortStore:
    """
    Cohorts of every site, keyed by ``(row, col)``.

    Disturbances never delete cohorts themselves: they select the cohorts to
    kill and hand that selection to :meth:`remove_cohorts`.
    """

    def __init__(self):
        self._cohorts: dict[tuple[int, int], list[Cohort]] = defaultdict(list)

    def add(self, site, cohort: Cohort):
        self._cohorts[tuple(site)].append(cohort)

    def get(self, site) -> list[Cohort]:
        # a copy, so callers can iterate while removing
        return list(self._cohorts.get(tuple(site), []))

    def remove_cohorts(self, site, cohorts) -> int:
        """ Remove exactly the given cohort objects from a site, return the number removed. """
        site = tuple(site)
        doomed = {id(c) for c in cohorts}
        if not doomed or site not in self._cohorts:
            return 0
        before = len(self._cohorts[site])
        self._cohorts[site] = [c for c in self._cohorts[site] if id(c) not in doomed]
        return before - len(self._cohorts[site])

    def count(self, site=None) -> int:
        if site is not None:
            return len(self._cohorts.get(tuple(site), []))
        return sum(len(cs) for cs in self._cohorts.values())
