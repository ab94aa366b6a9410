"""
The forestbda package simulates biological disturbance agents (BDA): insect
pests and pathogens whose outbreaks recur over a forested landscape of
grid cells. For every agent and simulation timestep it decides whether an
outbreak occurs and with what regional outbreak status (ROS), sweeps the
landscape assigning a severity class to the sites the outbreak reaches, and
removes the tree cohorts that die.

The computation of site vulnerability from species composition, and the
choice of epicenters for dispersing agents, are left to an engine that
implements :class:`~forestbda.sim.base.DisturbanceEngineBase`; a simple
engine with prescribed vulnerability is provided.

This file exposes the classes needed to set up a run, so that an entry-point
script only needs:

>>> from forestbda import (SimulationParameters, Landscape, Cohort,
...                        StaticVulnerabilityEngine, BDASimulation)

Plotting requires matplotlib, which is an optional dependency; the plotter
is loaded lazily the first time it is accessed:

>>> from forestbda import ModelPlotter

"""


# modules called by all entry-point scripts
from forestbda.sim.agent import DisturbanceAgent
from forestbda.sim.agent_data import (AgentAttributes, SpeciesParameters, OutbreakPattern,
                                      TemporalType, NeighborShape, DispersalTemplate)
from forestbda.sim.base import BDASimulation, DisturbanceEngineBase, StaticVulnerabilityEngine
from forestbda.sim.cohorts import Cohort, CohortStore
from forestbda.sim.epidemic import Epidemic
from forestbda.sim.epidemic_data import EpidemicOutcome
from forestbda.sim.landscape import Landscape
from forestbda.sim.simulation_data import SimulationParameters
from forestbda.utils.log import Reporter

__all__ = [
    "DisturbanceAgent", "AgentAttributes", "SpeciesParameters", "OutbreakPattern", "TemporalType",
    "NeighborShape", "DispersalTemplate", "BDASimulation", "DisturbanceEngineBase",
    "StaticVulnerabilityEngine", "Cohort", "CohortStore", "Epidemic", "EpidemicOutcome",
    "Landscape", "SimulationParameters", "Reporter",
]


def _optional_import(name: str):
    """ Attempt to import an optional module when accessed. """
    import importlib
    import warnings

    import_paths = {
        "plot": "forestbda.utils.plotter",
    }

    try:
        return importlib.import_module(import_paths[name])
    except ImportError as e:
        warnings.warn(
            f"Optional dependency for '{name}' not found. "
            f"Install with: pip install forestbda[{name}]",
            ImportWarning,
            stacklevel=2,
        )
        raise e


class _LazyModule:
    """ Lazy loading of an optional module when first accessed. """

    def __init__(self, name):
        self._name = name
        self._module = None

    def __getattr__(self, attr):
        if self._module is None:
            self._module = _optional_import(self._name)
        return getattr(self._module, attr)


def __getattr__(name):
    # `from forestbda import ModelPlotter` resolves to the class itself
    if name == "ModelPlotter":
        return _LazyModule("plot").ModelPlotter
    raise AttributeError(f"module 'forestbda' has no attribute '{name}'")
