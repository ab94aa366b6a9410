###############################################################
#  base.py
###############################################################

from abc import ABC, abstractmethod
import numpy as np

from forestbda.constants import NEW_ZONE
from forestbda.sim.epidemic import Epidemic
from forestbda.sim.neighborhood import clip_to_landscape
from forestbda.sim.outbreak import initialize_schedule, regional_outbreak_status
from forestbda.sim.outputs import OutputManager
from forestbda.utils.log import Reporter
from forestbda.utils.simulation_reporting import print_model_time_info, print_epidemic_summary


r = Reporter()

class BDASimulation:
    """
    Driver of the biological disturbance agents over a landscape.

    This class is engine-agnostic: it manages the setup phases and the time
    stepping logic, and runs one :class:`~forestbda.sim.epidemic.Epidemic`
    per agent per timestep whenever the outbreak scheduler
    (:mod:`forestbda.sim.outbreak`) reports a positive ROS.

    Computation of resource dominance, vulnerability and epicenters is
    delegated to the :class:`~forestbda.sim.base.DisturbanceEngineBase`.
    Writing of output files is performed by the
    :class:`~forestbda.sim.outputs.OutputManager` class, only when a model
    directory is given.

    Parameters
    ----------
    parameters : SimulationParameters
        Run-level parameters (timestep, output names, management areas).
    agents : list[DisturbanceAgent]
        Agents, processed in this order every timestep.
    landscape : Landscape
        Grid store of all site variables and cohorts.
    engine : DisturbanceEngineBase
        Resource dominance / vulnerability / epicenter engine.
    seed : int, optional
        Seed of the single random stream used by scheduler and sweeps.
    model_dir : str or Path, optional
        Output directory for maps and the event log.
    """

    def __init__(self, parameters, agents, landscape, engine, seed=None, model_dir=None):
        self.parameters = parameters
        self.agents = agents
        self.landscape = landscape
        self.engine = engine
        self.rng = np.random.default_rng(seed)
        self.outputs = OutputManager(model_dir, parameters, landscape) if model_dir is not None else None
        self.initialized = False

    @property
    def timestep(self) -> int:
        return self.parameters.timestep

    def initialize(self, current_time=0):
        """
        Set up all agents, then check that the inputs needed at run time are present.

        Fails with ``ValueError`` before any epidemic runs if a management-area
        breakdown is requested but the landscape has no management areas.
        """
        for agent in self.agents:
            self.landscape.register_agent(agent.name)
            time_of_next = initialize_schedule(agent, current_time, self.timestep, self.rng, self.landscape)
            r.report(f"Agent \"{agent.name}\": first outbreak possible in year {time_of_next}.")
            agent.build_neighborhoods(self.timestep, self.landscape.cell_length)

        if self.parameters.selected_management_areas and self.landscape.management_areas is None:
            msg = ("Kills by management area were requested (selected_management_areas), "
                   "but the landscape has no management area information.")
            r.report(msg, level="ERROR")
            raise ValueError(msg)

        self.initialized = True

    def run_timestep(self, current_time):
        """ Process every agent for one timestep, return the outcomes of the epidemics that ran. """
        if not self.initialized:
            self.initialize(current_time - self.timestep)

        r.report(f"Processing landscape for BDA events at year {current_time} ...")
        self.landscape.reset_disturbed()
        outcomes = []
        for agent in self.agents:
            agent.time_since_last_epidemic += self.timestep
            ros = regional_outbreak_status(agent, current_time, self.timestep, self.rng, self.landscape)
            if ros > 0:
                Epidemic.initialize(agent, self.landscape)
                outcome = Epidemic.simulate(agent, self.landscape, self.engine, current_time, self.timestep,
                                            ros, self.rng, self.parameters.selected_management_areas)
                print_epidemic_summary(outcome)
                if self.outputs is not None:
                    self.outputs.save_epidemic(agent, outcome)
                outcomes.append(outcome)
        return outcomes

    def run_simulation(self, duration, start_time=0):
        """
        Run the extension every ``timestep`` years from ``start_time`` for ``duration`` years.

        Returns the list of all epidemic outcomes, in the order they occurred.
        """
        print_model_time_info(self, duration, start_time)
        if not self.initialized:
            self.initialize(start_time)
        outcomes = []
        for current_time in range(start_time + self.timestep, start_time + duration + 1, self.timestep):
            outcomes.extend(self.run_timestep(current_time))
        r.report(f"Simulation complete! {len(outcomes)} epidemics in {duration} years.")
        return outcomes


class DisturbanceEngineBase(ABC):
    """
    Abstract interface for the computations that feed an epidemic.

    An engine turns species composition into site vulnerability and picks
    the sites an outbreak can reach. It writes its results onto the
    landscape: ``landscape.vulnerability`` (0-1) and, for dispersing agents,
    ``landscape.outbreak_zone[agent.name]``.
    """

    @abstractmethod
    def site_resource_dominance(self, agent, ros, landscape):
        """ Compute site resource dominance from the cohorts at each site. """
        pass

    @abstractmethod
    def site_resource_dominance_modifier(self, agent, landscape):
        """ Adjust resource dominance for disturbance history and ecoregion modifiers. """
        pass

    @abstractmethod
    def neighbor_resource_dominance(self, agent, landscape):
        """ Compute neighborhood resource dominance over ``agent.resource_neighbors``. """
        pass

    @abstractmethod
    def site_vulnerability(self, agent, ros, landscape, consider_neighbors):
        """ Write site vulnerability (0-1) to ``landscape.vulnerability``. """
        pass

    @abstractmethod
    def new_epicenters(self, agent, timestep, landscape):
        """ Mark the sites of this timestep's outbreak zone as ``NEW_ZONE``. """
        pass


class StaticVulnerabilityEngine(DisturbanceEngineBase):
    """
    Engine with prescribed vulnerability and epicenters.

    Vulnerability is copied from a fixed grid (or a per-agent mapping of
    grids). For dispersing agents the outbreak zone is the given epicenter
    mask spread over the agent's dispersal neighborhood, or every active
    site when no mask is given.
    """

    def __init__(self, vulnerability, epicenters=None):
        self.vulnerability = vulnerability
        self.epicenters = epicenters

    def _vulnerability_of(self, agent):
        if isinstance(self.vulnerability, dict):
            return np.asarray(self.vulnerability[agent.name], dtype=float)
        return np.asarray(self.vulnerability, dtype=float)

    def site_resource_dominance(self, agent, ros, landscape):
        pass

    def site_resource_dominance_modifier(self, agent, landscape):
        pass

    def neighbor_resource_dominance(self, agent, landscape):
        pass

    def site_vulnerability(self, agent, ros, landscape, consider_neighbors):
        vuln = self._vulnerability_of(agent)
        landscape.vulnerability[landscape.active] = np.clip(vuln[landscape.active], 0., 1.)

    def new_epicenters(self, agent, timestep, landscape):
        zone = landscape.outbreak_zone[agent.name]
        if self.epicenters is None:
            zone[landscape.active] = NEW_ZONE
            return
        for row, col in np.argwhere(np.asarray(self.epicenters, dtype=bool) & landscape.active):
            zone[row, col] = NEW_ZONE
            for site in clip_to_landscape((int(row), int(col)), agent.dispersal_neighbors, landscape):
                zone[site] = NEW_ZONE
