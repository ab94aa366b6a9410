###############################################################
#  agent.py
###############################################################

from pathlib import Path
import json

from forestbda.sim.agent_data import AgentAttributes, SpeciesParameters
from forestbda.sim.neighborhood import agent_neighborhoods, RelativeLocation, WeightedLocation
from forestbda.utils.log import Reporter

r = Reporter()


class DisturbanceAgent:
    """
    One biological disturbance agent (insect pest or pathogen).

    The agent's parameters in ``attrs`` do not change during a run. The only
    mutable state is owned by the outbreak scheduler
    (:mod:`forestbda.sim.outbreak`): ``time_since_last_epidemic`` and
    ``time_to_next_epidemic``. The neighborhoods are attached once, by
    :meth:`build_neighborhoods`, and are read-only afterwards.
    """

    def __init__(self, attrs: AgentAttributes):
        self.attrs = attrs
        self.name  = attrs.agent_name

        self.time_since_last_epidemic = attrs.time_since_last_epidemic
        self.time_to_next_epidemic    = 0

        self.resource_neighbors: list[WeightedLocation] = []
        self.dispersal_neighbors: list[RelativeLocation] = []

    @classmethod
    def from_json(cls, input_agent_filename):
        return cls(cls.load_agent_attributes(Path(input_agent_filename)))

    @staticmethod
    def load_agent_attributes(filename: Path) -> AgentAttributes:
        """ Parse agent input json file and store attributes in a dataclass. """
        with open(filename, "r") as f:
            data = json.load(f)

        # list of per-species records -> mapping keyed by species name
        spp_data = data.pop("species_parameters")
        data["species_parameters"] = {sp["species"]: SpeciesParameters(**sp) for sp in spp_data}

        return AgentAttributes(**data)

    def build_neighborhoods(self, timestep, cell_length=1.0):
        r.report(f"Initializing agent \"{self.name}\".")
        self.resource_neighbors, self.dispersal_neighbors = agent_neighborhoods(self.attrs, timestep, cell_length)

    def species_parameters(self, species) -> SpeciesParameters | None:
        return self.attrs.species_parameters.get(species)

    def __repr__(self):
        return (f"DisturbanceAgent(name={self.name!r}, time_since_last_epidemic={self.time_since_last_epidemic}, "
                f"time_to_next_epidemic={self.time_to_next_epidemic})")
