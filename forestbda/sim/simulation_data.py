from pathlib import Path
from typing import Optional
from dataclasses import dataclass, field
import json

from forestbda.sim.agent import DisturbanceAgent
from forestbda.utils.log import Reporter

r = Reporter()


@dataclass
class SimulationParameters:
    """
    Run-level parameters of the biological disturbance extension.

    Attributes:
        timestep (int): Years between two runs of the extension.
        map_names (str): Template of the severity map file names, relative to the
            output directory. ``{agent_name}`` and ``{timestep}`` are replaced by the
            agent name and the simulation year.
        log_file (str): Name of the event log file (CSV), relative to the output directory.
        vulnerability_map_names (Optional[str]): Template of the vulnerability map file
            names; no vulnerability maps are written if None.
        selected_management_areas (Optional[list[int]]): Map codes of the management areas
            whose kills are tracked separately. Requires management-area data on the landscape.
        agent_files (list[Path]): Agent parameter files.
    """

    timestep: int
    map_names: str = "bda/{agent_name}-{timestep}.nc"
    log_file: str = "bda-log.csv"
    vulnerability_map_names: Optional[str] = None
    selected_management_areas: Optional[list[int]] = None
    agent_files: list[Path] = field(default_factory=list)

    def __post_init__(self):
        if self.timestep <= 0:
            msg = f"Invalid timestep: {self.timestep}. Must be a positive number of years."
            r.report(msg, level="ERROR")
            raise ValueError(msg)
        # accept a comma-separated string of map codes as well as a list
        if isinstance(self.selected_management_areas, str):
            codes = [s.strip() for s in self.selected_management_areas.split(",")]
            self.selected_management_areas = [int(s) for s in codes if s]
        elif self.selected_management_areas is not None:
            self.selected_management_areas = [int(s) for s in self.selected_management_areas]
        self.agent_files = [Path(f) for f in self.agent_files]

    @classmethod
    def from_json(cls, filename):
        """ Parse run parameter json file; agent file paths are taken relative to it. """
        filename = Path(filename)
        with open(filename, "r") as f:
            data = json.load(f)
        data["agent_files"] = [filename.parent / f for f in data.get("agent_files", [])]
        return cls(**data)

    def load_agents(self) -> list[DisturbanceAgent]:
        agents = []
        for fname in self.agent_files:
            agent = DisturbanceAgent.from_json(fname)
            r.report(f"Name of agent = {agent.name}")
            agents.append(agent)
        return agents

    def map_path(self, template, agent_name, year) -> str:
        return template.format(agent_name=agent_name, timestep=year)
