"""
Simple example script to run a spruce budworm outbreak over a synthetic
forest landscape with forestbda.

Vulnerability is prescribed with a smooth random field, and epicenters are
a handful of random sites, through the StaticVulnerabilityEngine.
"""


#------------------------------------------------------------------------------
# Import necessary modules
#------------------------------------------------------------------------------

from pathlib import Path
import numpy as np
from scipy.ndimage import gaussian_filter

from forestbda import (SimulationParameters, Landscape, Cohort, StaticVulnerabilityEngine,
                       BDASimulation, ModelPlotter)


HERE = Path(__file__).parent
rng = np.random.default_rng(2024)


#------------------------------------------------------------------------------
# Create a synthetic landscape: 60 x 80 cells of 30 m, a lake in one corner,
# two management areas, and fir / spruce cohorts of mixed ages
#------------------------------------------------------------------------------

shape = (60, 80)
active = np.ones(shape, dtype=bool)
active[:12, :15] = False  # lake

management_areas = np.full(shape, -1)
management_areas[:, :40] = 1
management_areas[:, 40:] = 2

landscape = Landscape(active, cell_length=30., management_areas=management_areas)
for site in landscape.active_sites():
    for species in ("abiebals", "piceglau"):
        age = int(rng.integers(10, 120))
        landscape.cohorts.add(site, Cohort(species, age=age, biomass=int(age*80)))

vulnerability = gaussian_filter(rng.random(shape), sigma=4)
vulnerability = (vulnerability - vulnerability.min())/(vulnerability.max() - vulnerability.min())
epicenters = rng.random(shape) < 0.002


#------------------------------------------------------------------------------
# Run the biological disturbance agents
#------------------------------------------------------------------------------

# define simulation time period, in years
sim_time = 100

params = SimulationParameters.from_json(HERE / "bda.json")
agents = params.load_agents()
engine = StaticVulnerabilityEngine(vulnerability, epicenters=epicenters)

model_dir = HERE / "output"
BDA = BDASimulation(params, agents, landscape, engine, seed=1, model_dir=model_dir)
outcomes = BDA.run_simulation(sim_time)


#------------------------------------------------------------------------------
# Plot severity maps
#------------------------------------------------------------------------------

years = [o.time for o in outcomes]
for agent in agents:
    ModelPlotter(model_dir, params.map_names, agent.name, years, quantity="Severity").run()
    ModelPlotter(model_dir, params.vulnerability_map_names, agent.name, years, quantity="Vulnerability").run()
