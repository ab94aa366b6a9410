from pytest import raises, fixture
import csv
import numpy as np

from forestbda.sim.base import BDASimulation, DisturbanceEngineBase, StaticVulnerabilityEngine
from forestbda.sim.landscape import Landscape
from forestbda.sim.cohorts import Cohort
from forestbda.sim.simulation_data import SimulationParameters
from conftest import make_agent


def test_sim_base_has_required_methods():
    assert hasattr(BDASimulation, "run_simulation")
    assert hasattr(BDASimulation, "run_timestep")
    assert hasattr(BDASimulation, "initialize")
    for method in ("site_resource_dominance", "site_resource_dominance_modifier", "neighbor_resource_dominance",
                   "site_vulnerability", "new_epicenters"):
        assert method in DisturbanceEngineBase.__abstractmethods__


@fixture
def lethal_agent(attributes, species_parameters):
    # every cohort is a vulnerable host from age 0
    spp = {name: {**sp, "vulnerable_host_age": 0, "vulnerable_host_vuln": 1.0}
           for name, sp in species_parameters.items()}
    return make_agent(attributes, species_parameters=spp)


def make_sim(agent, landscape, vulnerability=1.0, seed=1, model_dir=None, **params):
    parameters = SimulationParameters(timestep=10, **params)
    engine = StaticVulnerabilityEngine(np.full(landscape.shape, vulnerability))
    return BDASimulation(parameters, [agent], landscape, engine, seed=seed, model_dir=model_dir)


def test_missing_management_areas(agent, landscape):
    sim = make_sim(agent, landscape, selected_management_areas=[1])
    with raises(ValueError, match="management area"):
        sim.initialize()


def test_periodic_outbreaks(lethal_agent, landscape):
    sim = make_sim(lethal_agent, landscape)
    outcomes = sim.run_simulation(duration=30)

    assert [o.time for o in outcomes] == [10, 20, 30]
    assert all(o.ros == 3 for o in outcomes)

    first = outcomes[0]
    assert first.total_sites_damaged == 5
    assert first.total_cohorts_killed == 10
    assert first.total_biomass_killed == 5000
    assert first.mean_severity == 3.0

    # nothing left to kill
    for later in outcomes[1:]:
        assert later.total_cohorts_killed == 0
        assert later.total_sites_damaged == 0
        assert later.mean_severity == 0.0
    assert landscape.cohorts.count() == 0
    assert (landscape.time_of_last_event[landscape.active] == 10).all()
    assert lethal_agent.time_since_last_epidemic == 0


def test_disturbed_flags_cleared_each_timestep(lethal_agent, landscape):
    sim = make_sim(lethal_agent, landscape)
    sim.initialize(0)
    sim.run_timestep(10)
    assert landscape.disturbed[landscape.active].all()
    sim.run_timestep(20)
    assert not landscape.disturbed.any()


def test_quiet_agent_between_outbreaks(attributes, landscape):
    agent = make_agent(attributes, min_interval=20, max_interval=20)
    sim = make_sim(agent, landscape)
    outcomes = sim.run_simulation(duration=30)
    assert [o.time for o in outcomes] == [20]


def test_outputs_written(tmp_path, lethal_agent, landscape):
    sim = make_sim(lethal_agent, landscape, model_dir=tmp_path,
                   vulnerability_map_names="bda/vuln-{agent_name}-{timestep}.nc")
    sim.run_simulation(duration=30)

    for year in (10, 20, 30):
        assert (tmp_path / "bda" / f"budworm-{year}.nc").exists()
        assert (tmp_path / "bda" / f"vuln-budworm-{year}.nc").exists()

    with open(tmp_path / "bda-log.csv", newline="") as f:
        rows = list(csv.DictReader(f))
    assert len(rows) == 3
    assert rows[0]["Time"] == "10"
    assert rows[0]["DamagedSites"] == "5"
    assert rows[2]["CohortsKilled"] == "0"


def build_landscape():
    ls = Landscape(np.ones((4, 4), dtype=bool))
    for site in ls.active_sites():
        ls.cohorts.add(site, Cohort("abiebals", age=40, biomass=100))
    return ls


def test_same_seed_same_run(attributes):
    runs = []
    for _ in range(2):
        ls = build_landscape()
        sim = make_sim(make_agent(attributes), ls, vulnerability=0.6, seed=123)
        outcomes = sim.run_simulation(duration=30)
        runs.append(([o.as_log_row() for o in outcomes], ls.severity["budworm"].copy()))

    assert runs[0][0] == runs[1][0]
    assert np.array_equal(runs[0][1], runs[1][1])


def test_explicit_initialize_keeps_schedule(attributes):
    times = []
    for explicit in (False, True):
        agent = make_agent(attributes, min_interval=10, max_interval=40)
        sim = make_sim(agent, build_landscape(), vulnerability=0.6, seed=11)
        if explicit:
            sim.initialize(0)
        outcomes = sim.run_simulation(duration=100)
        times.append(([o.time for o in outcomes], agent.time_to_next_epidemic))

    assert times[0] == times[1]


def test_continued_run_matches_single_run(attributes):
    agent = make_agent(attributes, min_interval=10, max_interval=40)
    single = make_sim(agent, build_landscape(), vulnerability=0.6, seed=11).run_simulation(duration=100)

    agent = make_agent(attributes, min_interval=10, max_interval=40)
    sim = make_sim(agent, build_landscape(), vulnerability=0.6, seed=11)
    split = sim.run_simulation(duration=50) + sim.run_simulation(duration=50, start_time=50)

    assert [o.as_log_row() for o in split] == [o.as_log_row() for o in single]
