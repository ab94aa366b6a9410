from pytest import raises, mark
import json

from forestbda.sim.agent import DisturbanceAgent
from forestbda.sim.agent_data import (AgentAttributes, SpeciesParameters, TemporalType, OutbreakPattern,
                                      NeighborShape, DispersalTemplate)
from forestbda.sim.simulation_data import SimulationParameters
from conftest import make_agent


def agent_json(attributes):
    data = dict(attributes)
    data["species_parameters"] = [{"species": name, **sp} for name, sp in attributes["species_parameters"].items()]
    return data


def test_load_agent_from_json(tmp_path, attributes):
    fname = tmp_path / "budworm.json"
    with open(fname, "w") as f:
        json.dump(agent_json(attributes), f)

    agent = DisturbanceAgent.from_json(fname)

    assert agent.name == "budworm"
    assert agent.attrs.temporal_type is TemporalType.PULSE
    assert agent.attrs.random_function is OutbreakPattern.CYCLIC_UNIFORM
    assert agent.attrs.dispersal_template is DispersalTemplate.N8
    assert agent.attrs.n_species == 2
    fir = agent.species_parameters("abiebals")
    assert isinstance(fir, SpeciesParameters)
    assert fir.cfs_conifer
    assert fir.host_classes[0] == (20, 0.5)
    assert agent.species_parameters("pinubank") is None


def test_defaults(agent):
    attrs = agent.attrs
    assert attrs.neighbor_shape is NeighborShape.UNIFORM
    assert not attrs.neighbor_flag
    assert not attrs.dispersal
    assert attrs.start_year == 0
    assert agent.time_since_last_epidemic == 0
    assert agent.time_to_next_epidemic == 0


def test_build_neighborhoods(attributes):
    agent = make_agent(attributes, neighbor_flag=True, neighbor_shape="linear", neighbor_radius=60,
                       dispersal_template="N12")
    agent.build_neighborhoods(timestep=10, cell_length=30)
    assert len(agent.resource_neighbors) == 12
    assert len(agent.dispersal_neighbors) == 12


@mark.parametrize("field, value", [("temporal_type", "steady"),
                                   ("random_function", "acyclic"),
                                   ("neighbor_shape", "square"),
                                   ("dispersal_template", "N6")])
def test_invalid_enumerated_setting(attributes, field, value):
    with raises(ValueError, match=field):
        make_agent(attributes, **{field: value})


@mark.parametrize("overrides", [dict(class2_sv=0.7, class3_sv=0.5),
                                dict(min_ros=2, max_ros=1),
                                dict(min_ros=-1),
                                dict(min_interval=20, max_interval=10),
                                dict(norm_stdev=-1),
                                dict(dispersal_rate=-5),
                                dict(start_year=50, end_year=10),
                                dict(temporal_type="variable_pulse", min_ros=3, max_ros=3)])
def test_invalid_attributes(attributes, overrides):
    with raises(ValueError):
        AgentAttributes(**{**attributes, **overrides})


def test_invalid_host_coefficient(species_parameters):
    sp = {**species_parameters["abiebals"], "tolerant_host_vuln": 1.5}
    with raises(ValueError, match="abiebals"):
        SpeciesParameters(species="abiebals", **sp)


def test_simulation_parameters_from_json(tmp_path, attributes):
    (tmp_path / "agents").mkdir()
    with open(tmp_path / "agents" / "budworm.json", "w") as f:
        json.dump(agent_json(attributes), f)
    with open(tmp_path / "bda.json", "w") as f:
        json.dump({"timestep": 10, "selected_management_areas": "3, 5",
                   "agent_files": ["agents/budworm.json"]}, f)

    params = SimulationParameters.from_json(tmp_path / "bda.json")

    assert params.selected_management_areas == [3, 5]
    assert params.map_path(params.map_names, "budworm", 20) == "bda/budworm-20.nc"
    agents = params.load_agents()
    assert [a.name for a in agents] == ["budworm"]


def test_invalid_timestep():
    with raises(ValueError):
        SimulationParameters(timestep=0)
