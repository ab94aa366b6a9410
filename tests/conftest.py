from pytest import fixture
import numpy as np

from forestbda.sim.agent import DisturbanceAgent
from forestbda.sim.agent_data import AgentAttributes
from forestbda.sim.cohorts import Cohort
from forestbda.sim.landscape import Landscape


@fixture
def species_parameters():
    # Host parameters (per species)
    return {
        "abiebals": {
            "resistant_host_age"  : 20,
            "resistant_host_vuln" : 0.5,
            "tolerant_host_age"   : 999,
            "tolerant_host_vuln"  : 0.75,
            "vulnerable_host_age" : 999,
            "vulnerable_host_vuln": 1.0,
            "cfs_conifer"         : True,
        },
        "betupapy": {
            "resistant_host_age"  : 20,
            "resistant_host_vuln" : 0.5,
            "tolerant_host_age"   : 999,
            "tolerant_host_vuln"  : 0.75,
            "vulnerable_host_age" : 999,
            "vulnerable_host_vuln": 1.0,
            "cfs_conifer"         : False,
        },
    }


@fixture
def attributes(species_parameters):
    # Agent test parameters (attributes)
    return {
        "agent_name"        : "budworm",
        "temporal_type"     : "pulse",
        "random_function"   : "cyclic_uniform",
        "min_ros"           : 0,
        "max_ros"           : 3,
        "min_interval"      : 10,
        "max_interval"      : 10,
        "class2_sv"         : 0.33,
        "class3_sv"         : 0.66,
        "dispersal_template": "N8",
        "species_parameters": species_parameters,
    }


@fixture
def agent(attributes):
    return make_agent(attributes)


@fixture
def landscape():
    # 2 x 3 grid, last site inactive, one conifer and one hardwood cohort on every active site
    active = np.array([[True, True, True],
                       [True, True, False]])
    ls = Landscape(active)
    for site in ls.active_sites():
        ls.cohorts.add(site, Cohort("abiebals", age=40, biomass=1000))
        ls.cohorts.add(site, Cohort("betupapy", age=40))
    return ls


def make_agent(attributes, **overrides):
    attrs = AgentAttributes(**{**attributes, **overrides})
    return DisturbanceAgent(attrs)


class ScriptedRng:
    """ Stand-in for numpy.random.Generator that returns prescribed draws, in order. """

    def __init__(self, uniform=(), normal=()):
        self.uniform = list(uniform)
        self.normal_values = list(normal)
        self.n_uniform = 0
        self.n_normal = 0

    def random(self):
        self.n_uniform += 1
        return self.uniform.pop(0)

    def normal(self, loc=0.0, scale=1.0):
        self.n_normal += 1
        return self.normal_values.pop(0)
