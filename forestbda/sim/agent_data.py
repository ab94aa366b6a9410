###############################################################
#  agent_data.py
###############################################################

from enum import Enum
from typing import Optional
from dataclasses import dataclass, field

from forestbda.utils.log import Reporter

r = Reporter()


class OutbreakPattern(Enum):
    """ Recurrence model used to draw the interval until the next outbreak. """
    CYCLIC_UNIFORM = "cyclic_uniform"
    CYCLIC_NORMAL = "cyclic_normal"


class TemporalType(Enum):
    """ How the regional outbreak status (ROS) is chosen when an outbreak fires. """
    PULSE = "pulse"
    VARIABLE_PULSE = "variable_pulse"


class NeighborShape(Enum):
    """ Decay of the resource-neighborhood weights with distance. """
    UNIFORM = "uniform"
    LINEAR = "linear"
    GAUSSIAN = "gaussian"


class DispersalTemplate(Enum):
    """ Dispersal reachability template: fixed neighbor rings or a maximum radius. """
    N4 = "N4"
    N8 = "N8"
    N12 = "N12"
    N24 = "N24"
    MAX_RADIUS = "MaxRadius"

    @property
    def n_neighbors(self) -> Optional[int]:
        # None for the radius-based template
        return None if self is DispersalTemplate.MAX_RADIUS else int(self.value[1:])


def _fail(msg):
    r.report(msg, level="ERROR")
    raise ValueError(msg)


def _coerce_enum(enum_cls, value, name):
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(f"'{m.value}'" for m in enum_cls)
        _fail(f"Invalid {name}: '{value}'. Must be one of {allowed}.")


@dataclass
class SpeciesParameters:
    """
    Host parameters of one tree species for one disturbance agent.

    Each of the three host classes kills a cohort when the cohort is at least
    the class age and the site's random draw is no larger than the site
    vulnerability times the class vulnerability coefficient.

    Parameters
    ----------
    species : str
        Species name, matched against :attr:`~forestbda.sim.cohorts.Cohort.species`.
    resistant_host_age, tolerant_host_age, vulnerable_host_age : int
        Minimum cohort age (years) for each host class.
    resistant_host_vuln, tolerant_host_vuln, vulnerable_host_vuln : float
        Vulnerability coefficient (0-1) for each host class.
    cfs_conifer : bool
        Whether killed cohorts of this species count towards the conifer-kill
        site variable read by fuels extensions.
    """

    species: str
    resistant_host_age: int
    resistant_host_vuln: float
    tolerant_host_age: int
    tolerant_host_vuln: float
    vulnerable_host_age: int
    vulnerable_host_vuln: float
    cfs_conifer: bool = False

    def __post_init__(self):
        for coeff in (self.resistant_host_vuln, self.tolerant_host_vuln, self.vulnerable_host_vuln):
            if not 0 <= coeff <= 1:
                _fail(f"Host vulnerability coefficients for species '{self.species}' must be within [0, 1].")

    @property
    def host_classes(self) -> tuple[tuple[int, float], ...]:
        """ (age threshold, vulnerability coefficient) for resistant, tolerant, vulnerable hosts. """
        return ((self.resistant_host_age, self.resistant_host_vuln),
                (self.tolerant_host_age, self.tolerant_host_vuln),
                (self.vulnerable_host_age, self.vulnerable_host_vuln))


@dataclass
class AgentAttributes:
    """
    Container for the parameters of one biological disturbance agent.

    Values are read from an agent configuration JSON file (e.g.,
    ``budworm.json``). Enumerated settings may be given as their string
    values; they are converted in :meth:`__post_init__`, which also checks
    the parameters for consistency so that a bad configuration fails before
    any epidemic runs.

    Parameters (Temporal)
    ---------------------
    agent_name : str
        Name of the agent, stamped on every site the agent disturbs.
    temporal_type : TemporalType
        ``'pulse'`` (ROS is always ``max_ros``) or ``'variable_pulse'``.
    random_function : OutbreakPattern
        ``'cyclic_uniform'`` or ``'cyclic_normal'`` recurrence model.
    min_ros, max_ros : int
        Bounds of the regional outbreak status (0-3).
    min_interval, max_interval : float
        Recurrence interval bounds for the cyclic-uniform model (years).
    norm_mean, norm_stdev : float
        Recurrence interval distribution for the cyclic-normal model (years).
    time_since_last_epidemic : int
        Years since the last outbreak at the start of the run.
    start_year, end_year : int
        Simulation years between which the agent may break out.

    Parameters (Spatial)
    --------------------
    neighbor_flag : bool
        Whether neighborhood resource dominance is considered.
    neighbor_shape : NeighborShape
        Weight decay of the resource neighborhood.
    neighbor_radius : float
        Resource neighborhood radius (same units as the cell length).
    dispersal : bool
        Whether the agent disperses from epicenters (otherwise every active
        site is in the outbreak zone).
    dispersal_rate : float
        Dispersal distance per year, used by the ``'MaxRadius'`` template.
    dispersal_template : DispersalTemplate
        ``'N4'``, ``'N8'``, ``'N12'``, ``'N24'`` or ``'MaxRadius'``.

    Parameters (Severity)
    ---------------------
    class2_sv, class3_sv : float
        Site vulnerability at or above which a disturbed site is assigned
        severity 2 and 3 respectively.
    species_parameters : dict[str, SpeciesParameters]
        Host parameters keyed by species name.
    """

    agent_name: str
    temporal_type: TemporalType
    random_function: OutbreakPattern
    min_ros: int
    max_ros: int
    class2_sv: float
    class3_sv: float
    species_parameters: dict[str, SpeciesParameters]

    min_interval: float = 0.
    max_interval: float = 0.
    norm_mean: float = 0.
    norm_stdev: float = 0.
    time_since_last_epidemic: int = 0
    start_year: int = 0
    end_year: int = 10000

    neighbor_flag: bool = False
    neighbor_shape: NeighborShape = NeighborShape.UNIFORM
    neighbor_radius: float = 0.
    dispersal: bool = False
    dispersal_rate: float = 0.
    dispersal_template: DispersalTemplate = DispersalTemplate.MAX_RADIUS

    n_species: int = field(init=False)

    def __post_init__(self):
        """ Convert enumerated settings and species records, then validate. """
        self.temporal_type = _coerce_enum(TemporalType, self.temporal_type, "temporal_type")
        self.random_function = _coerce_enum(OutbreakPattern, self.random_function, "random_function")
        self.neighbor_shape = _coerce_enum(NeighborShape, self.neighbor_shape, "neighbor_shape")
        self.dispersal_template = _coerce_enum(DispersalTemplate, self.dispersal_template, "dispersal_template")

        self.species_parameters = {
            name: sp if isinstance(sp, SpeciesParameters) else SpeciesParameters(species=name, **sp)
            for name, sp in self.species_parameters.items()
        }
        self.n_species = len(self.species_parameters)
        self.validate()

    def validate(self):
        name = self.agent_name
        if not 0 <= self.min_ros <= self.max_ros:
            _fail(f"Agent '{name}': ROS bounds must satisfy 0 <= min_ros <= max_ros "
                  f"(got {self.min_ros}, {self.max_ros}).")
        if self.temporal_type is TemporalType.VARIABLE_PULSE and self.min_ros == self.max_ros:
            _fail(f"Agent '{name}': a variable_pulse agent needs min_ros < max_ros "
                  f"(got {self.min_ros}, {self.max_ros}).")
        if self.min_interval < 0 or self.min_interval > self.max_interval:
            _fail(f"Agent '{name}': recurrence interval bounds must satisfy 0 <= min_interval <= max_interval "
                  f"(got {self.min_interval}, {self.max_interval}).")
        if self.norm_stdev < 0:
            _fail(f"Agent '{name}': norm_stdev must be non-negative.")
        # severity classes are assigned by independent thresholds, so they must be ordered
        if not 0 <= self.class2_sv <= self.class3_sv:
            _fail(f"Agent '{name}': severity breakpoints must satisfy 0 <= class2_sv <= class3_sv "
                  f"(got {self.class2_sv}, {self.class3_sv}).")
        if self.neighbor_radius < 0 or self.dispersal_rate < 0:
            _fail(f"Agent '{name}': neighbor_radius and dispersal_rate must be non-negative.")
        if self.end_year < self.start_year:
            _fail(f"Agent '{name}': end_year ({self.end_year}) is before start_year ({self.start_year}).")
