###############################################################
#  epidemic.py
###############################################################

from forestbda.constants import NEW_ZONE, LAST_ZONE, NO_ZONE, NO_MANAGEMENT_AREA
from forestbda.sim.epidemic_data import EpidemicOutcome, KillResult
from forestbda.utils.log import Reporter

r = Reporter()


def mark_cohort_for_death(cohort, spp_params, random, site_vulnerability) -> bool:
    """
    Decide whether a cohort at a disturbed site dies.

    The resistant, tolerant and vulnerable host classes are checked
    independently; any class whose age threshold the cohort has reached and
    whose ``site_vulnerability*coefficient`` is at least the site's random
    draw kills the cohort. Species without parameters for the agent are
    never killed.
    """
    if spp_params is None:
        return False
    kill = False
    for host_age, host_vuln in spp_params.host_classes:
        if cohort.age >= host_age and random <= site_vulnerability*host_vuln:
            kill = True
    return kill


def site_severity(vulnerability, class2_sv, class3_sv) -> int:
    """ Severity class of a site that the outbreak reached: the highest breakpoint met. """
    severity = 0
    if vulnerability >= 0:
        severity = 1
    if vulnerability >= class2_sv:
        severity = 2
    if vulnerability >= class3_sv:
        severity = 3
    return severity


def kill_site_cohorts(agent, cohort_store, site, random, site_vulnerability) -> KillResult:
    """
    Kill the cohorts of one site.

    Cohorts are selected with :func:`mark_cohort_for_death` first, then the
    cohort store removes exactly that selection.
    """
    result = KillResult()
    doomed = []
    for cohort in cohort_store.get(site):
        spp_params = agent.species_parameters(cohort.species)
        if mark_cohort_for_death(cohort, spp_params, random, site_vulnerability):
            doomed.append(cohort)
            result.add(cohort, spp_params.cfs_conifer)
    cohort_store.remove_cohorts(site, doomed)
    return result


class Epidemic:
    """
    An agent outbreak over the entire landscape at a single timestep.

    One epidemic per agent per timestep. The external collaborators (resource
    dominance, vulnerability, epicenters) are reached through the engine,
    an instance of :class:`~forestbda.sim.base.DisturbanceEngineBase`; the
    sweep in :meth:`disturb_sites` only reads the vulnerability and outbreak
    zone they leave on the landscape.
    """

    def __init__(self, agent, landscape, current_time, ros, selected_management_areas=None):
        self.agent = agent
        self.landscape = landscape
        self.current_time = current_time
        self.outcome = EpidemicOutcome(agent_name=agent.name,
                                       time=current_time,
                                       ros=ros,
                                       selected_management_areas=selected_management_areas)

    @staticmethod
    def initialize(agent, landscape):
        """
        Prepare the landscape for a new epidemic of ``agent``.

        Sites of the previous outbreak zone become the last zone, every other
        site leaves the zone, and vulnerabilities are cleared.
        """
        landscape.register_agent(agent.name)
        zone = landscape.outbreak_zone[agent.name]
        was_new = zone == NEW_ZONE
        zone[:] = NO_ZONE
        zone[was_new & landscape.active] = LAST_ZONE
        landscape.vulnerability[landscape.active] = 0.

    @classmethod
    def simulate(cls, agent, landscape, engine, current_time, timestep, ros, rng,
                 selected_management_areas=None) -> EpidemicOutcome:
        """ Run one epidemic: compute vulnerability and outbreak zone with the engine, then disturb sites. """
        epidemic = cls(agent, landscape, current_time, ros, selected_management_areas)
        r.report(f"New epidemic of agent \"{agent.name}\" activated (ROS = {ros}).")

        engine.site_resource_dominance(agent, ros, landscape)
        engine.site_resource_dominance_modifier(agent, landscape)

        zone = landscape.outbreak_zone[agent.name]
        if agent.attrs.dispersal:
            # asynchronous: vulnerability without neighborhood effects drives epicenter selection
            engine.site_vulnerability(agent, ros, landscape, consider_neighbors=False)
            engine.new_epicenters(agent, timestep, landscape)
        else:
            # synchronous: every active site can be disturbed
            zone[landscape.active] = NEW_ZONE

        if agent.attrs.neighbor_flag:
            engine.neighbor_resource_dominance(agent, landscape)

        engine.site_vulnerability(agent, ros, landscape, consider_neighbors=agent.attrs.neighbor_flag)

        return epidemic.disturb_sites(rng)

    def disturb_sites(self, rng) -> EpidemicOutcome:
        """
        Go through all active sites and damage them according to their vulnerability.

        One uniform draw is taken per active site, in row-major order, whether
        or not the site is in the outbreak zone.
        """
        agent, landscape, outcome = self.agent, self.landscape, self.outcome
        attrs = agent.attrs
        zone = landscape.outbreak_zone[agent.name]
        severity_map = landscape.severity[agent.name]
        track_areas = bool(outcome.selected_management_areas)

        for site in landscape.active_sites():
            severity = 0
            random = rng.random()
            vulnerability = landscape.vulnerability[site]

            if zone[site] == NEW_ZONE and vulnerability > random:
                severity = site_severity(vulnerability, attrs.class2_sv, attrs.class3_sv)
                kills = kill_site_cohorts(agent, landscape.cohorts, site, random, vulnerability)

                if kills.cohorts_killed > 0:
                    landscape.add_conifers_killed(site, self.current_time, kills.conifers_killed)
                    map_code = landscape.management_area_of(site) if track_areas else NO_MANAGEMENT_AREA
                    outcome.record_site(kills, severity, map_code)
                    landscape.disturbed[site] = True
                    landscape.time_of_last_event[site] = self.current_time
                    landscape.agent_name[site] = agent.name
                else:
                    # no cohort died: not a disturbance
                    severity = 0

            severity_map[site] = severity

        outcome.finalize()
        r.report(f"Agent \"{agent.name}\": {outcome.total_sites_damaged} sites damaged, "
                 f"{outcome.total_cohorts_killed} cohorts killed, mean severity {outcome.mean_severity:.2f}")
        return outcome
