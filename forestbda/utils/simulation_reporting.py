from forestbda.utils.log import Reporter

r = Reporter()  # get singleton reporter instance

def print_model_time_info(sim, duration, start_time):
    r.report(f"BDA simulation duration: {duration} years, starting at year {start_time}")
    r.report(f"Timestep: {sim.timestep} years, {len(sim.agents)} agent(s), "
             f"{sim.landscape.n_active} active sites")

def print_epidemic_summary(outcome):
    r.report(f"Year {outcome.time}, agent \"{outcome.agent_name}\" (ROS = {outcome.ros}): "
             f"damaged sites = {outcome.total_sites_damaged}, "
             f"cohorts killed = {outcome.total_cohorts_killed}, "
             f"biomass killed = {outcome.total_biomass_killed}, "
             f"mean severity = {outcome.mean_severity:.2f}")
    for code, n_cohorts, n_sites, biomass in zip(outcome.selected_management_areas,
                                                outcome.cohorts_killed_in_ma,
                                                outcome.sites_damaged_in_ma,
                                                outcome.biomass_killed_in_ma):
        r.report(f"    management area {code}: damaged sites = {n_sites}, "
                 f"cohorts killed = {n_cohorts}, biomass killed = {biomass}")
