"""
Outbreak scheduling: when an agent breaks out and with what regional
outbreak status (ROS).

All random draws come from the single ``numpy.random.Generator`` passed in
by the caller, so a run is reproducible from its seed.
"""

from forestbda.sim.agent_data import OutbreakPattern, TemporalType
from forestbda.utils.log import Reporter

r = Reporter()


def _cyclic_uniform_interval(attrs, timestep, rng):
    min_i = int(round(attrs.min_interval))
    max_i = int(round(attrs.max_interval))
    return min_i + int(rng.random()*(max_i - min_i))


def _cyclic_normal_interval(attrs, timestep, rng):
    interval = int(attrs.norm_mean)
    if attrs.norm_stdev != 0:
        # the distribution is sampled twice and only the second draw is used
        interval = int(rng.normal(attrs.norm_mean, attrs.norm_stdev))
        interval = int(rng.normal(attrs.norm_mean, attrs.norm_stdev))
    # centered on the timestep in which the outbreak is applied
    interval -= timestep // 2
    return max(interval, 0)


RECURRENCE_FUNCS = {
    OutbreakPattern.CYCLIC_UNIFORM: _cyclic_uniform_interval,
    OutbreakPattern.CYCLIC_NORMAL : _cyclic_normal_interval,
}


def _pulse_ros(attrs, rng):
    return attrs.max_ros


def _variable_pulse_ros(attrs, rng):
    return int(rng.random()*(attrs.max_ros - attrs.min_ros)) + 1 + attrs.min_ros


INTENSITY_FUNCS = {
    TemporalType.PULSE         : _pulse_ros,
    TemporalType.VARIABLE_PULSE: _variable_pulse_ros,
}


def time_to_next(agent, timestep, rng) -> int:
    """ Draw the number of years until the agent's next outbreak. """
    return RECURRENCE_FUNCS[agent.attrs.random_function](agent.attrs, timestep, rng)


def initialize_schedule(agent, current_time, timestep, rng, landscape=None) -> int:
    """
    Schedule the first outbreak of an agent at setup time.

    Returns the year of the first possible outbreak, which is also written to
    the landscape's ``time_of_next`` variable when a landscape is given.
    """
    attrs = agent.attrs
    agent.time_to_next_epidemic = time_to_next(agent, timestep, rng) + attrs.start_year
    time_of_next = current_time + agent.time_to_next_epidemic - agent.time_since_last_epidemic
    time_of_next = max(time_of_next, timestep, attrs.start_year)
    if landscape is not None:
        landscape.time_of_next[landscape.active] = time_of_next
    return time_of_next


def regional_outbreak_status(agent, current_time, timestep, rng, landscape=None) -> int:
    """
    Decide whether the agent breaks out this timestep and return the ROS.

    An outbreak fires once ``time_since_last_epidemic`` has reached
    ``time_to_next_epidemic``, up to the agent's end year. Firing resets the
    elapsed time and draws the next interval. Without an outbreak the
    agent's minimum ROS is returned; advancing ``time_since_last_epidemic``
    by the timestep is left to the caller.
    """
    attrs = agent.attrs
    if agent.time_to_next_epidemic <= agent.time_since_last_epidemic and current_time <= attrs.end_year:
        agent.time_to_next_epidemic = time_to_next(agent, timestep, rng)
        if landscape is not None:
            landscape.time_of_next[landscape.active] = current_time + agent.time_to_next_epidemic
        agent.time_since_last_epidemic = 0
        ros = INTENSITY_FUNCS[attrs.temporal_type](attrs, rng)
        r.report(f"Agent \"{agent.name}\" outbreak at year {current_time}: ROS = {ros}, "
                 f"next outbreak in {agent.time_to_next_epidemic} years.")
        return ros

    return attrs.min_ros
