"""Reference SIR models built on the kernel."""

from dataclasses import dataclass
from typing import Dict, Optional

import numpy as np

from ..core.model import Model
from ..errors import InvalidParameter
from ..sampling import bernoulli_select, choose, delay_sample, make_rng

SIR_STATES = ["S", "I", "R"]
RECOVERY = "Recovery"


@dataclass
class SIRParameters:
    """Parameters of a closed-population SIR epidemic.

    The transmission rate ``beta`` is given directly or derived as
    ``R0 * gamma``, the basic reproduction number of the matching ODE model.
    """

    population: int
    initial_infected: int
    gamma: float
    beta: float
    dt: float
    tmax: float

    def __init__(self, config: Dict):
        """Initialize from the ``model`` section of a configuration.

        Args:
            config: Model configuration dictionary
        """
        self.population = int(config['population'])
        self.initial_infected = int(config.get('initial_infected', 5))
        self.gamma = float(config['gamma'])
        if 'beta' in config:
            self.beta = float(config['beta'])
        else:
            self.beta = float(config['R0']) * self.gamma
        self.dt = float(config.get('dt', 1.0))
        self.tmax = float(config.get('tmax', 100.0))

        self.validate()

    def validate(self) -> None:
        """Check parameter ranges.

        Raises:
            InvalidParameter: On any out-of-range value
        """
        if self.population <= 0:
            raise InvalidParameter(f"population must be positive, got {self.population}")
        if not 0 <= self.initial_infected <= self.population:
            raise InvalidParameter(
                f"initial_infected must lie in [0, {self.population}], "
                f"got {self.initial_infected}"
            )
        for key in ("gamma", "beta", "dt", "tmax"):
            if not np.isfinite(getattr(self, key)):
                raise InvalidParameter(f"{key} must be finite, got {getattr(self, key)}")
        if self.gamma <= 0:
            raise InvalidParameter(f"gamma must be positive, got {self.gamma}")
        if self.beta < 0:
            raise InvalidParameter(f"beta must be non-negative, got {self.beta}")
        if self.dt <= 0 or self.tmax < 0:
            raise InvalidParameter("dt must be positive and tmax non-negative")

    @property
    def steps(self) -> int:
        """Number of steps covering [0, tmax]."""
        return int(round(self.tmax / self.dt))

    @property
    def R0(self) -> float:
        return self.beta / self.gamma


def initial_sir_states(params: SIRParameters, rng: np.random.Generator) -> np.ndarray:
    """Everyone susceptible except ``initial_infected`` randomly chosen persons."""
    states = np.full(params.population, "S", dtype=object)
    infected = choose(rng, np.arange(params.population), params.initial_infected)
    states[infected] = "I"
    return states.astype(str)


def make_infection_process(params: SIRParameters):
    """Infection with force lambda = beta * I / N on every susceptible."""

    def infection_process(model: Model, t: int) -> None:
        foi = params.beta * model.count_by_state("I") / model.count()
        susceptible = model.query_by_state("S")
        infected = bernoulli_select(model.rng, susceptible, foi, params.dt)
        model.queue_update(infected, "I")

    return infection_process


def make_recovery_process(params: SIRParameters):
    """Markov recovery: each infected person recovers at rate gamma."""

    def recovery_process(model: Model, t: int) -> None:
        infected = model.query_by_state("I")
        recovered = bernoulli_select(model.rng, infected, params.gamma, params.dt)
        model.queue_update(recovered, "R")

    return recovery_process


def make_recovery_scheduling_process(params: SIRParameters):
    """Schedule a recovery for every infected person not yet scheduled."""

    def recovery_scheduling_process(model: Model, t: int) -> None:
        infected = model.query_by_state("I")
        to_schedule = np.setdiff1d(infected, model.get_scheduled(RECOVERY))
        if len(to_schedule) > 0:
            delays = delay_sample(model.rng, len(to_schedule), params.gamma, params.dt)
            model.schedule(to_schedule, delays, RECOVERY)

    return recovery_scheduling_process


def recovery_listener(handle, targets: np.ndarray, t: int) -> None:
    handle.queue_update(targets, "R")


def build_sir_model(params: SIRParameters, seed: Optional[int] = None) -> Model:
    """Markov SIR: infection and recovery are both per-step Bernoulli draws.

    Args:
        params: Epidemic parameters
        seed: Random seed

    Returns:
        A model ready to run
    """
    rng = make_rng(seed)
    model = Model(
        params.population,
        SIR_STATES,
        initial_sir_states(params, rng),
        seed=seed,
        dt=params.dt,
        rng=rng,
    )
    model.add_process(make_infection_process(params))
    model.add_process(make_recovery_process(params))
    return model


def build_sir_scheduling_model(params: SIRParameters, seed: Optional[int] = None) -> Model:
    """SIR where recoveries are scheduled events with sampled delays.

    Args:
        params: Epidemic parameters
        seed: Random seed

    Returns:
        A model ready to run
    """
    rng = make_rng(seed)
    model = Model(
        params.population,
        SIR_STATES,
        initial_sir_states(params, rng),
        event_labels=[RECOVERY],
        seed=seed,
        dt=params.dt,
        rng=rng,
    )
    model.register_listener(RECOVERY, recovery_listener)
    model.add_process(make_infection_process(params))
    model.add_process(make_recovery_scheduling_process(params))
    return model


MODEL_BUILDERS = {
    'sir': build_sir_model,
    'sir_scheduling': build_sir_scheduling_model,
}


def build_model(config: Dict, seed: Optional[int] = None) -> Model:
    """Build a reference model from the ``model`` configuration section.

    Raises:
        ValueError: If the model type is unknown
    """
    model_type = config.get('type', 'sir')
    if model_type not in MODEL_BUILDERS:
        raise ValueError(f"Unknown model type: {model_type}")
    return MODEL_BUILDERS[model_type](SIRParameters(config), seed)
