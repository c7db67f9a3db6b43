"""Basic Markov SIR example."""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import numpy as np

from ibmsim import Model, bernoulli_select, choose, make_rng
from ibmsim.utils.logger import setup_logger


def main():
    """Run a Markov SIR model written directly against the kernel."""
    logger = setup_logger("BasicSIR")

    logger.info("=== Basic SIR Simulation ===")

    N = 1000
    I0 = 5
    dt = 0.1
    tmax = 100
    steps = int(tmax / dt)
    gamma = 1 / 10  # recovery rate
    R0 = 2.5
    beta = R0 * gamma

    rng = make_rng(2021)
    initial_states = np.full(N, "S")
    initial_states[choose(rng, np.arange(N), I0)] = "I"

    model = Model(N, ["S", "I", "R"], initial_states, dt=dt, rng=rng)

    def infection_process(model, t):
        foi = beta * model.count_by_state("I") / model.count()
        S = model.query_by_state("S")
        model.queue_update(bernoulli_select(model.rng, S, foi, dt), "I")

    def recovery_process(model, t):
        I = model.query_by_state("I")
        model.queue_update(bernoulli_select(model.rng, I, gamma, dt), "R")

    model.add_process(infection_process)
    model.add_process(recovery_process)

    logger.info(f"Running {steps} steps with beta={beta:.3f}, gamma={gamma:.3f}")
    results = model.run(steps)

    logger.info("\n" + model.recorder.get_summary())
    logger.info(f"Final size: {results['final_R']} of {N}")


if __name__ == "__main__":
    main()
