"""SIR example where recoveries are scheduled events."""

import sys
from pathlib import Path

# Add parent directory to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from ibmsim.models.sir import SIRParameters, build_sir_scheduling_model
from ibmsim.utils.logger import setup_logger
from configs import load_run_config


def main():
    """Run the scheduling SIR model from the default configuration."""
    logger = setup_logger("SIRScheduling")

    logger.info("=== SIR Simulation with Event Scheduling ===")

    config = load_run_config()
    params = SIRParameters(config['model'])

    model = build_sir_scheduling_model(params, seed=config['simulation']['random_seed'])
    results = model.run(params.steps, show_progress=True)

    logger.info("\n" + model.recorder.get_summary())
    logger.info(f"Recoveries still scheduled at the end: {results['pending_events']}")

    frame = model.recorder.to_dataframe()
    logger.info(f"Epidemic peak at t={frame.loc[frame['I'].idxmax(), 'time']:.1f}")


if __name__ == "__main__":
    main()
