"""Main entry point for the ibmsim simulator."""

import argparse
import sys
from pathlib import Path

from configs import load_run_config
from ibmsim.models.sir import SIRParameters, build_model
from ibmsim.utils.io import save_trajectory, save_yaml
from ibmsim.utils.logger import set_global_level, setup_logger


def parse_args(argv=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="ibmsim: discrete-time individual-based model simulator"
    )
    parser.add_argument(
        "--config",
        type=str,
        default=None,
        help="Path to configuration file (layered over the defaults)",
    )
    parser.add_argument(
        "--output-dir",
        type=str,
        default=None,
        help="Directory to save results",
    )
    parser.add_argument(
        "--steps",
        type=int,
        default=None,
        help="Number of steps (defaults to tmax / dt)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable verbose logging",
    )
    return parser.parse_args(argv)


def main(argv=None):
    """Main function."""
    args = parse_args(argv)

    # Setup logging
    log_level = "DEBUG" if args.verbose else "INFO"
    set_global_level(log_level)
    logger = setup_logger("IBMSim")

    logger.info("=== ibmsim: individual-based model simulator ===")

    try:
        config = load_run_config(args.config)
        sim_config = config['simulation']
        model_config = config['model']
        output_config = config['output']

        seed = args.seed if args.seed is not None else sim_config.get('random_seed')
        params = SIRParameters(model_config)
        steps = args.steps if args.steps is not None else sim_config.get('steps', params.steps)

        logger.info(f"Model: {model_config.get('type', 'sir')}")
        logger.info(
            f"N={params.population}, I0={params.initial_infected}, "
            f"beta={params.beta:.4f}, gamma={params.gamma:.4f}, dt={params.dt}"
        )

        model = build_model(model_config, seed=seed)
        show_progress = args.progress or sim_config.get('show_progress', False)
        results = model.run(steps, show_progress=show_progress)

        logger.info("\n" + model.recorder.get_summary())

        # Save results
        output_dir = Path(args.output_dir or output_config.get('directory', 'results'))
        output_dir.mkdir(parents=True, exist_ok=True)

        results_file = output_dir / "results.yaml"
        save_yaml(results, str(results_file))
        logger.info(f"Results saved to {results_file}")

        if output_config.get('save_trajectory', True):
            trajectory_file = output_dir / "trajectory.csv"
            save_trajectory(model.recorder.to_dataframe(), str(trajectory_file))
            logger.info(f"Trajectory saved to {trajectory_file}")

        logger.info("Simulation completed successfully!")
        return 0

    except Exception as e:
        logger.error(f"Simulation failed: {str(e)}", exc_info=True)
        return 1


if __name__ == "__main__":
    sys.exit(main())
