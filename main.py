#!/usr/bin/env python3
"""Main script for rocket staging optimization."""
import json
import sys

from stage_sizer.optimization import MonteCarloRunner, OptimizeError, OptimizerKind
from stage_sizer.reporting import generate_report
from stage_sizer.utils.config import load_config, logger, setup_logging
from stage_sizer.utils.data import UnknownEngineError, load_input_data


def log_solution(solution):
    """Log a stage-by-stage table of the solution."""
    rocket = solution.rocket
    logger.info(f"{solution.optimizer_name} solution ({solution.iterations} evaluations, "
                f"{solution.runtime * 1000:.1f} ms):")
    logger.info(f"  {'Stage':<6}{'Engine':<16}{'Count':>6}{'Propellant (t)':>16}{'Wet (t)':>10}{'dV (m/s)':>10}")
    for index, stage in enumerate(rocket.stages):
        logger.info(
            f"  {index + 1:<6}{stage.engine.name:<16}{stage.engine_count:>6}"
            f"{stage.propellant_mass.tonnes:>16.1f}{stage.wet_mass().tonnes:>10.1f}"
            f"{rocket.stage_delta_v(index).mps:>10.0f}")
    logger.info(f"  Total mass: {rocket.total_mass().tonnes:.1f} t, "
                f"delta-v: {rocket.total_delta_v().mps:.0f} m/s, margin: {solution.margin.mps:.0f} m/s, "
                f"payload fraction: {solution.payload_fraction_percent():.2f}%")


def main():
    """Main optimization routine."""
    setup_logging()
    input_file = sys.argv[1] if len(sys.argv) > 1 else "input_data.json"
    try:
        config = load_config()
        problem, options = load_input_data(input_file)

        if options['optimizer'] == 'auto':
            kind = OptimizerKind.select(problem)
        else:
            kind = OptimizerKind.parse(options['optimizer'])
        logger.info(f"Optimizing {problem.payload.kg:.0f} kg to {problem.target_delta_v.mps:.0f} m/s "
                    f"with {kind.value}")
        solution = kind.optimize(problem, config)
        log_solution(solution)

        mc_results = None
        if 'monte_carlo' in options:
            settings = options['monte_carlo']
            runner = MonteCarloRunner(
                settings['uncertainty'],
                iterations=settings['iterations'],
                seed=settings['seed'],
                config=config,
            )
            mc_results = runner.run(problem)

        print(json.dumps(generate_report(solution, problem, mc_results), indent=4))
        return 0

    except (OptimizeError, UnknownEngineError, ValueError, OSError) as e:
        logger.error(f"Optimization failed: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
