"""Report generation functions for optimization results."""
from datetime import datetime
from typing import Optional

from ..optimization.monte_carlo import DistributionSummary, MonteCarloResults
from ..optimization.problem import Problem
from ..optimization.solution import Solution
from ..physics import estimate_losses, leo_delta_v_requirement
from ..stage import Rocket
from ..units import Velocity


def solution_to_dict(solution: Solution, problem: Problem) -> dict:
    """JSON-ready description of a solution and its stages."""
    rocket = solution.rocket
    stages = []
    for index, stage in enumerate(rocket.stages):
        stage_twr = rocket.liftoff_twr() if index == 0 else rocket.stage_twr(index)
        stages.append({
            'stage': index + 1,
            'engine': stage.engine.name,
            'engine_count': stage.engine_count,
            'propellant_kg': stage.propellant_mass.kg,
            'dry_mass_kg': stage.dry_mass().kg,
            'wet_mass_kg': stage.wet_mass().kg,
            'delta_v_mps': rocket.stage_delta_v(index).mps,
            'burn_time_s': stage.burn_time().seconds,
            'twr': stage_twr.value,
        })

    return {
        'target_delta_v_mps': problem.target_delta_v.mps,
        'payload_kg': problem.payload.kg,
        'total_mass_kg': rocket.total_mass().kg,
        'total_delta_v_mps': rocket.total_delta_v().mps,
        'payload_fraction': rocket.payload_fraction().value,
        'margin_mps': solution.margin.mps,
        'margin_percent': solution.margin_percent(problem.target_delta_v),
        'stages': stages,
        'metadata': {
            'optimizer': solution.optimizer_name,
            'iterations': solution.iterations,
            'runtime_ms': solution.runtime * 1000.0,
        },
    }


def _distribution_to_dict(summary: DistributionSummary) -> dict:
    return {
        'mean': summary.mean,
        'std': summary.std,
        'p5': summary.p5,
        'p50': summary.p50,
        'p95': summary.p95,
        'min': summary.min,
        'max': summary.max,
    }


def monte_carlo_summary(results: MonteCarloResults) -> dict:
    return {
        'iterations': results.total_runs,
        'successes': results.successes,
        'failures': results.failures,
        'success_probability': results.success_probability(),
        'delta_v_mps': _distribution_to_dict(results.delta_v_summary()),
        'total_mass_kg': _distribution_to_dict(results.mass_summary()),
        'required_margin_95': results.required_margin(0.95),
        'runtime_ms': results.runtime * 1000.0,
        'seed': results.seed,
    }


def loss_report(rocket: Rocket, target: Velocity) -> dict:
    """Ascent loss estimate for the first stage and how the rocket compares to a LEO requirement."""
    first_burn = rocket.stages[0].burn_time()
    liftoff_twr = rocket.liftoff_twr()
    losses = estimate_losses(first_burn, liftoff_twr)
    requirement = leo_delta_v_requirement(first_burn, liftoff_twr)
    return {
        'gravity_loss_mps': losses.gravity.mps,
        'drag_loss_mps': losses.drag.mps,
        'steering_loss_mps': losses.steering.mps,
        'total_loss_mps': losses.total.mps,
        'leo_requirement_mps': requirement.mps,
        'target_covers_leo': target.mps >= requirement.mps,
    }


def generate_report(solution: Solution, problem: Problem,
                    mc_results: Optional[MonteCarloResults] = None) -> dict:
    """Assemble the full report for a solution and an optional Monte Carlo run."""
    report = {
        'timestamp': datetime.now().isoformat(),
        'solution': solution_to_dict(solution, problem),
        'losses': loss_report(solution.rocket, problem.target_delta_v),
    }
    if mc_results is not None:
        report['monte_carlo'] = monte_carlo_summary(mc_results)
    return report
