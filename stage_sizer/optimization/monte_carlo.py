"""Monte Carlo propagation of engine and structural uncertainty."""
import copy
import math
import time
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np

from ..units import Velocity
from ..utils.config import get_solver_config, logger
from .errors import InvalidProblem
from .parallel_solver import ParallelSolver
from .problem import Problem, ProblemError
from .selection import OptimizerKind
from .solution import Solution
from .uncertainty import ParameterSampler, Uncertainty


def nearest_rank_percentile(samples, p: float) -> float:
    """Percentile by rounding ``p/100 * (n-1)`` to the nearest index (halves round up).

    Returns 0.0 for an empty sample set.
    """
    if len(samples) == 0:
        return 0.0
    ordered = np.sort(np.asarray(samples, dtype=float))
    index = int(math.floor(p / 100.0 * (len(ordered) - 1) + 0.5))
    index = min(max(index, 0), len(ordered) - 1)
    return float(ordered[index])


@dataclass(frozen=True)
class DistributionSummary:
    mean: float
    std: float
    p5: float
    p50: float
    p95: float
    min: float
    max: float

    @classmethod
    def from_samples(cls, samples) -> 'DistributionSummary':
        values = np.asarray(samples, dtype=float)
        if len(values) == 0:
            return cls(0.0, 0.0, 0.0, 0.0, 0.0, 0.0, 0.0)
        return cls(
            mean=float(np.mean(values)),
            std=float(np.std(values, ddof=1)) if len(values) > 1 else 0.0,
            p5=nearest_rank_percentile(values, 5),
            p50=nearest_rank_percentile(values, 50),
            p95=nearest_rank_percentile(values, 95),
            min=float(np.min(values)),
            max=float(np.max(values)),
        )


@dataclass
class MonteCarloResults:
    """Samples and counters from a Monte Carlo run; statistics are computed on demand."""
    delta_v_samples: List[float]
    mass_samples: List[float]
    successes: int
    failures: int
    total_runs: int
    target_delta_v: Velocity
    runtime: float
    nominal: Solution
    seed: Optional[int] = field(default=None)

    def success_probability(self) -> float:
        if self.total_runs == 0:
            return 0.0
        return self.successes / self.total_runs

    def mean_delta_v(self) -> float:
        return float(np.mean(self.delta_v_samples)) if self.delta_v_samples else 0.0

    def std_delta_v(self) -> float:
        if len(self.delta_v_samples) < 2:
            return 0.0
        return float(np.std(self.delta_v_samples, ddof=1))

    def mean_mass(self) -> float:
        return float(np.mean(self.mass_samples)) if self.mass_samples else 0.0

    def std_mass(self) -> float:
        if len(self.mass_samples) < 2:
            return 0.0
        return float(np.std(self.mass_samples, ddof=1))

    def percentile(self, p: float) -> float:
        """Delta-v at percentile ``p`` (0-100)."""
        return nearest_rank_percentile(self.delta_v_samples, p)

    def mass_percentile(self, p: float) -> float:
        return nearest_rank_percentile(self.mass_samples, p)

    def required_margin(self, confidence: float) -> float:
        """Extra delta-v needed so the target is met with probability ``confidence`` (0-1)."""
        if not self.delta_v_samples:
            return 0.0
        low = self.percentile((1.0 - confidence) * 100.0)
        return max(0.0, self.target_delta_v.mps - low)

    def delta_v_summary(self) -> DistributionSummary:
        return DistributionSummary.from_samples(self.delta_v_samples)

    def mass_summary(self) -> DistributionSummary:
        return DistributionSummary.from_samples(self.mass_samples)


class MonteCarloRunner:
    """Re-solves a problem under random parameter perturbations.

    Every sample perturbs each engine and the structural ratio, picks an
    optimizer for the perturbed problem and records the achieved delta-v
    and total mass. A sample counts as a success when it still meets the
    target; samples whose optimizer fails are counted as failures.

    Each sample draws from its own generator spawned from ``seed`` by
    sample index, so a seeded run is reproducible regardless of how the
    worker threads are scheduled.
    """

    def __init__(self, uncertainty: Uncertainty, iterations: int = 1000, seed: Optional[int] = None,
                 max_workers: Optional[int] = None, show_progress: bool = False, config=None):
        if iterations < 1:
            raise ValueError("Monte Carlo needs at least one iteration")
        self.uncertainty = uncertainty
        self.iterations = iterations
        self.seed = seed
        self.config = config
        self.parallel = ParallelSolver({'max_workers': max_workers, 'show_progress': show_progress})

        # Samples already run in parallel; keep each brute-force search single-threaded
        self.sample_config = copy.deepcopy(config) if config is not None else {}
        self.sample_config.setdefault("optimization", {}).setdefault("brute_force", {}).update(
            {"max_workers": 1, "show_progress": False})

    @classmethod
    def from_config(cls, uncertainty: Uncertainty, config=None) -> 'MonteCarloRunner':
        settings = get_solver_config(config, "monte_carlo")
        return cls(
            uncertainty,
            iterations=settings["iterations"],
            seed=settings["seed"],
            max_workers=settings["max_workers"],
            show_progress=settings["show_progress"],
            config=config,
        )

    def run(self, problem: Problem) -> MonteCarloResults:
        """Run the nominal solve and all perturbed samples.

        Raises:
            InvalidProblem: The nominal problem failed validation
            OptimizeError: The nominal problem itself could not be solved
        """
        try:
            problem.validate()
        except ProblemError as e:
            raise InvalidProblem(str(e)) from e

        start_time = time.time()
        nominal = OptimizerKind.select(problem).optimize(problem, self.config)
        logger.info(
            f"Nominal solution: {nominal.delta_v().mps:.1f} m/s, {nominal.total_mass().tonnes:.1f} t "
            f"({nominal.optimizer_name})")

        if self.uncertainty.is_zero():
            logger.info("No uncertainty specified, returning the nominal solution as the only sample")
            return MonteCarloResults(
                delta_v_samples=[nominal.delta_v().mps],
                mass_samples=[nominal.total_mass().kg],
                successes=1,
                failures=0,
                total_runs=1,
                target_delta_v=problem.target_delta_v,
                runtime=time.time() - start_time,
                nominal=nominal,
                seed=self.seed,
            )

        seeds = np.random.SeedSequence(self.seed).spawn(self.iterations)
        outcomes = self.parallel.map(
            lambda seed_seq: self._run_sample(problem, seed_seq), seeds, "Monte Carlo samples")

        delta_v_samples, mass_samples = [], []
        successes = failures = 0
        target = problem.target_delta_v.mps
        for outcome in outcomes:
            if outcome is None:
                failures += 1
                continue
            dv, mass = outcome
            delta_v_samples.append(dv)
            mass_samples.append(mass)
            if dv >= target:
                successes += 1

        results = MonteCarloResults(
            delta_v_samples=delta_v_samples,
            mass_samples=mass_samples,
            successes=successes,
            failures=failures,
            total_runs=self.iterations,
            target_delta_v=problem.target_delta_v,
            runtime=time.time() - start_time,
            nominal=nominal,
            seed=self.seed,
        )
        logger.info(
            f"Monte Carlo: {self.iterations} runs, success probability "
            f"{results.success_probability() * 100:.1f}%, {failures} failed, "
            f"{results.runtime:.2f}s")
        return results

    def _run_sample(self, problem: Problem, seed_seq: np.random.SeedSequence) -> Optional[Tuple[float, float]]:
        """Solve one perturbed problem; None if its optimizer fails."""
        sampler = ParameterSampler(self.uncertainty, np.random.default_rng(seed_seq))
        engines = [sampler.sample_engine(engine) for engine in problem.engines]
        structural_ratio = sampler.sample_structural_ratio(problem.constraints.structural_ratio)
        perturbed = problem.with_engines(engines).with_constraints(
            problem.constraints.with_structural_ratio(structural_ratio))
        try:
            solution = OptimizerKind.select(perturbed).optimize(perturbed, self.sample_config, verbose=False)
        except Exception as e:
            logger.debug(f"Monte Carlo sample failed: {e}")
            return None
        return solution.delta_v().mps, solution.total_mass().kg
