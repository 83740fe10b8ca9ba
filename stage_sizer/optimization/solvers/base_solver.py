"""Base solver class for optimization."""
from abc import ABC, abstractmethod
import logging
import time
from typing import Tuple

from ..errors import Infeasible, InvalidProblem
from ..problem import Problem, ProblemError
from ..solution import Solution
from ...stage import Rocket
from .solver_logging import setup_solver_logger


class BaseSolver(ABC):
    """Base class for all staging optimizers.

    Subclasses implement ``_solve`` and return the sized rocket plus the
    number of configurations they evaluated; ``optimize`` takes care of
    validation, timing and Solution assembly.
    """

    name = "Base"

    def __init__(self, verbose: bool = True):
        """Initialize solver.

        Args:
            verbose: Log progress messages at INFO; when False they drop to DEBUG
        """
        self.verbose = verbose
        self.logger = setup_solver_logger(self.name)

    def log_info(self, message: str) -> None:
        self.logger.log(logging.INFO if self.verbose else logging.DEBUG, message)

    def optimize(self, problem: Problem) -> Solution:
        """Size a rocket for ``problem``.

        Raises:
            InvalidProblem: The problem failed validation
            Infeasible: No configuration meets the target
            Unsupported: The solver cannot handle this problem shape
        """
        try:
            problem.validate()
        except ProblemError as e:
            raise InvalidProblem(str(e)) from e

        start_time = time.time()
        try:
            rocket, iterations = self._solve(problem)
        except Infeasible as e:
            level = logging.WARNING if self.verbose else logging.DEBUG
            self.logger.log(level, f"Infeasible: {e.reason}")
            raise
        runtime = time.time() - start_time

        margin = rocket.total_delta_v() - problem.target_delta_v
        self.log_info(
            f"{rocket.stage_count()} stages, {rocket.total_mass().tonnes:.1f} t, "
            f"margin {margin.mps:.1f} m/s after {iterations} evaluations in {runtime:.3f}s"
        )
        return Solution(
            rocket=rocket,
            margin=margin,
            iterations=iterations,
            runtime=runtime,
            optimizer_name=self.name,
        )

    @abstractmethod
    def _solve(self, problem: Problem) -> Tuple[Rocket, int]:
        """Return (rocket, iterations) for a validated problem."""
        pass
