"""Optimizer selection."""
from enum import Enum

from .problem import Problem
from .solution import Solution
from .solvers.analytical_solver import AnalyticalSolver
from .solvers.brute_force_solver import BruteForceSolver


class OptimizerKind(Enum):
    ANALYTICAL = "Analytical"
    BRUTE_FORCE = "BruteForce"

    @classmethod
    def select(cls, problem: Problem) -> 'OptimizerKind':
        """Analytical for one engine type on exactly two stages, brute force otherwise."""
        if problem.is_single_engine() and problem.stage_count == 2:
            return cls.ANALYTICAL
        return cls.BRUTE_FORCE

    @classmethod
    def parse(cls, text: str) -> 'OptimizerKind':
        key = text.strip().lower().replace("-", "").replace("_", "")
        for kind in cls:
            if kind.value.lower() == key:
                return kind
        raise ValueError(f"Unknown optimizer: {text}")

    def build(self, config=None, verbose: bool = True):
        if self is OptimizerKind.ANALYTICAL:
            return AnalyticalSolver.from_config(config, verbose=verbose)
        return BruteForceSolver.from_config(config, verbose=verbose)

    def optimize(self, problem: Problem, config=None, verbose: bool = True) -> Solution:
        return self.build(config, verbose=verbose).optimize(problem)


def optimize(problem: Problem, config=None, verbose: bool = True) -> Solution:
    """Solve ``problem`` with whichever optimizer its shape calls for."""
    return OptimizerKind.select(problem).optimize(problem, config, verbose=verbose)
