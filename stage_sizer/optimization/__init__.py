"""Optimization package."""
from .errors import Infeasible, InvalidProblem, OptimizeError, Unsupported
from .problem import Constraints, Problem, ProblemError
from .solution import Solution
from .solvers import AnalyticalSolver, BruteForceSolver
from .selection import OptimizerKind, optimize
from .uncertainty import ParameterSampler, Uncertainty
from .monte_carlo import MonteCarloResults, MonteCarloRunner
from .parallel_solver import ParallelSolver

__all__ = [
    'Infeasible',
    'InvalidProblem',
    'OptimizeError',
    'Unsupported',
    'Constraints',
    'Problem',
    'ProblemError',
    'Solution',
    'AnalyticalSolver',
    'BruteForceSolver',
    'OptimizerKind',
    'optimize',
    'ParameterSampler',
    'Uncertainty',
    'MonteCarloResults',
    'MonteCarloRunner',
    'ParallelSolver'
]
