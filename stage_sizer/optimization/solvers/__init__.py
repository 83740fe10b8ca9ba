"""Optimization solvers package."""
from .base_solver import BaseSolver
from .analytical_solver import AnalyticalSolver
from .brute_force_solver import BruteForceSolver

__all__ = [
    'BaseSolver',
    'AnalyticalSolver',
    'BruteForceSolver'
]
