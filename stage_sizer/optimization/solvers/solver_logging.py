"""Logging utilities for optimization solvers."""
import logging
import sys


def setup_solver_logger(solver_name: str, level: int = logging.INFO) -> logging.Logger:
    """Set up a dedicated console logger for a solver.

    Args:
        solver_name: Name of the solver (e.g., 'Analytical', 'BruteForce')
        level: Log level for the solver's handler

    Returns:
        Logger instance configured for the solver
    """
    logger = logging.getLogger(f"solver.{solver_name}")
    logger.setLevel(level)

    # Solvers are constructed repeatedly (Monte Carlo); attach the handler once
    if not logger.handlers:
        ch = logging.StreamHandler(sys.stdout)
        ch.setLevel(level)
        formatter = logging.Formatter(f'[{solver_name}] %(levelname)s - %(message)s')
        ch.setFormatter(formatter)
        logger.addHandler(ch)
        logger.propagate = False

    return logger
