"""Reporting package."""
from .report_generator import generate_report, loss_report, monte_carlo_summary, solution_to_dict

__all__ = [
    'generate_report',
    'loss_report',
    'monte_carlo_summary',
    'solution_to_dict'
]
