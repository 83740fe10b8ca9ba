"""Rocket staging optimization package."""
from . import utils
from . import optimization
from . import reporting

__all__ = [
    'utils',
    'optimization',
    'reporting'
]
