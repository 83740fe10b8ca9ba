"""Utility functions for configuration and data loading."""
from .config import CONFIG, load_config, setup_logging
from .data import EngineDatabase, load_input_data

__all__ = [
    'CONFIG',
    'load_config',
    'setup_logging',
    'EngineDatabase',
    'load_input_data'
]
